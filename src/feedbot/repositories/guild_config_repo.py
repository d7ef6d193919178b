"""
Repository for the guild_configs table.
"""

from __future__ import annotations

import aiosqlite

from feedbot.datatypes.discord_datatypes import GuildID
from feedbot.datatypes.feed_datatypes import ContactRef, GuildConfig, parse_contact_tag
from feedbot.util.logger import get_logger

logger = get_logger("guild_config_repo")

# Column names for the two guild-wide flags; never interpolate user input here
FLAG_COLUMNS = ("embeds", "webhooks")


class GuildConfigRepository:
    """CRUD for the guild_configs table only."""

    async def get(self, conn: aiosqlite.Connection, guild_id: GuildID) -> GuildConfig | None:
        """Fetch a guild's configuration row."""
        async with conn.execute(
            "SELECT guild_id, contact, embeds, webhooks FROM guild_configs WHERE guild_id = ?",
            (int(guild_id),),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        return GuildConfig(
            guild_id=GuildID(row[0]),
            contact=parse_contact_tag(row[1]),
            embeds=bool(row[2]),
            webhooks=bool(row[3]),
        )

    async def insert(self, conn: aiosqlite.Connection, config: GuildConfig) -> bool:
        """Insert a configuration row unless one exists. Return whether it was inserted."""
        cursor = await conn.execute(
            """
            INSERT OR IGNORE INTO guild_configs (guild_id, contact, embeds, webhooks)
            VALUES (?, ?, ?, ?)
            """,
            (
                int(config.guild_id),
                config.contact.to_tag(),
                1 if config.embeds else 0,
                1 if config.webhooks else 0,
            ),
        )
        inserted = cursor.rowcount > 0
        await cursor.close()
        return inserted

    async def set_contact(self, conn: aiosqlite.Connection, guild_id: GuildID, contact: ContactRef) -> bool:
        cursor = await conn.execute(
            "UPDATE guild_configs SET contact = ? WHERE guild_id = ?",
            (contact.to_tag(), int(guild_id)),
        )
        updated = cursor.rowcount > 0
        await cursor.close()
        return updated

    async def set_flag(self, conn: aiosqlite.Connection, guild_id: GuildID, column: str, value: bool) -> bool:
        """Write one guild-wide flag (``embeds`` or ``webhooks``)."""
        if column not in FLAG_COLUMNS:
            raise ValueError(f"Unknown guild flag column: {column!r}")
        if not isinstance(value, bool):
            raise TypeError(f"Guild-wide {column} must be a definite bool, not {value!r}")
        cursor = await conn.execute(
            f"UPDATE guild_configs SET {column} = ? WHERE guild_id = ?",
            (1 if value else 0, int(guild_id)),
        )
        updated = cursor.rowcount > 0
        await cursor.close()
        return updated
