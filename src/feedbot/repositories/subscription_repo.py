"""
Repository for the subscriptions table.

Subscriptions are always returned joined with their feed so callers can show
the feed URI without a second query.
"""

from __future__ import annotations

from typing import List

import aiosqlite

from feedbot.datatypes.discord_datatypes import ChannelID, GuildID
from feedbot.datatypes.feed_datatypes import Feed, Overwrite, Subscription, TriState
from feedbot.util.logger import get_logger

logger = get_logger("subscription_repo")

_SELECT_SUBSCRIPTION = """
    SELECT s.id, s.guild_id, s.channel_id, s.embeds, s.webhooks, f.id, f.uri
    FROM subscriptions s
    JOIN feeds f ON f.id = s.feed_id
"""

# Column names for the two overwrite fields; never interpolate user input here
OVERWRITE_COLUMNS = ("embeds", "webhooks")


def _tristate_to_db(value: TriState) -> int | None:
    as_bool = value.to_bool()
    return None if as_bool is None else int(as_bool)


def _tristate_from_db(value: int | None) -> TriState:
    return TriState.from_bool(None if value is None else bool(value))


def _row_to_subscription(row) -> Subscription:
    return Subscription(
        id=row[0],
        guild_id=GuildID(row[1]),
        channel_id=ChannelID(row[2]),
        overwrite=Overwrite(
            embeds=_tristate_from_db(row[3]),
            webhooks=_tristate_from_db(row[4]),
        ),
        feed=Feed(id=row[5], uri=row[6]),
    )


class SubscriptionRepository:
    """CRUD for the subscriptions table."""

    async def get(self, conn: aiosqlite.Connection, subscription_id: int) -> Subscription | None:
        async with conn.execute(
            _SELECT_SUBSCRIPTION + " WHERE s.id = ?",
            (subscription_id,),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_subscription(row) if row is not None else None

    async def find(
        self, conn: aiosqlite.Connection, feed_id: int, channel_id: ChannelID, guild_id: GuildID
    ) -> Subscription | None:
        """Look up the subscription of ``feed_id`` in the given channel and guild."""
        async with conn.execute(
            _SELECT_SUBSCRIPTION + " WHERE s.feed_id = ? AND s.channel_id = ? AND s.guild_id = ?",
            (feed_id, int(channel_id), int(guild_id)),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_subscription(row) if row is not None else None

    async def get_for_guild(self, conn: aiosqlite.Connection, guild_id: GuildID) -> List[Subscription]:
        """Return every subscription of a guild ordered by id."""
        async with conn.execute(
            _SELECT_SUBSCRIPTION + " WHERE s.guild_id = ? ORDER BY s.id",
            (int(guild_id),),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_subscription(row) for row in rows]

    async def insert(
        self, conn: aiosqlite.Connection, feed_id: int, channel_id: ChannelID, guild_id: GuildID
    ) -> int:
        """Insert a subscription and return its new id."""
        cursor = await conn.execute(
            "INSERT INTO subscriptions (feed_id, guild_id, channel_id) VALUES (?, ?, ?)",
            (feed_id, int(guild_id), int(channel_id)),
        )
        new_id = cursor.lastrowid
        await cursor.close()
        return int(new_id)

    async def delete(self, conn: aiosqlite.Connection, subscription_id: int) -> bool:
        """Delete a subscription. Return whether a row was removed."""
        cursor = await conn.execute("DELETE FROM subscriptions WHERE id = ?", (subscription_id,))
        removed = cursor.rowcount > 0
        await cursor.close()
        return removed

    async def set_channel(self, conn: aiosqlite.Connection, subscription_id: int, channel_id: ChannelID) -> bool:
        cursor = await conn.execute(
            "UPDATE subscriptions SET channel_id = ? WHERE id = ?",
            (int(channel_id), subscription_id),
        )
        updated = cursor.rowcount > 0
        await cursor.close()
        return updated

    async def set_overwrite(
        self, conn: aiosqlite.Connection, subscription_id: int, column: str, value: TriState
    ) -> bool:
        """Write one overwrite column (``embeds`` or ``webhooks``)."""
        if column not in OVERWRITE_COLUMNS:
            raise ValueError(f"Unknown overwrite column: {column!r}")
        cursor = await conn.execute(
            f"UPDATE subscriptions SET {column} = ? WHERE id = ?",
            (_tristate_to_db(value), subscription_id),
        )
        updated = cursor.rowcount > 0
        await cursor.close()
        return updated
