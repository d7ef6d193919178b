"""
Feed/subscription store used by the command handlers.

The FeedDatabase class is the single repository interface the command layer
talks to. It coordinates the table repositories over one shared connection:

- schema: table/index creation (SchemaManager)
- feeds: FeedRepository
- subscriptions: SubscriptionRepository
- guild configuration: GuildConfigRepository

Every aiosqlite failure is re-raised as :class:`RepositoryError` so the
command router can tell infrastructure failures apart from bugs. Lookups
that miss raise the dedicated "not found"/"already exists" errors, and the
handlers turn those into chat replies.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List

import aiosqlite

from feedbot.database.db_connection import ConnectionManager, db_connection
from feedbot.database.db_schema import SchemaManager
from feedbot.datatypes.discord_datatypes import ChannelID, GuildID
from feedbot.datatypes.feed_datatypes import ContactRef, Feed, GuildConfig, Subscription, TriState
from feedbot.errors import (
    GuildConfigNotFoundError,
    RepositoryError,
    SubscriptionExistsError,
    SubscriptionNotFoundError,
)
from feedbot.repositories.feed_repo import FeedRepository
from feedbot.repositories.guild_config_repo import GuildConfigRepository
from feedbot.repositories.subscription_repo import SubscriptionRepository
from feedbot.util.logger import get_logger

logger = get_logger("database")


@asynccontextmanager
async def _wrap_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except aiosqlite.Error as exc:
        raise RepositoryError(f"{operation} failed: {exc}") from exc


class FeedDatabase:
    """
    Repository for feeds, subscriptions and guild configuration.

    Lifecycle:
        1. ``await initialize(path)`` at startup
        2. use the query/modify methods
        3. ``await shutdown()`` at exit
    """

    def __init__(self, connection: ConnectionManager | None = None):
        self._connection = connection or db_connection
        self._feeds = FeedRepository()
        self._subscriptions = SubscriptionRepository()
        self._guild_configs = GuildConfigRepository()

    async def initialize(self, db_path: Path) -> None:
        """Open the connection and create the schema.

        Raises:
            RepositoryError: If the database cannot be opened or migrated.
        """
        async with _wrap_errors("database initialization"):
            await self._connection.open(db_path)
            await SchemaManager.initialize_schema(self._connection.connection)
        logger.info("[DATABASE] Database initialized at %s", db_path)

    async def shutdown(self) -> None:
        await self._connection.close()
        logger.info("[DATABASE] Database shutdown complete")

    # ------------------------------------------------------------------
    # Feeds & subscriptions
    # ------------------------------------------------------------------

    async def get_or_create_feed(self, uri: str) -> Feed:
        async with _wrap_errors("get_or_create_feed"):
            async with self._connection.transaction() as conn:
                feed = await self._feeds.get_or_create(conn, uri)
        logger.debug("[DATABASE] Resolved feed #%d for %s", feed.id, uri)
        return feed

    async def add_subscription(self, channel_id: ChannelID, guild_id: GuildID, feed_id: int) -> Subscription:
        """Subscribe ``channel_id`` in ``guild_id`` to a feed.

        Raises:
            SubscriptionExistsError: If the same feed/channel/guild binding exists;
                carries the existing subscription.
        """
        async with _wrap_errors("add_subscription"):
            async with self._connection.transaction() as conn:
                existing = await self._subscriptions.find(conn, feed_id, channel_id, guild_id)
                if existing is not None:
                    raise SubscriptionExistsError(existing)
                new_id = await self._subscriptions.insert(conn, feed_id, channel_id, guild_id)
                subscription = await self._subscriptions.get(conn, new_id)

        if subscription is None:
            raise RepositoryError(f"subscription #{new_id} missing right after insert")
        logger.info("[DATABASE] Created subscription #%d (feed #%d) in guild %s", new_id, feed_id, guild_id)
        return subscription

    async def get_subscription(self, subscription_id: int) -> Subscription:
        """
        Raises:
            SubscriptionNotFoundError: If no subscription has that id.
        """
        async with _wrap_errors("get_subscription"):
            async with self._connection.read() as conn:
                subscription = await self._subscriptions.get(conn, subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        return subscription

    async def get_subscriptions(self, guild_id: GuildID) -> List[Subscription]:
        async with _wrap_errors("get_subscriptions"):
            async with self._connection.read() as conn:
                return await self._subscriptions.get_for_guild(conn, guild_id)

    async def destroy_subscription(self, subscription_id: int) -> None:
        async with _wrap_errors("destroy_subscription"):
            async with self._connection.transaction() as conn:
                removed = await self._subscriptions.delete(conn, subscription_id)
        if not removed:
            raise SubscriptionNotFoundError(subscription_id)
        logger.info("[DATABASE] Destroyed subscription #%d", subscription_id)

    async def modify_subscription_channel(self, subscription_id: int, channel_id: ChannelID) -> None:
        async with _wrap_errors("modify_subscription_channel"):
            async with self._connection.transaction() as conn:
                updated = await self._subscriptions.set_channel(conn, subscription_id, channel_id)
        if not updated:
            raise SubscriptionNotFoundError(subscription_id)

    async def modify_overwrite_embeds(self, subscription_id: int, value: TriState) -> None:
        await self._modify_overwrite(subscription_id, "embeds", value)

    async def modify_overwrite_webhooks(self, subscription_id: int, value: TriState) -> None:
        await self._modify_overwrite(subscription_id, "webhooks", value)

    async def _modify_overwrite(self, subscription_id: int, column: str, value: TriState) -> None:
        async with _wrap_errors(f"modify_overwrite_{column}"):
            async with self._connection.transaction() as conn:
                updated = await self._subscriptions.set_overwrite(conn, subscription_id, column, value)
        if not updated:
            raise SubscriptionNotFoundError(subscription_id)

    # ------------------------------------------------------------------
    # Guild configuration
    # ------------------------------------------------------------------

    async def get_guild_config(self, guild_id: GuildID) -> GuildConfig:
        """
        Raises:
            GuildConfigNotFoundError: If the guild has no configuration yet.
        """
        async with _wrap_errors("get_guild_config"):
            async with self._connection.read() as conn:
                config = await self._guild_configs.get(conn, guild_id)
        if config is None:
            raise GuildConfigNotFoundError(guild_id)
        return config

    async def create_guild_config(self, guild_id: GuildID, contact: ContactRef) -> bool:
        """Create a default configuration for a guild. Return False if one already existed."""
        async with _wrap_errors("create_guild_config"):
            async with self._connection.transaction() as conn:
                created = await self._guild_configs.insert(conn, GuildConfig(guild_id=guild_id, contact=contact))
        if created:
            logger.info("[DATABASE] Created guild config for guild %s (contact %s)", guild_id, contact.to_tag())
        return created

    async def modify_guild_contact(self, guild_id: GuildID, contact: ContactRef) -> None:
        async with _wrap_errors("modify_guild_contact"):
            async with self._connection.transaction() as conn:
                updated = await self._guild_configs.set_contact(conn, guild_id, contact)
        if not updated:
            raise GuildConfigNotFoundError(guild_id)

    async def modify_guild_embeds(self, guild_id: GuildID, value: bool) -> None:
        await self._modify_guild_flag(guild_id, "embeds", value)

    async def modify_guild_webhooks(self, guild_id: GuildID, value: bool) -> None:
        await self._modify_guild_flag(guild_id, "webhooks", value)

    async def _modify_guild_flag(self, guild_id: GuildID, column: str, value: bool) -> None:
        async with _wrap_errors(f"modify_guild_{column}"):
            async with self._connection.transaction() as conn:
                updated = await self._guild_configs.set_flag(conn, guild_id, column, value)
        if not updated:
            raise GuildConfigNotFoundError(guild_id)


# Global database instance
database = FeedDatabase()


def get_db() -> FeedDatabase:
    """Return the global FeedDatabase instance."""
    return database
