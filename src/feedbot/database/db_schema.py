"""
Database schema initialization.

Creates the feeds, subscriptions and guild_configs tables together with their
indexes and timestamp triggers, and records the schema version.
"""

import aiosqlite
from feedbot.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates and updates the database schema."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all tables, indexes and triggers if they do not exist yet.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._create_triggers(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized")

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS feeds (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                uri TEXT NOT NULL UNIQUE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # embeds/webhooks overwrites: NULL = inherit, 1 = on, 0 = off.
        # AUTOINCREMENT keeps deleted subscription ids from being handed out again.
        await db.execute("""
            CREATE TABLE IF NOT EXISTS subscriptions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                feed_id INTEGER NOT NULL,
                guild_id INTEGER NOT NULL,
                channel_id INTEGER NOT NULL,
                embeds INTEGER DEFAULT NULL CHECK (embeds IN (0, 1)),
                webhooks INTEGER DEFAULT NULL CHECK (webhooks IN (0, 1)),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (feed_id, channel_id, guild_id),
                FOREIGN KEY (feed_id) REFERENCES feeds(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS guild_configs (
                guild_id INTEGER PRIMARY KEY,
                contact TEXT NOT NULL,
                embeds INTEGER NOT NULL DEFAULT 0 CHECK (embeds IN (0, 1)),
                webhooks INTEGER NOT NULL DEFAULT 0 CHECK (webhooks IN (0, 1)),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute("CREATE INDEX IF NOT EXISTS idx_subscriptions_guild ON subscriptions(guild_id, id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_subscriptions_feed ON subscriptions(feed_id)")

    @staticmethod
    async def _create_triggers(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS update_subscriptions_timestamp
            AFTER UPDATE ON subscriptions
            FOR EACH ROW
            BEGIN
                UPDATE subscriptions SET updated_at = CURRENT_TIMESTAMP
                WHERE id = NEW.id;
            END
        """)

        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS update_guild_configs_timestamp
            AFTER UPDATE ON guild_configs
            FOR EACH ROW
            BEGIN
                UPDATE guild_configs SET updated_at = CURRENT_TIMESTAMP
                WHERE guild_id = NEW.guild_id;
            END
        """)

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
