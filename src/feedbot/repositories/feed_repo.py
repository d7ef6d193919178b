"""
Repository for the feeds table.
"""

from __future__ import annotations

import aiosqlite

from feedbot.datatypes.feed_datatypes import Feed
from feedbot.util.logger import get_logger

logger = get_logger("feed_repo")


class FeedRepository:
    """CRUD for the feeds table."""

    async def get_by_uri(self, conn: aiosqlite.Connection, uri: str) -> Feed | None:
        async with conn.execute("SELECT id, uri FROM feeds WHERE uri = ?", (uri,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return Feed(id=row[0], uri=row[1])

    async def get_or_create(self, conn: aiosqlite.Connection, uri: str) -> Feed:
        """Return the feed for ``uri``, inserting it first if it is new."""
        await conn.execute("INSERT OR IGNORE INTO feeds (uri) VALUES (?)", (uri,))
        feed = await self.get_by_uri(conn, uri)
        if feed is None:
            # The row was inserted or already present a moment ago
            raise aiosqlite.IntegrityError(f"feed {uri!r} vanished during get_or_create")
        return feed
