"""SQLite persistence: connection management, schema and the FeedDatabase repository."""
