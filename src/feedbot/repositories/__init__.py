"""Repository layer for per-table database access."""
from feedbot.repositories.feed_repo import FeedRepository
from feedbot.repositories.subscription_repo import SubscriptionRepository
from feedbot.repositories.guild_config_repo import GuildConfigRepository

__all__ = [
    "FeedRepository",
    "SubscriptionRepository",
    "GuildConfigRepository",
]
