"""
Exception hierarchy for feedbot.

Only collaborator failures are exceptions here. Bad arguments, missing
permissions and cross-guild references are answered with a chat reply by the
command handlers and never raised.

- :class:`FeedbotError` is the base class for failures of the database, the
  Discord directory or message delivery. The command router logs these and
  keeps them out of chat.
- :class:`SubscriptionExistsError`, :class:`SubscriptionNotFoundError` and
  :class:`GuildConfigNotFoundError` are conditions signalled by the repository.
  Handlers catch them and turn them into replies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedbot.datatypes.feed_datatypes import Subscription


class FeedbotError(Exception):
    """Base class for failures of feedbot's collaborators."""


class RepositoryError(FeedbotError):
    """The feed/subscription store failed."""


class DirectoryError(FeedbotError):
    """A Discord member, role, guild or channel lookup failed."""


class TransportError(FeedbotError):
    """Sending a message to Discord failed."""


class SubscriptionExistsError(RepositoryError):
    """Raised when adding a subscription that is already present.

    Attributes:
        subscription: The subscription that already exists.
    """

    def __init__(self, subscription: "Subscription") -> None:
        super().__init__(f"subscription #{subscription.id} already exists")
        self.subscription = subscription


class SubscriptionNotFoundError(RepositoryError):
    """Raised when a subscription ID does not exist."""

    def __init__(self, subscription_id: int) -> None:
        super().__init__(f"subscription #{subscription_id} not found")
        self.subscription_id = subscription_id


class GuildConfigNotFoundError(RepositoryError):
    """Raised when a guild has no configuration record yet."""

    def __init__(self, guild_id: object) -> None:
        super().__init__(f"no configuration for guild {guild_id}")
        self.guild_id = guild_id
