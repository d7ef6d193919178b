"""
Domain records for feeds, subscriptions and guild configuration.

- :class:`TriState` is a per-subscription override value: on, off, or inherit
  from the guild default.
- :class:`Overwrite` holds the two tri-state overrides of a subscription.
- :class:`GuildConfig` holds the guild-wide defaults. These are plain booleans
  and can never be inherit.
- :class:`ChannelContact` / :class:`UserContact` form the tagged emergency
  contact reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from feedbot.datatypes.discord_datatypes import ChannelID, GuildID, UserID


class TriState(Enum):
    """Override value that either forces a setting or defers to the guild default."""

    INHERIT = "inherit"
    ON = "on"
    OFF = "off"

    @classmethod
    def parse(cls, token: str) -> Optional["TriState"]:
        """Parse ``on``/``off``/``inherit`` exactly; return None for anything else."""
        for member in cls:
            if member.value == token:
                return member
        return None

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "TriState":
        """Map None to INHERIT, True to ON and False to OFF."""
        if value is None:
            return cls.INHERIT
        return cls.ON if value else cls.OFF

    @property
    def is_definite(self) -> bool:
        return self is not TriState.INHERIT

    def to_bool(self) -> Optional[bool]:
        """Return the forced boolean, or None when inheriting."""
        if self is TriState.INHERIT:
            return None
        return self is TriState.ON

    def resolve(self, default: bool) -> bool:
        """Return the effective value given the guild-wide default."""
        if self is TriState.INHERIT:
            return default
        return self is TriState.ON

    def __str__(self) -> str:
        return self.value


def format_flag(value: bool) -> str:
    """Format a definite setting the same way TriState formats ON/OFF."""
    return str(TriState.from_bool(value))


@dataclass(frozen=True, slots=True)
class ChannelContact:
    """Emergency contact that is a guild channel."""

    channel_id: ChannelID

    TAG = "c"

    def to_tag(self) -> str:
        return f"{self.TAG}:{self.channel_id}"

    def describe(self) -> str:
        return f"channel {self.channel_id.mention()}"


@dataclass(frozen=True, slots=True)
class UserContact:
    """Emergency contact that is a single user."""

    user_id: UserID

    TAG = "u"

    def to_tag(self) -> str:
        return f"{self.TAG}:{self.user_id}"

    def describe(self) -> str:
        # Raw id in code formatting so listing the config does not ping the user
        return f"user `{self.user_id}`"


ContactRef = Union[ChannelContact, UserContact]


def parse_contact_tag(tag: str) -> ContactRef:
    """Parse a stored ``c:<id>`` / ``u:<id>`` contact reference.

    Raises:
        ValueError: If the tag is not one of the two known forms.
    """
    kind, sep, raw_id = tag.partition(":")
    if not sep:
        raise ValueError(f"Malformed contact reference: {tag!r}")
    if kind == ChannelContact.TAG:
        return ChannelContact(ChannelID(raw_id))
    if kind == UserContact.TAG:
        return UserContact(UserID(raw_id))
    raise ValueError(f"Unknown contact reference kind: {tag!r}")


@dataclass(slots=True)
class Feed:
    """An external content source identified by its URI."""

    id: int
    uri: str


@dataclass(slots=True)
class Overwrite:
    """Per-subscription overrides of the guild-wide delivery settings."""

    embeds: TriState = TriState.INHERIT
    webhooks: TriState = TriState.INHERIT


@dataclass(slots=True)
class Subscription:
    """Binding of one feed to one delivery channel in one guild."""

    id: int
    feed: Feed
    guild_id: GuildID
    channel_id: ChannelID
    overwrite: Overwrite = field(default_factory=Overwrite)


@dataclass(slots=True)
class GuildConfig:
    """Guild-wide delivery defaults and emergency contact."""

    guild_id: GuildID
    contact: ContactRef
    embeds: bool = False
    webhooks: bool = False

    def __post_init__(self) -> None:
        for name in ("embeds", "webhooks"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"GuildConfig.{name} must be a definite bool, not {getattr(self, name)!r}")

    def effective_embeds(self, subscription: Subscription) -> bool:
        return subscription.overwrite.embeds.resolve(self.embeds)

    def effective_webhooks(self, subscription: Subscription) -> bool:
        return subscription.overwrite.webhooks.resolve(self.webhooks)
