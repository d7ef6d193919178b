"""
Type-safe wrappers for Discord identifiers.

Discord snowflakes are 64-bit integers that also travel as strings (message
content, mentions, JSON). These wrappers give one consistent representation
for guild, channel, user and role IDs so they cannot be mixed up at call sites.
"""

from __future__ import annotations

from typing import Union


class Snowflake:
    """
    Base class for a Discord snowflake ID.

    The value is stored as a canonical decimal string. Construction accepts an
    int, a digit string or another instance of the same class.

    Example:
        >>> gid = GuildID("123456789012345678")
        >>> gid.to_int()
        123456789012345678
        >>> str(gid)
        '123456789012345678'
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        """
        Args:
            value: The snowflake ID as a string, int, or wrapper of the same type.

        Raises:
            ValueError: If the value is not a non-negative integer.
        """
        if isinstance(value, type(self)):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value!r}")

        as_int = int(value.strip()) if isinstance(value, str) else value
        if as_int < 0:
            raise ValueError(f"{type(self).__name__} must be non-negative, got {value!r}")
        self._value = str(as_int)

    def to_int(self) -> int:
        """Convert to an integer for Discord API calls."""
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))


class GuildID(Snowflake):
    """Snowflake ID of a Discord guild (server)."""

    __slots__ = ()

    @classmethod
    def from_guild(cls, guild) -> "GuildID":
        return cls(guild.id)


class ChannelID(Snowflake):
    """Snowflake ID of a Discord channel."""

    __slots__ = ()

    @classmethod
    def from_channel(cls, channel) -> "ChannelID":
        return cls(channel.id)

    def mention(self) -> str:
        """Return the ``<#id>`` mention form."""
        return f"<#{self._value}>"


class UserID(Snowflake):
    """Snowflake ID of a Discord user or guild member."""

    __slots__ = ()

    @classmethod
    def from_user(cls, user) -> "UserID":
        return cls(user.id)

    def mention(self) -> str:
        """Return the ``<@id>`` mention form."""
        return f"<@{self._value}>"


class RoleID(Snowflake):
    """Snowflake ID of a guild role."""

    __slots__ = ()

    @classmethod
    def from_role(cls, role) -> "RoleID":
        return cls(role.id)
