"""
Discord directory and transport adapter.

Wraps the py-cord client behind the small set of lookups the command layer
needs. Every lookup goes cache-first and falls back to a live API call on a
miss. Every live call is bounded by a deadline.

Lookups return plain records (:class:`MemberInfo`, :class:`RoleInfo`, ...)
rather than discord objects so the command layer can be exercised with fakes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Tuple, TypeVar

import discord

from feedbot.datatypes.discord_datatypes import ChannelID, GuildID, RoleID, UserID
from feedbot.errors import DirectoryError, TransportError
from feedbot.util.logger import get_logger

logger = get_logger("directory")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class MemberInfo:
    user_id: UserID
    role_ids: Tuple[RoleID, ...]


@dataclass(frozen=True, slots=True)
class RoleInfo:
    role_id: RoleID
    administrator: bool


@dataclass(frozen=True, slots=True)
class GuildInfo:
    guild_id: GuildID
    owner_id: UserID


@dataclass(frozen=True, slots=True)
class ChannelInfo:
    channel_id: ChannelID
    # None for DMs and other channels outside a guild
    guild_id: Optional[GuildID]


class DiscordDirectory:
    """Member/role/guild/channel lookups and message delivery over a py-cord client."""

    def __init__(self, client: discord.Client, timeout_seconds: float = 10.0):
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def _live(self, what: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise DirectoryError(f"{what} timed out after {self.timeout_seconds}s") from exc

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------

    async def _guild(self, guild_id: GuildID) -> discord.Guild:
        guild = self.client.get_guild(int(guild_id))
        if guild is not None:
            return guild
        logger.debug("[DIRECTORY] Guild %s not cached, fetching", guild_id)
        try:
            return await self._live(f"fetch_guild({guild_id})", self.client.fetch_guild(int(guild_id)))
        except discord.HTTPException as exc:
            raise DirectoryError(f"could not resolve guild {guild_id}: {exc}") from exc

    async def resolve_guild(self, guild_id: GuildID) -> GuildInfo:
        guild = await self._guild(guild_id)
        return GuildInfo(guild_id=GuildID.from_guild(guild), owner_id=UserID(guild.owner_id))

    async def resolve_member(self, guild_id: GuildID, user_id: UserID) -> MemberInfo:
        """Resolve a guild member and its role IDs.

        Raises:
            DirectoryError: If neither the cache nor the API knows the member.
        """
        guild = await self._guild(guild_id)
        member = guild.get_member(int(user_id))
        if member is None:
            logger.debug("[DIRECTORY] Member %s of guild %s not cached, fetching", user_id, guild_id)
            try:
                member = await self._live(f"fetch_member({user_id})", guild.fetch_member(int(user_id)))
            except discord.HTTPException as exc:
                raise DirectoryError(f"could not resolve member {user_id} in guild {guild_id}: {exc}") from exc
        return MemberInfo(
            user_id=UserID.from_user(member),
            role_ids=tuple(RoleID.from_role(role) for role in member.roles),
        )

    async def resolve_role(self, guild_id: GuildID, role_id: RoleID) -> RoleInfo:
        """Resolve a role's administrator bit.

        Raises:
            DirectoryError: If the role cannot be found in the cache or the API.
        """
        guild = await self._guild(guild_id)
        role = guild.get_role(int(role_id))
        if role is None:
            logger.debug("[DIRECTORY] Role %s of guild %s not cached, fetching", role_id, guild_id)
            try:
                roles = await self._live(f"fetch_roles({guild_id})", guild.fetch_roles())
            except discord.HTTPException as exc:
                raise DirectoryError(f"could not fetch roles of guild {guild_id}: {exc}") from exc
            role = next((candidate for candidate in roles if candidate.id == int(role_id)), None)
            if role is None:
                raise DirectoryError(f"role {role_id} does not exist in guild {guild_id}")
        return RoleInfo(role_id=RoleID.from_role(role), administrator=role.permissions.administrator)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _channel(self, channel_id: ChannelID) -> Optional[Any]:
        channel = self.client.get_channel(int(channel_id))
        if channel is not None:
            return channel
        try:
            return await self._live(f"fetch_channel({channel_id})", self.client.fetch_channel(int(channel_id)))
        except (discord.NotFound, discord.Forbidden):
            return None
        except discord.HTTPException as exc:
            raise DirectoryError(f"could not resolve channel {channel_id}: {exc}") from exc

    async def resolve_channel(self, channel_id: ChannelID) -> Optional[ChannelInfo]:
        """Resolve a channel; None if it does not exist or is not visible to the bot."""
        channel = await self._channel(channel_id)
        if channel is None:
            return None
        guild = getattr(channel, "guild", None)
        return ChannelInfo(
            channel_id=ChannelID.from_channel(channel),
            guild_id=GuildID.from_guild(guild) if guild is not None else None,
        )

    async def send(self, channel: discord.abc.Messageable, text: str) -> None:
        """Send ``text`` to an already-resolved channel."""
        try:
            await self._live("send", channel.send(text))
        except DirectoryError as exc:
            raise TransportError(str(exc)) from exc
        except discord.HTTPException as exc:
            raise TransportError(f"could not send message: {exc}") from exc

    async def send_message(self, channel_id: ChannelID, text: str) -> None:
        """Send ``text`` to a channel by ID.

        Raises:
            TransportError: If the channel is unknown or the send fails.
        """
        channel = await self._channel(channel_id)
        if channel is None:
            raise TransportError(f"channel {channel_id} is not reachable")
        await self.send(channel, text)
