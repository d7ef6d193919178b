"""
Per-dispatch command context and the long-lived services it points at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import discord

from feedbot.bot.session import BotSession
from feedbot.datatypes.discord_datatypes import ChannelID, GuildID, UserID

if TYPE_CHECKING:
    from feedbot.bot.directory import DiscordDirectory
    from feedbot.command.permissions import PermissionChecker
    from feedbot.database.database import FeedDatabase


@dataclass(slots=True)
class CommandServices:
    """Collaborators shared by every dispatch; built once at startup."""

    db: "FeedDatabase"
    directory: "DiscordDirectory"
    session: BotSession
    permissions: "PermissionChecker"
    list_page_size: int = 1900


@dataclass(slots=True)
class CommandContext:
    """One inbound command: the message, its parsed arguments and the services."""

    services: CommandServices
    message: discord.Message
    verb: str
    args: List[str] = field(default_factory=list)

    @property
    def guild_id(self) -> Optional[GuildID]:
        guild = self.message.guild
        return GuildID.from_guild(guild) if guild is not None else None

    @property
    def channel_id(self) -> ChannelID:
        return ChannelID.from_channel(self.message.channel)

    @property
    def author_id(self) -> UserID:
        return UserID.from_user(self.message.author)

    @property
    def mentioned_user_ids(self) -> List[UserID]:
        """IDs of users mentioned in the message, in message order."""
        return [UserID.from_user(user) for user in self.message.mentions]

    async def reply(self, text: str) -> None:
        """Send ``text`` to the channel the command came from."""
        await self.services.directory.send_message(self.channel_id, text)
