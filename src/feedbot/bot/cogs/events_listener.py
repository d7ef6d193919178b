"""Event listener Cog for feedbot.

Handles bot lifecycle events: binding the session identity on READY and
creating a default configuration when the bot joins a guild.
"""

import discord
from discord.ext import commands

from feedbot.command.context import CommandServices
from feedbot.configuration.app_configuration import app_config
from feedbot.datatypes.discord_datatypes import GuildID, UserID
from feedbot.datatypes.feed_datatypes import UserContact
from feedbot.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle handlers."""

    def __init__(self, discord_bot_instance, services: CommandServices):
        """
        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        services:
            Shared command services; the session identity is bound here.
        """
        self.bot = discord_bot_instance
        self.services = services
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    async def _fetch_owner_id(self) -> UserID | None:
        try:
            info = await self.bot.application_info()
        except discord.HTTPException as exc:
            logger.error("[EVENTS LISTENER] Could not fetch application info, owner commands disabled: %s", exc)
            return None
        if info.team is not None:
            return UserID(info.team.owner_id)
        return UserID.from_user(info.owner)

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """
        Handle bot startup.

        1. Binds the session identity (own mention and application owner) once;
           READY fires again on reconnects and those are ignored.
        2. Sets the presence.
        """
        if self.bot.user is None:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")
            return

        session = self.services.session
        if not session.is_ready:
            owner_id = await self._fetch_owner_id()
            session.bind(UserID.from_user(self.bot.user), owner_id)

        await self.bot.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(type=discord.ActivityType.watching, name=app_config.status_text),
        )
        logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")

    @commands.Cog.listener(name="on_guild_join")
    async def on_guild_join(self, guild: discord.Guild):
        """Create the default guild config with the guild owner as emergency contact."""
        guild_id = GuildID.from_guild(guild)
        logger.debug(f"[EVENTS LISTENER] Bot joined guild: {guild.name} (ID: {guild.id})")

        created = await self.services.db.create_guild_config(guild_id, UserContact(UserID(guild.owner_id)))
        if created:
            logger.info("[EVENTS LISTENER] Created default config for guild %s", guild_id)
        else:
            logger.debug("[EVENTS LISTENER] Guild %s already had a config", guild_id)


def setup(discord_bot_instance, services: CommandServices):
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, services))
