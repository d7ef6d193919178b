"""Message listener Cog for feedbot.

Feeds every created message into the :class:`CommandRouter`.
"""

import discord
from discord.ext import commands

from feedbot.command.context import CommandServices
from feedbot.command.router import CommandRouter
from feedbot.util.logger import get_logger

logger = get_logger("command_listener")


class CommandListenerCog(commands.Cog):
    """Cog that routes chat messages to feedbot commands."""

    def __init__(self, discord_bot_instance, services: CommandServices):
        self.bot = discord_bot_instance
        self.router = CommandRouter(services)
        logger.info("[COMMAND LISTENER] Command listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        await self.router.dispatch(message)


def setup(discord_bot_instance, services: CommandServices):
    discord_bot_instance.add_cog(CommandListenerCog(discord_bot_instance, services))
