"""
feedbot
=======

Discord bot that lets server administrators subscribe channels to RSS/Atom
feeds and configure how updates are delivered.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. FEEDBOT_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise the repository root (grandparent of this package).
    """
    if env_home := os.getenv("FEEDBOT_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from feedbot.bot.directory import DiscordDirectory
from feedbot.bot.session import BotSession
from feedbot.command.context import CommandServices
from feedbot.command.permissions import PermissionChecker
from feedbot.configuration.app_configuration import app_config
from feedbot.database.database import FeedDatabase, get_db
from feedbot.errors import RepositoryError
from feedbot.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for reading command messages and resolving members and roles."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def build_services(bot: discord.Bot, db: FeedDatabase) -> CommandServices:
    """Wire the collaborators shared by every command dispatch."""
    directory = DiscordDirectory(bot, timeout_seconds=app_config.request_timeout_seconds)
    return CommandServices(
        db=db,
        directory=directory,
        session=BotSession(),
        permissions=PermissionChecker(directory),
        list_page_size=app_config.list_page_size,
    )


def load_cogs(discord_bot_instance: discord.Bot, services: CommandServices) -> None:
    """Register the feedbot cogs with the bot."""
    from feedbot.bot.cogs import command_listener, events_listener

    events_listener.setup(discord_bot_instance, services)
    command_listener.setup(discord_bot_instance, services)

    logger.info("All cogs loaded successfully.")


def create_bot(db: FeedDatabase) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, build_services(bot, db))
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection lifecycle."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, db: FeedDatabase) -> None:
    """Close the Discord connection and the database."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except discord.DiscordException as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    await db.shutdown()
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database and the bot, returning an exit code."""
    token = load_environment()
    db = get_db()

    try:
        logger.info("Initializing database...")
        await db.initialize(app_config.database_path)
    except RepositoryError as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    bot = None
    exit_code = 0
    try:
        bot = create_bot(db)
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, db)

    return exit_code


def main() -> int:
    """Console entrypoint; returns the process exit code."""
    logger.info("Starting feedbot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
