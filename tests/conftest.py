"""
Pytest configuration and fixtures for feedbot tests.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add src directory to path so imports work without installing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from feedbot.bot.session import BotSession  # noqa: E402
from feedbot.command.context import CommandContext, CommandServices  # noqa: E402
from feedbot.command.permissions import PermissionChecker  # noqa: E402
from feedbot.database.database import FeedDatabase  # noqa: E402
from feedbot.database.db_connection import ConnectionManager  # noqa: E402
from feedbot.datatypes.discord_datatypes import UserID  # noqa: E402

from fakes import BOT_USER, OWNER, FakeDirectory, make_message  # noqa: E402


@pytest_asyncio.fixture
async def db(tmp_path):
    database = FeedDatabase(ConnectionManager())
    await database.initialize(tmp_path / "feedbot.db")
    try:
        yield database
    finally:
        await database.shutdown()


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def session():
    session = BotSession()
    session.bind(UserID(BOT_USER), UserID(OWNER))
    return session


@pytest.fixture
def services(db, directory, session):
    return CommandServices(
        db=db,
        directory=directory,
        session=session,
        permissions=PermissionChecker(directory),
        list_page_size=1900,
    )


@pytest.fixture
def make_ctx(services):
    """Factory: ``make_ctx("set", "embed", "on", author=MEMBER)``."""
    def _make(verb, *args, **message_kwargs):
        return CommandContext(
            services=services,
            message=make_message(**message_kwargs),
            verb=verb,
            args=list(args),
        )
    return _make
