import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from feedbot.bot.directory import DiscordDirectory
from feedbot.datatypes.discord_datatypes import ChannelID, GuildID, RoleID, UserID
from feedbot.errors import DirectoryError, TransportError


def http_error(cls=discord.HTTPException, status=500):
    return cls(SimpleNamespace(status=status, reason="error"), "boom")


def make_role(role_id, administrator):
    return SimpleNamespace(id=role_id, permissions=SimpleNamespace(administrator=administrator))


@pytest.fixture
def guild():
    guild = MagicMock()
    guild.id = 100
    guild.owner_id = 3
    guild.get_member.return_value = SimpleNamespace(id=1, roles=[make_role(10, True), make_role(11, False)])
    guild.get_role.side_effect = lambda role_id: {10: make_role(10, True)}.get(role_id)
    guild.fetch_member = AsyncMock()
    guild.fetch_roles = AsyncMock(return_value=[make_role(11, False)])
    return guild


@pytest.fixture
def client(guild):
    client = MagicMock()
    client.get_guild.return_value = guild
    client.fetch_guild = AsyncMock(return_value=guild)
    client.get_channel.return_value = None
    client.fetch_channel = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_resolve_guild_falls_back_to_fetch(client, guild):
    client.get_guild.return_value = None
    directory = DiscordDirectory(client)

    info = await directory.resolve_guild(GuildID(100))

    assert info.owner_id == UserID(3)
    client.fetch_guild.assert_awaited_once_with(100)


@pytest.mark.asyncio
async def test_resolve_member_from_cache(client):
    member = await DiscordDirectory(client).resolve_member(GuildID(100), UserID(1))

    assert member.role_ids == (RoleID(10), RoleID(11))


@pytest.mark.asyncio
async def test_resolve_member_fetch_failure_is_directory_error(client, guild):
    guild.get_member.return_value = None
    guild.fetch_member.side_effect = http_error(discord.NotFound, 404)

    with pytest.raises(DirectoryError):
        await DiscordDirectory(client).resolve_member(GuildID(100), UserID(5))


@pytest.mark.asyncio
async def test_resolve_role_cached_and_fetched(client):
    directory = DiscordDirectory(client)

    assert (await directory.resolve_role(GuildID(100), RoleID(10))).administrator is True
    assert (await directory.resolve_role(GuildID(100), RoleID(11))).administrator is False

    with pytest.raises(DirectoryError):
        await directory.resolve_role(GuildID(100), RoleID(12))


@pytest.mark.asyncio
async def test_live_calls_have_a_deadline(client, guild):
    async def hang(_):
        await asyncio.sleep(10)

    guild.get_member.return_value = None
    guild.fetch_member.side_effect = hang

    with pytest.raises(DirectoryError):
        await DiscordDirectory(client, timeout_seconds=0.01).resolve_member(GuildID(100), UserID(5))


@pytest.mark.asyncio
async def test_resolve_channel(client):
    client.fetch_channel.return_value = SimpleNamespace(id=1234, guild=SimpleNamespace(id=100))
    directory = DiscordDirectory(client)

    info = await directory.resolve_channel(ChannelID(1234))
    assert info.guild_id == GuildID(100)

    client.fetch_channel.side_effect = http_error(discord.Forbidden, 403)
    assert await directory.resolve_channel(ChannelID(1234)) is None


@pytest.mark.asyncio
async def test_send_message(client):
    channel = SimpleNamespace(id=1000, send=AsyncMock())
    client.get_channel.return_value = channel

    await DiscordDirectory(client).send_message(ChannelID(1000), "hello")

    channel.send.assert_awaited_once_with("hello")


@pytest.mark.asyncio
async def test_send_failures_are_transport_errors(client):
    directory = DiscordDirectory(client)
    client.fetch_channel.side_effect = http_error(discord.NotFound, 404)
    with pytest.raises(TransportError):
        await directory.send_message(ChannelID(1000), "hello")

    channel = SimpleNamespace(id=1000, send=AsyncMock(side_effect=http_error(discord.Forbidden, 403)))
    client.get_channel.return_value = channel
    with pytest.raises(TransportError):
        await directory.send_message(ChannelID(1000), "hello")
