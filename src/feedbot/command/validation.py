"""
Argument validation shared by the command handlers.

Every helper here answers bad input with a reply and returns ``None``.
Collaborator failures propagate unchanged.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from feedbot.datatypes.discord_datatypes import ChannelID, GuildID
from feedbot.datatypes.feed_datatypes import GuildConfig, Subscription, UserContact
from feedbot.errors import GuildConfigNotFoundError, SubscriptionNotFoundError
from feedbot.util.logger import get_logger

if TYPE_CHECKING:
    from feedbot.command.context import CommandContext

logger = get_logger("validation")

CHANNEL_MENTION = re.compile(r"<#(\d+)>")

SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1

NOT_A_NUMBER = "`id` must be a number!"
NOT_FOUND = "could not find a subscription with that ID, check the list again?"
USE_CHANNEL_MENTION = "when specifying a channel ID, please use a #channel mention!"
UNKNOWN_CHANNEL = "could not find that channel, is feedbot allowed to see it?"
FOREIGN_CHANNEL = "that channel does not belong to this guild."


def parse_channel_mention(token: str) -> Optional[ChannelID]:
    """Return the channel ID of an exact ``<#digits>`` token, else None."""
    match = CHANNEL_MENTION.fullmatch(token)
    return ChannelID(match.group(1)) if match else None


def parse_subscription_id(token: str) -> Optional[int]:
    """Parse a plain decimal subscription ID (digits only, optional leading minus).

    Values outside SQLite's signed 64-bit INTEGER range are rejected like any
    other non-number.
    """
    if not re.fullmatch(r"-?\d+", token):
        return None
    value = int(token)
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        return None
    return value


def cross_guild_reply(subscription_id: int) -> str:
    return f"subscription #{subscription_id} does not exist in this guild."


async def lookup_guild_subscription(ctx: "CommandContext", raw_id: str) -> Optional[Subscription]:
    """Resolve ``raw_id`` to a subscription owned by the invoking guild.

    Replies and returns None when the id is not a number, does not exist, or
    belongs to another guild.
    """
    subscription_id = parse_subscription_id(raw_id)
    if subscription_id is None:
        await ctx.reply(NOT_A_NUMBER)
        return None

    try:
        subscription = await ctx.services.db.get_subscription(subscription_id)
    except SubscriptionNotFoundError:
        await ctx.reply(NOT_FOUND)
        return None

    if subscription.guild_id != ctx.guild_id:
        logger.info(
            "[VALIDATION] Guild %s referenced subscription #%d of guild %s",
            ctx.guild_id, subscription_id, subscription.guild_id,
        )
        await ctx.reply(cross_guild_reply(subscription_id))
        return None

    return subscription


async def resolve_target_channel(ctx: "CommandContext", token: Optional[str]) -> Optional[ChannelID]:
    """Pick the destination channel: an explicit ``<#id>`` mention, else the invoking channel.

    An explicit channel must resolve and belong to the invoking guild.
    """
    if token is None:
        return ctx.channel_id

    channel_id = parse_channel_mention(token)
    if channel_id is None:
        await ctx.reply(USE_CHANNEL_MENTION)
        return None

    channel = await ctx.services.directory.resolve_channel(channel_id)
    if channel is None:
        await ctx.reply(UNKNOWN_CHANNEL)
        return None
    if channel.guild_id != ctx.guild_id:
        await ctx.reply(FOREIGN_CHANNEL)
        return None
    return channel_id


async def ensure_guild_config(ctx: "CommandContext", guild_id: GuildID) -> GuildConfig:
    """Return the guild's configuration, creating it with the guild owner as contact if missing."""
    db = ctx.services.db
    try:
        return await db.get_guild_config(guild_id)
    except GuildConfigNotFoundError:
        guild = await ctx.services.directory.resolve_guild(guild_id)
        await db.create_guild_config(guild_id, UserContact(guild.owner_id))
        logger.info("[VALIDATION] Created missing guild config for guild %s", guild_id)
        return await db.get_guild_config(guild_id)
