"""
Command handlers, one coroutine per verb.

Each handler receives a :class:`CommandContext` whose ``args`` are the
space-separated tokens after the verb. Handlers answer bad input with a reply
and let collaborator failures propagate to the router.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, List

from feedbot.command.config_resolver import EMBED, WEBHOOK, apply_setting
from feedbot.command.contact_resolver import parse_contact
from feedbot.command.context import CommandContext
from feedbot.command.permissions import require_admin
from feedbot.command.validation import (
    ensure_guild_config,
    lookup_guild_subscription,
    resolve_target_channel,
)
from feedbot.datatypes.feed_datatypes import GuildConfig, Subscription, TriState, UserContact, format_flag
from feedbot.errors import SubscriptionExistsError, SubscriptionNotFoundError
from feedbot.util.format_utils import paginate
from feedbot.util.logger import get_logger

logger = get_logger("command_handlers")

CommandHandler = Callable[[CommandContext], Awaitable[None]]

HELP_TEXT = """
**feedbot**

**commands:**
- help: print this message
- add <uri> [channel]: add an RSS feed by its URI; optionally specifying a channel where updates will be posted
- remove <id>: remove an RSS feed by its ID (see the list command)
- list: list the RSS feeds active in this guild, and any additional configuration options
- set channel <id> [channel]: set the channel a given feed should write to; will assume current channel if unspecified
- set contact <user|channel>: set the emergency contact for this guild; defaults to the server owner
- set embed <on|off|inherit> [id]: enable or disable embeds for this guild; optionally specifying a feed to change this behavior for
- set webhook <on|off|inherit> [id]: enable or disable webhooks for this guild; optionally specifying a feed to change this behavior for

the inherit flag may only be used when specifying a feed-specific overwrite!

**how it works:**
every 60 minutes, feedbot will ping the feeds its users have specified. for feeds that have new content, feedbot
will find every discord channel with a subscription, and send an update.

**permissions:**
feedbot will only respect users who possess the **ADMINISTRATOR** permission in a guild.

feedbot by default only requires **READ MESSAGES** and **SEND MESSAGES**.

if embeds are enabled for a feed, the **EMBED LINKS** permission must be given.
if webhooks are enabled for a feed, the **MANAGE WEBHOOKS** permission must be given.

**emergency contact:**
if a permission is missing, or a feed is broken, feedbot will notify the emergency contact.
"""

ADD_USAGE = "**usage:** `add <uri> [channel]`; please omit spaces from arguments!"
REMOVE_USAGE = "**usage:** `remove <id>`; please omit spaces from arguments!"
SET_USAGE = "**usage:** set <channel|contact|embed|webhook> ..., see help command."
SET_UNKNOWN = "subcommand must be one of channel|contact|embed|webhook, see help command."
CHANNEL_USAGE = "**usage:** `set channel <id> [channel]`; please omit spaces from arguments!"
CONTACT_USAGE = (
    "**usage:** `set contact <user|channel>`; please use a user mention, user id, "
    "or channel mention, and omit spaces."
)
CONTACT_INVALID = "contact must be a user mention, user id, or channel mention; not a user name or channel name."


# ---------------------------------------------------------------------------
# help / add / remove
# ---------------------------------------------------------------------------

async def help_command(ctx: CommandContext) -> None:
    await ctx.reply(HELP_TEXT)


async def add_command(ctx: CommandContext) -> None:
    """add <uri> [channel]"""
    if not await require_admin(ctx):
        return

    if len(ctx.args) not in (1, 2):
        await ctx.reply(ADD_USAGE)
        return
    uri = ctx.args[0]
    if not uri:
        await ctx.reply(ADD_USAGE)
        return

    channel_id = await resolve_target_channel(ctx, ctx.args[1] if len(ctx.args) == 2 else None)
    if channel_id is None:
        return

    db = ctx.services.db
    feed = await db.get_or_create_feed(uri)
    try:
        subscription = await db.add_subscription(channel_id, ctx.guild_id, feed.id)
    except SubscriptionExistsError as exists:
        await ctx.reply(f"this subscription (#{exists.subscription.id}) already exists!")
        return

    await ctx.reply(f"subscription #{subscription.id} created!")


async def remove_command(ctx: CommandContext) -> None:
    """remove <id>"""
    if not await require_admin(ctx):
        return

    if len(ctx.args) != 1:
        await ctx.reply(REMOVE_USAGE)
        return

    subscription = await lookup_guild_subscription(ctx, ctx.args[0])
    if subscription is None:
        return

    try:
        await ctx.services.db.destroy_subscription(subscription.id)
    except SubscriptionNotFoundError:
        # Removed by someone else between lookup and delete
        pass
    await ctx.reply(f"subscription #{subscription.id} has been deleted.")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

def format_overwrite(value: TriState, effective: bool) -> str:
    if value is TriState.INHERIT:
        return f"inherit ({format_flag(effective)})"
    return str(value)


def build_listing(config: GuildConfig, subscriptions: List[Subscription]) -> List[str]:
    """Return the ``list`` output as lines, header first."""
    lines = [
        f"**Guild Contact:** {config.contact.describe()}\n",
        f"**Embeds?** {format_flag(config.embeds)}\n",
        f"**Webhooks?** {format_flag(config.webhooks)}\n",
        "\n",
        "**Sub ID | Channel | Feed URI | Embed? | Webhook?**\n",
        "\n",
    ]
    if not subscriptions:
        lines.append("no subscriptions yet, see the `add` command.\n")
    for subscription in subscriptions:
        lines.append(
            f"{subscription.id} | {subscription.channel_id.mention()} | `{subscription.feed.uri}` | "
            f"{format_overwrite(subscription.overwrite.embeds, config.effective_embeds(subscription))} | "
            f"{format_overwrite(subscription.overwrite.webhooks, config.effective_webhooks(subscription))}\n"
        )
    return lines


async def list_command(ctx: CommandContext) -> None:
    """list"""
    if not await require_admin(ctx):
        return

    config = await ensure_guild_config(ctx, ctx.guild_id)
    subscriptions = await ctx.services.db.get_subscriptions(ctx.guild_id)

    pages = paginate(build_listing(config, subscriptions), ctx.services.list_page_size)
    logger.debug("[LIST] Guild %s: %d subscriptions in %d messages", ctx.guild_id, len(subscriptions), len(pages))
    for page in pages:
        await ctx.reply(page)


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------

async def set_channel(ctx: CommandContext) -> None:
    """set channel <id> [channel]"""
    if len(ctx.args) not in (2, 3):
        await ctx.reply(CHANNEL_USAGE)
        return

    subscription = await lookup_guild_subscription(ctx, ctx.args[1])
    if subscription is None:
        return

    channel_id = await resolve_target_channel(ctx, ctx.args[2] if len(ctx.args) == 3 else None)
    if channel_id is None:
        return

    await ctx.services.db.modify_subscription_channel(subscription.id, channel_id)
    await ctx.reply(f"subscription #{subscription.id} will now write to {channel_id.mention()}")


async def set_contact(ctx: CommandContext) -> None:
    """set contact <user|channel>"""
    if len(ctx.args) != 2:
        await ctx.reply(CONTACT_USAGE)
        return

    # A mention-prefixed invocation also mentions the bot itself
    identity = ctx.services.session.identity
    mentioned = [
        user_id for user_id in ctx.mentioned_user_ids
        if identity is None or user_id != identity.bot_user_id
    ]
    contact = parse_contact(ctx.args[1], mentioned)
    if contact is None:
        await ctx.reply(CONTACT_INVALID)
        return

    await ensure_guild_config(ctx, ctx.guild_id)
    await ctx.services.db.modify_guild_contact(ctx.guild_id, contact)
    logger.info("[SET] Guild %s contact set to %s", ctx.guild_id, contact.to_tag())
    await ctx.reply("the guild's contact has been changed.")


async def set_embed(ctx: CommandContext) -> None:
    await apply_setting(ctx, EMBED)


async def set_webhook(ctx: CommandContext) -> None:
    await apply_setting(ctx, WEBHOOK)


SET_SUBCOMMANDS: Dict[str, CommandHandler] = {
    "channel": set_channel,
    "contact": set_contact,
    "embed": set_embed,
    "webhook": set_webhook,
}


async def set_command(ctx: CommandContext) -> None:
    """set <channel|contact|embed|webhook> [...]"""
    if not await require_admin(ctx):
        return

    if not ctx.args:
        await ctx.reply(SET_USAGE)
        return

    subcommand = SET_SUBCOMMANDS.get(ctx.args[0])
    if subcommand is None:
        await ctx.reply(SET_UNKNOWN)
        return
    await subcommand(ctx)


# ---------------------------------------------------------------------------
# maintenance
# ---------------------------------------------------------------------------

async def migrate_command(ctx: CommandContext) -> None:
    """dbg~migrate: create a missing guild config from the guild owner.

    Only the application owner may run it; anyone else is ignored without a
    reply. An existing config is never overwritten.
    """
    if not ctx.services.session.is_owner(ctx.author_id):
        return
    guild_id = ctx.guild_id
    if guild_id is None:
        return

    guild = await ctx.services.directory.resolve_guild(guild_id)
    created = await ctx.services.db.create_guild_config(guild_id, UserContact(guild.owner_id))
    if created:
        await ctx.reply(f"guild config created; contact is the guild owner (`{guild.owner_id}`).")
    else:
        await ctx.reply("this guild already has a config, nothing changed.")


COMMANDS: Dict[str, CommandHandler] = {
    "help": help_command,
    "add": add_command,
    "remove": remove_command,
    "list": list_command,
    "set": set_command,
    "dbg~migrate": migrate_command,
}
