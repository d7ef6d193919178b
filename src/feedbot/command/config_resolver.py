"""
Resolution and mutation of the embed/webhook delivery settings.

A subscription's effective setting is its overwrite when that is ``on`` or
``off``; an ``inherit`` overwrite falls back to the guild-wide default. There
is exactly one fallback hop.

``set embed|webhook <on|off|inherit> [id]`` writes the guild default when no
subscription id is given (``inherit`` is refused there) and the
subscription's overwrite otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from feedbot.command.validation import ensure_guild_config, lookup_guild_subscription
from feedbot.datatypes.feed_datatypes import TriState, format_flag
from feedbot.util.logger import get_logger

if TYPE_CHECKING:
    from feedbot.command.context import CommandContext

logger = get_logger("config_resolver")

INVALID_VALUE = "parameter must be one of on|off|inherit"
INHERIT_NEEDS_ID = "`inherit` is only a valid flag on overwrites, please specify on|off"


@dataclass(frozen=True, slots=True)
class DeliverySetting:
    """One of the two overridable delivery settings."""

    command: str   # verb after ``set``
    noun: str      # name used in replies
    field: str     # attribute on GuildConfig / Overwrite

    @property
    def usage(self) -> str:
        return f"**usage:** `set {self.command} <on|off|inherit> [id]`"


EMBED = DeliverySetting(command="embed", noun="embeds", field="embeds")
WEBHOOK = DeliverySetting(command="webhook", noun="webhooks", field="webhooks")


def describe_guild_change(setting: DeliverySetting, value: bool) -> str:
    if value:
        return f"feedbot will now post updates in this guild using {setting.noun}, unless overridden elsewhere."
    return f"feedbot will no longer post updates in this guild using {setting.noun}, unless overridden elsewhere."


def describe_overwrite_change(setting: DeliverySetting, subscription_id: int, value: TriState, default: bool) -> str:
    if value is TriState.ON:
        return f"subscription #{subscription_id} will now post updates using {setting.noun}."
    if value is TriState.OFF:
        return f"subscription #{subscription_id} will no longer post updates using {setting.noun}."
    return (
        f"subscription #{subscription_id} will default to the guild-wide behavior for {setting.noun} "
        f"(currently {format_flag(default)})."
    )


async def apply_setting(ctx: "CommandContext", setting: DeliverySetting) -> None:
    """Handle ``set embed ...`` / ``set webhook ...``; ``ctx.args[0]`` is the setting name."""
    if len(ctx.args) not in (2, 3):
        await ctx.reply(setting.usage)
        return

    value = TriState.parse(ctx.args[1])
    if value is None:
        await ctx.reply(INVALID_VALUE)
        return

    guild_id = ctx.guild_id
    db = ctx.services.db

    if len(ctx.args) == 2:
        if not value.is_definite:
            await ctx.reply(INHERIT_NEEDS_ID)
            return
        await ensure_guild_config(ctx, guild_id)
        enabled = value is TriState.ON
        if setting is EMBED:
            await db.modify_guild_embeds(guild_id, enabled)
        else:
            await db.modify_guild_webhooks(guild_id, enabled)
        logger.info("[CONFIG] Guild %s set %s=%s", guild_id, setting.field, value)
        await ctx.reply(describe_guild_change(setting, enabled))
        return

    subscription = await lookup_guild_subscription(ctx, ctx.args[2])
    if subscription is None:
        return

    if setting is EMBED:
        await db.modify_overwrite_embeds(subscription.id, value)
    else:
        await db.modify_overwrite_webhooks(subscription.id, value)
    logger.info(
        "[CONFIG] Guild %s set %s=%s on subscription #%d",
        guild_id, setting.field, value, subscription.id,
    )

    default = False
    if value is TriState.INHERIT:
        config = await ensure_guild_config(ctx, guild_id)
        default = getattr(config, setting.field)
    await ctx.reply(describe_overwrite_change(setting, subscription.id, value, default))
