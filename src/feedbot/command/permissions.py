"""
Administrator gate for privileged commands.

:meth:`PermissionChecker.check_privilege` is a pure predicate: does the user
hold a role with the administrator bit in the guild? :func:`require_admin`
is the call-site helper that also tells the user why nothing happened.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from feedbot.datatypes.discord_datatypes import GuildID, UserID
from feedbot.util.logger import get_logger

if TYPE_CHECKING:
    from feedbot.bot.directory import DiscordDirectory
    from feedbot.command.context import CommandContext

logger = get_logger("permissions")

ADMIN_ONLY = "Sorry, feedbot requires the **ADMINISTRATOR** privilege!"
GUILD_ONLY = "this command can only be used in a server."


class PermissionChecker:
    """Decides whether a member may run privileged commands."""

    def __init__(self, directory: "DiscordDirectory"):
        self.directory = directory

    async def check_privilege(self, guild_id: GuildID, user_id: UserID) -> bool:
        """Return True iff one of the member's roles carries the administrator bit.

        Raises:
            DirectoryError: If the member or any of its roles cannot be resolved.
        """
        member = await self.directory.resolve_member(guild_id, user_id)
        for role_id in member.role_ids:
            role = await self.directory.resolve_role(guild_id, role_id)
            if role.administrator:
                return True
        return False


async def require_admin(ctx: "CommandContext") -> bool:
    """Gate a handler on administrator privilege, replying when refused.

    Returns False (after replying) for DMs and for members without the
    privilege; the caller must stop processing in that case.
    """
    guild_id = ctx.guild_id
    if guild_id is None:
        await ctx.reply(GUILD_ONLY)
        return False

    allowed = await ctx.services.permissions.check_privilege(guild_id, ctx.author_id)
    if not allowed:
        logger.info("[PERMISSIONS] Refused %s for user %s in guild %s", ctx.verb, ctx.author_id, guild_id)
        await ctx.reply(ADMIN_ONLY)
    return allowed
