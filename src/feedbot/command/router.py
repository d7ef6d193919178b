"""
Command router: recognises bot-directed messages and dispatches them.

A message is a command when it starts with the bot's own mention (known once
the session is ready) or with the literal ``/feed:`` prefix. The rest of the
text is split on single spaces: token 0 is the verb and the remaining tokens
are positional arguments. Unknown verbs are ignored without a reply.

Each dispatch runs inside an isolation boundary. A failing handler is logged
and never takes the bot down.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import discord

from feedbot.command.context import CommandContext, CommandServices
from feedbot.command.handlers import COMMANDS, CommandHandler
from feedbot.errors import FeedbotError
from feedbot.util.logger import get_logger

logger = get_logger("command_router")

PREFIX = "/feed:"


def strip_invocation(content: str, mention_prefixes: Sequence[str]) -> Optional[str]:
    """Return the text after an accepted invocation prefix, or None if there is none.

    Spaces between a mention and the verb are dropped; the literal prefix is
    followed directly by the verb.
    """
    for mention in mention_prefixes:
        if content.startswith(mention):
            return content[len(mention):].lstrip(" ")
    if content.startswith(PREFIX):
        return content[len(PREFIX):]
    return None


def tokenize(content: str, mention_prefixes: Sequence[str]) -> Optional[Tuple[str, List[str]]]:
    """Split an invocation into ``(verb, args)``.

    Splitting is on single spaces, so consecutive spaces yield empty tokens.
    Returns None when the message is not an invocation or nothing follows the
    prefix.
    """
    remainder = strip_invocation(content, mention_prefixes)
    if not remainder:
        return None
    parts = remainder.split(" ")
    return parts[0], parts[1:]


class CommandRouter:
    """Routes inbound messages to verb handlers."""

    def __init__(self, services: CommandServices, commands: Mapping[str, CommandHandler] = COMMANDS):
        self.services = services
        self.commands: Dict[str, CommandHandler] = dict(commands)

    def match(self, message: discord.Message) -> Optional[Tuple[str, CommandHandler, List[str]]]:
        """Return ``(verb, handler, args)`` for a command message, else None."""
        if message.author.bot:
            return None

        parsed = tokenize(message.content or "", self.services.session.mention_prefixes())
        if parsed is None:
            return None

        verb, args = parsed
        handler = self.commands.get(verb)
        if handler is None:
            return None
        return verb, handler, args

    async def dispatch(self, message: discord.Message) -> bool:
        """Handle one inbound message. Return whether a handler ran.

        Never raises for handler failures: collaborator errors are logged
        without a traceback, anything else is logged with one.
        """
        matched = self.match(message)
        if matched is None:
            return False

        verb, handler, args = matched
        ctx = CommandContext(services=self.services, message=message, verb=verb, args=args)
        logger.debug("[ROUTER] cmd:%s args:%s guild:%s author:%s", verb, args, ctx.guild_id, ctx.author_id)

        try:
            await handler(ctx)
        except (FeedbotError, discord.DiscordException) as exc:
            logger.error("[ROUTER] cmd:%s err:%s", verb, exc)
        except Exception as exc:
            logger.exception("[ROUTER] cmd:%s fault:%r", verb, exc)
        return True
