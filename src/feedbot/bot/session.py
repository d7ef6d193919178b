"""
Session-scoped identity of the running bot.

The bot's own mention string and the application owner's ID are only known
once Discord reports READY. They are written exactly once and are read-only
afterwards. The command router reads them on every dispatch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

from feedbot.datatypes.discord_datatypes import UserID
from feedbot.util.logger import get_logger

logger = get_logger("session")


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """Identity facts captured at READY time."""

    bot_user_id: UserID
    owner_id: Optional[UserID]

    @property
    def mention_prefixes(self) -> Tuple[str, ...]:
        """Both mention forms Discord clients produce for the bot user."""
        return (f"<@{self.bot_user_id}>", f"<@!{self.bot_user_id}>")


class BotSession:
    """Write-once holder for :class:`SessionIdentity`.

    ``bind`` may be called once; every later call raises. Readers see ``None``
    until then and may ``await wait_ready()`` to block on the bind.
    """

    def __init__(self) -> None:
        self._identity: Optional[SessionIdentity] = None
        self._ready = asyncio.Event()

    @property
    def identity(self) -> Optional[SessionIdentity]:
        return self._identity

    @property
    def is_ready(self) -> bool:
        return self._identity is not None

    def bind(self, bot_user_id: UserID, owner_id: Optional[UserID]) -> SessionIdentity:
        """Record the bot identity.

        Raises:
            RuntimeError: If the identity was already bound.
        """
        if self._identity is not None:
            raise RuntimeError("session identity is already bound")
        self._identity = SessionIdentity(bot_user_id=bot_user_id, owner_id=owner_id)
        self._ready.set()
        logger.info("[SESSION] Bound identity: bot=%s owner=%s", bot_user_id, owner_id)
        return self._identity

    async def wait_ready(self) -> SessionIdentity:
        await self._ready.wait()
        assert self._identity is not None
        return self._identity

    def mention_prefixes(self) -> Tuple[str, ...]:
        """Mention prefixes accepted by the router; empty until bound."""
        identity = self._identity
        return identity.mention_prefixes if identity is not None else ()

    def is_owner(self, user_id: UserID) -> bool:
        """Return True if ``user_id`` owns the bot application."""
        identity = self._identity
        return identity is not None and identity.owner_id is not None and identity.owner_id == user_id
