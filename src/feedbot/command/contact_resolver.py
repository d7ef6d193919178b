"""
Parsing of the guild emergency contact argument.

Precedence, highest first:

1. a ``<#digits>`` channel mention names a channel;
2. otherwise the first user mentioned in the message;
3. otherwise a bare numeric user ID.

Anything else (plain user or channel names) is rejected because names are
neither unique nor stable.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from feedbot.command.validation import parse_channel_mention
from feedbot.datatypes.discord_datatypes import UserID
from feedbot.datatypes.feed_datatypes import ChannelContact, ContactRef, UserContact

_NUMERIC_ID = re.compile(r"\d+")


def parse_contact(token: str, mentioned_user_ids: Sequence[UserID]) -> Optional[ContactRef]:
    """Resolve a ``set contact`` argument; None when it is not acceptable."""
    channel_id = parse_channel_mention(token)
    if channel_id is not None:
        return ChannelContact(channel_id)

    if mentioned_user_ids:
        return UserContact(mentioned_user_ids[0])

    if _NUMERIC_ID.fullmatch(token):
        return UserContact(UserID(token))

    return None
