"""
End-to-end tests of the command handlers against a real database and a fake directory.
"""

import re

import pytest

from feedbot.command import handlers
from feedbot.command.handlers import (
    ADD_USAGE,
    CONTACT_INVALID,
    HELP_TEXT,
    REMOVE_USAGE,
    SET_UNKNOWN,
    SET_USAGE,
    add_command,
    build_listing,
    help_command,
    list_command,
    migrate_command,
    remove_command,
    set_command,
)
from feedbot.command.validation import (
    FOREIGN_CHANNEL,
    NOT_A_NUMBER,
    NOT_FOUND,
    UNKNOWN_CHANNEL,
    USE_CHANNEL_MENTION,
    cross_guild_reply,
    parse_subscription_id,
)
from feedbot.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from feedbot.datatypes.feed_datatypes import (
    ChannelContact,
    Feed,
    GuildConfig,
    Overwrite,
    Subscription,
    TriState,
    UserContact,
)
from feedbot.errors import GuildConfigNotFoundError, SubscriptionNotFoundError

from fakes import ADMIN, BOT_USER, CHANNEL, GUILD, MEMBER, OTHER_GUILD, OWNER

URI = "https://example.com/feed.xml"
CREATED = re.compile(r"subscription #(\d+) created!")


async def add(make_ctx, directory, *args):
    await add_command(make_ctx("add", *args))
    match = CREATED.fullmatch(directory.replies[-1])
    assert match, directory.replies[-1]
    return int(match.group(1))


# ---------------------------------------------------------------------------
# help
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_help_needs_no_privilege(make_ctx, directory):
    await help_command(make_ctx("help", author=MEMBER))
    assert directory.replies == [HELP_TEXT]


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_with_explicit_channel(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI, "<#1234>")

    stored = await db.get_subscription(subscription_id)
    assert stored.channel_id == ChannelID(1234)
    assert stored.guild_id == GuildID(GUILD)
    assert stored.feed.uri == URI
    assert directory.sent == [(CHANNEL, f"subscription #{subscription_id} created!")]


@pytest.mark.asyncio
async def test_add_defaults_to_invoking_channel(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI)
    assert (await db.get_subscription(subscription_id)).channel_id == ChannelID(CHANNEL)


@pytest.mark.asyncio
async def test_duplicate_add_reports_existing_id(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI, "<#1234>")

    await add_command(make_ctx("add", URI, "<#1234>"))

    assert directory.replies[-1] == f"this subscription (#{subscription_id}) already exists!"
    assert len(await db.get_subscriptions(GuildID(GUILD))) == 1


@pytest.mark.asyncio
async def test_add_same_uri_reuses_feed(make_ctx, directory, db):
    first = await add(make_ctx, directory, URI)
    second = await add(make_ctx, directory, URI, "<#5678>")

    assert first != second
    assert (await db.get_subscription(first)).feed == (await db.get_subscription(second)).feed


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "args, reply",
    [
        ((), ADD_USAGE),
        ((URI, "<#1234>", "extra"), ADD_USAGE),
        (("",), ADD_USAGE),
        ((URI, "general"), USE_CHANNEL_MENTION),
        ((URI, "1234"), USE_CHANNEL_MENTION),
        ((URI, "<#4242>"), UNKNOWN_CHANNEL),
        ((URI, "<#7777>"), FOREIGN_CHANNEL),
    ],
)
async def test_add_rejects_bad_arguments(make_ctx, directory, db, args, reply):
    await add_command(make_ctx("add", *args))

    assert directory.replies == [reply]
    assert await db.get_subscriptions(GuildID(GUILD)) == []


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_remove_deletes_subscription(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI)

    await remove_command(make_ctx("remove", str(subscription_id)))

    assert directory.replies[-1] == f"subscription #{subscription_id} has been deleted."
    with pytest.raises(SubscriptionNotFoundError):
        await db.get_subscription(subscription_id)


@pytest.mark.asyncio
async def test_remove_validation(make_ctx, directory, db):
    feed = await db.get_or_create_feed(URI)
    foreign = await db.add_subscription(ChannelID(7777), GuildID(OTHER_GUILD), feed.id)

    await remove_command(make_ctx("remove"))
    await remove_command(make_ctx("remove", "seven"))
    await remove_command(make_ctx("remove", "999999"))
    await remove_command(make_ctx("remove", str(foreign.id)))

    assert directory.replies == [REMOVE_USAGE, NOT_A_NUMBER, NOT_FOUND, cross_guild_reply(foreign.id)]
    assert (await db.get_subscription(foreign.id)).guild_id == GuildID(OTHER_GUILD)


@pytest.mark.asyncio
async def test_ids_beyond_sqlite_integer_range_are_not_numbers(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI)
    too_big = str(2 ** 63)
    directory.sent.clear()

    await remove_command(make_ctx("remove", "99999999999999999999999"))
    await remove_command(make_ctx("remove", f"-{2 ** 63 + 1}"))
    await set_command(make_ctx("set", "channel", too_big))
    await set_command(make_ctx("set", "embed", "on", too_big))
    await set_command(make_ctx("set", "webhook", "off", too_big))

    assert directory.replies == [NOT_A_NUMBER] * 5
    assert (await db.get_subscription(subscription_id)).overwrite == Overwrite()


@pytest.mark.parametrize(
    "token, expected",
    [
        (str(2 ** 63 - 1), 2 ** 63 - 1),
        (str(-(2 ** 63)), -(2 ** 63)),
        (str(2 ** 63), None),
        (str(-(2 ** 63) - 1), None),
    ],
)
def test_parse_subscription_id_range(token, expected):
    assert parse_subscription_id(token) == expected


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

def test_build_listing_formats_overwrites():
    config = GuildConfig(guild_id=GuildID(GUILD), contact=UserContact(UserID(OWNER)), embeds=True)
    subscriptions = [
        Subscription(
            id=4,
            feed=Feed(id=1, uri=URI),
            guild_id=GuildID(GUILD),
            channel_id=ChannelID(1234),
            overwrite=Overwrite(embeds=TriState.INHERIT, webhooks=TriState.ON),
        )
    ]

    lines = build_listing(config, subscriptions)

    assert lines[0] == f"**Guild Contact:** user `{OWNER}`\n"
    assert lines[1] == "**Embeds?** on\n"
    assert lines[2] == "**Webhooks?** off\n"
    assert lines[-1] == f"4 | <#1234> | `{URI}` | inherit (on) | on\n"


def test_build_listing_without_subscriptions():
    config = GuildConfig(guild_id=GuildID(GUILD), contact=ChannelContact(ChannelID(1234)))

    lines = build_listing(config, [])

    assert lines[0] == "**Guild Contact:** channel <#1234>\n"
    assert lines[-1] == "no subscriptions yet, see the `add` command.\n"


@pytest.mark.asyncio
async def test_list_creates_missing_config(make_ctx, directory, db):
    await list_command(make_ctx("list"))

    assert len(directory.replies) == 1
    assert f"user `{OWNER}`" in directory.replies[0]
    assert (await db.get_guild_config(GuildID(GUILD))).contact == UserContact(UserID(OWNER))


@pytest.mark.asyncio
async def test_list_paginates_without_losing_rows(make_ctx, directory, db, services):
    subscription_ids = []
    for i in range(30):
        feed = await db.get_or_create_feed(f"https://example.com/{i}.xml")
        subscription = await db.add_subscription(ChannelID(CHANNEL), GuildID(GUILD), feed.id)
        subscription_ids.append(subscription.id)
    services.list_page_size = 300

    await list_command(make_ctx("list"))

    pages = directory.replies
    assert len(pages) > 1
    assert all(len(page) <= 300 for page in pages)
    full = "".join(pages)
    config = await db.get_guild_config(GuildID(GUILD))
    assert full == "".join(build_listing(config, await db.get_subscriptions(GuildID(GUILD))))
    for subscription_id in subscription_ids:
        assert full.count(f"\n{subscription_id} | ") == 1


@pytest.mark.asyncio
async def test_list_splits_rows_longer_than_a_message(make_ctx, directory, db, services):
    long_uri = "https://example.com/" + "a" * 1960
    long_feed = await db.get_or_create_feed(long_uri)
    long_sub = await db.add_subscription(ChannelID(CHANNEL), GuildID(GUILD), long_feed.id)
    short_feed = await db.get_or_create_feed(URI)
    short_sub = await db.add_subscription(ChannelID(CHANNEL), GuildID(GUILD), short_feed.id)
    services.list_page_size = 2000

    await list_command(make_ctx("list"))

    pages = directory.replies
    assert all(len(page) <= 2000 for page in pages)
    full = "".join(pages)
    assert long_uri in full
    assert f"\n{long_sub.id} | " in full
    assert f"\n{short_sub.id} | <#{CHANNEL}> | `{URI}` | inherit (off) | inherit (off)\n" in full


@pytest.mark.asyncio
async def test_list_requires_admin(make_ctx, directory, db):
    await list_command(make_ctx("list", author=MEMBER))

    assert len(directory.replies) == 1
    with pytest.raises(GuildConfigNotFoundError):
        await db.get_guild_config(GuildID(GUILD))


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_set_requires_known_subcommand(make_ctx, directory):
    await set_command(make_ctx("set"))
    await set_command(make_ctx("set", "colour", "blue"))

    assert directory.replies == [SET_USAGE, SET_UNKNOWN]


@pytest.mark.asyncio
async def test_set_channel_moves_subscription(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI)

    await set_command(make_ctx("set", "channel", str(subscription_id), "<#5678>"))

    assert directory.replies[-1] == f"subscription #{subscription_id} will now write to <#5678>"
    assert (await db.get_subscription(subscription_id)).channel_id == ChannelID(5678)


@pytest.mark.asyncio
async def test_set_channel_defaults_to_invoking_channel(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI, "<#5678>")

    await set_command(make_ctx("set", "channel", str(subscription_id), channel=1234))

    assert (await db.get_subscription(subscription_id)).channel_id == ChannelID(1234)


@pytest.mark.asyncio
async def test_set_channel_refuses_foreign_channel(make_ctx, directory, db):
    subscription_id = await add(make_ctx, directory, URI)

    await set_command(make_ctx("set", "channel", str(subscription_id), "<#7777>"))

    assert directory.replies[-1] == FOREIGN_CHANNEL
    assert (await db.get_subscription(subscription_id)).channel_id == ChannelID(CHANNEL)


@pytest.mark.asyncio
async def test_set_contact_channel_mention_beats_user_mention(make_ctx, directory, db):
    await set_command(make_ctx("set", "contact", "<#1234>", mentions=(MEMBER,)))

    assert directory.replies == ["the guild's contact has been changed."]
    assert (await db.get_guild_config(GuildID(GUILD))).contact == ChannelContact(ChannelID(1234))


@pytest.mark.asyncio
async def test_set_contact_ignores_bot_mention(make_ctx, directory, db):
    await set_command(make_ctx("set", "contact", f"<@{MEMBER}>", mentions=(BOT_USER, MEMBER)))

    assert (await db.get_guild_config(GuildID(GUILD))).contact == UserContact(UserID(MEMBER))


@pytest.mark.asyncio
async def test_set_contact_numeric_id(make_ctx, directory, db):
    await set_command(make_ctx("set", "contact", "4242"))

    assert (await db.get_guild_config(GuildID(GUILD))).contact == UserContact(UserID(4242))


@pytest.mark.asyncio
async def test_set_contact_rejects_names(make_ctx, directory, db):
    await set_command(make_ctx("set", "contact", "general"))

    assert directory.replies == [CONTACT_INVALID]
    with pytest.raises(GuildConfigNotFoundError):
        await db.get_guild_config(GuildID(GUILD))


@pytest.mark.asyncio
async def test_set_embed_routes_to_resolver(make_ctx, directory, db):
    await set_command(make_ctx("set", "embed", "on"))

    assert (await db.get_guild_config(GuildID(GUILD))).embeds is True


# ---------------------------------------------------------------------------
# dbg~migrate
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_migrate_is_owner_only(make_ctx, directory, db):
    await migrate_command(make_ctx("dbg~migrate", author=ADMIN))

    assert directory.replies == []
    with pytest.raises(GuildConfigNotFoundError):
        await db.get_guild_config(GuildID(GUILD))


@pytest.mark.asyncio
async def test_migrate_creates_but_never_overwrites(make_ctx, directory, db):
    await migrate_command(make_ctx("dbg~migrate", author=OWNER))
    await db.modify_guild_contact(GuildID(GUILD), ChannelContact(ChannelID(1234)))
    await migrate_command(make_ctx("dbg~migrate", author=OWNER))

    assert directory.replies == [
        f"guild config created; contact is the guild owner (`{OWNER}`).",
        "this guild already has a config, nothing changed.",
    ]
    assert (await db.get_guild_config(GuildID(GUILD))).contact == ChannelContact(ChannelID(1234))


def test_command_table():
    assert set(handlers.COMMANDS) == {"help", "add", "remove", "list", "set", "dbg~migrate"}
