from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildwarden.ui.welcome_embed import (
    PREVIEW_NOTE,
    build_preview_embed,
    build_status_embed,
    build_welcome_embed,
    format_welcome_message,
    parse_color,
)
from guildwarden.welcome.welcome_delivery import deliver_welcome
from guildwarden.welcome.welcome_settings import WelcomeSettings, WelcomeSettingsStore

GUILD = 130000000000000001
CHANNEL = 130000000000000002


def make_guild(channel=None):
    return SimpleNamespace(
        id=GUILD,
        name="Cozy Corner",
        member_count=42,
        icon=None,
        get_channel=MagicMock(return_value=channel),
    )


def make_member(guild):
    return SimpleNamespace(
        id=140000000000000001,
        name="alice",
        discriminator="0",
        mention="<@140000000000000001>",
        display_avatar=SimpleNamespace(url="https://cdn.example/alice.png"),
        created_at=datetime(2020, 2, 3, tzinfo=timezone.utc),
        guild=guild,
    )


def test_format_welcome_message_replaces_every_placeholder():
    guild = make_guild()
    member = make_member(guild)

    text = format_welcome_message("{user} {username} {tag} {server} {memberCount} {user}", member, guild)

    assert text == "<@140000000000000001> alice alice Cozy Corner 42 <@140000000000000001>"


def test_format_welcome_message_empty_template():
    guild = make_guild()
    assert format_welcome_message("", make_member(guild), guild) == ""
    assert format_welcome_message(None, make_member(guild), guild) == ""


def test_parse_color_falls_back_to_default():
    assert parse_color("#ff0000").value == 0xFF0000
    assert parse_color("nope").value == 0x0099FF


def test_welcome_embed_with_rules_and_image():
    guild = make_guild()
    settings = WelcomeSettings(
        enabled=True,
        message="Hi {username}!",
        show_rules=True,
        rules_channel_id=150000000000000001,
        image_url="https://cdn.example/banner.png",
    )

    embed = build_welcome_embed(settings, make_member(guild), guild)

    assert embed.description == "Hi alice!"
    assert embed.title == "👋 New Member!"
    names = [field.name for field in embed.fields]
    assert names == ["User", "Account Created", "Member Count", "📜 Server Rules"]
    assert embed.fields[3].value == "Please check <#150000000000000001> to get started!"
    assert embed.image.url == "https://cdn.example/banner.png"
    assert embed.footer.text == "Thanks for joining us!"


def test_preview_embed_adds_note():
    guild = make_guild()
    embed = build_preview_embed(WelcomeSettings(enabled=True), make_member(guild), guild)

    assert embed.fields[-1].value == PREVIEW_NOTE


def test_status_embed():
    embed = build_status_embed(WelcomeSettings(enabled=True, channel_id=CHANNEL))

    values = {field.name: field.value for field in embed.fields}
    assert values["Status"] == "✅ Enabled"
    assert values["Welcome Channel"] == f"<#{CHANNEL}>"
    assert values["Rules Channel"] == "Not set"


def test_status_embed_clips_long_message():
    embed = build_status_embed(WelcomeSettings(enabled=True, message="x" * 3000, footer_text="f" * 2000))

    values = {field.name: field.value for field in embed.fields}
    assert len(values["Welcome Message"]) == 1024
    assert values["Welcome Message"].startswith("```\nxxx")
    assert values["Welcome Message"].endswith("…\n```")
    assert len(values["Footer Text"]) == 1024


@pytest.mark.asyncio
async def test_deliver_welcome_sends_embed_and_mention():
    channel = SimpleNamespace(id=CHANNEL, name="welcome", send=AsyncMock())
    guild = make_guild(channel)
    store = WelcomeSettingsStore()
    store.enable(GUILD, CHANNEL)

    outcome = await deliver_welcome(store, make_member(guild))

    assert outcome.success is True
    guild.get_channel.assert_called_once_with(CHANNEL)
    kwargs = channel.send.await_args.kwargs
    assert kwargs["content"] == "<@140000000000000001>"
    assert isinstance(kwargs["embed"], discord.Embed)


@pytest.mark.asyncio
async def test_deliver_welcome_without_mention():
    channel = SimpleNamespace(id=CHANNEL, name="welcome", send=AsyncMock())
    guild = make_guild(channel)
    store = WelcomeSettingsStore()
    store.enable(GUILD, CHANNEL)
    store.set_mention(GUILD, False)

    await deliver_welcome(store, make_member(guild))

    assert channel.send.await_args.kwargs["content"] is None


@pytest.mark.asyncio
async def test_deliver_welcome_disabled_or_missing_channel():
    guild = make_guild(None)
    store = WelcomeSettingsStore()

    assert (await deliver_welcome(store, make_member(guild))).success is False

    store.enable(GUILD, CHANNEL)
    outcome = await deliver_welcome(store, make_member(guild))
    assert outcome.success is False
    assert outcome.detail == "welcome channel not found"


@pytest.mark.asyncio
async def test_deliver_welcome_send_failure_is_contained():
    channel = SimpleNamespace(id=CHANNEL, name="welcome", send=AsyncMock(side_effect=RuntimeError("Missing Access")))
    guild = make_guild(channel)
    store = WelcomeSettingsStore()
    store.enable(GUILD, CHANNEL)

    outcome = await deliver_welcome(store, make_member(guild))

    assert outcome.success is False
    assert outcome.detail == "Missing Access"
