from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildwarden.datatypes.action_datatypes import ActionType
from guildwarden.datatypes.discord_datatypes import UserID
from guildwarden.datatypes.moderation_datatypes import ModerationLogEntry
from guildwarden.moderation import moderation_logger
from guildwarden.moderation.moderation_logger import ModerationLogger


def make_entry(**overrides) -> ModerationLogEntry:
    values = dict(
        action_type=ActionType.BAN,
        target_id=UserID(700000000000000001),
        target_tag="spammer",
        moderator_id=UserID(700000000000000002),
        moderator_tag="mod",
        reason="raid",
    )
    values.update(overrides)
    return ModerationLogEntry(**values)


@pytest.fixture()
def fake_logger(monkeypatch):
    fake = MagicMock()
    monkeypatch.setattr(moderation_logger, "logger", fake)
    return fake


@pytest.mark.asyncio
async def test_console_line_is_always_written(fake_logger):
    gateway = SimpleNamespace(find_text_channel=MagicMock(return_value=None))

    outcome = await ModerationLogger().log_action(gateway, make_entry())

    assert outcome.success is True
    assert outcome.detail == "no log channel"
    fmt, *args = fake_logger.info.call_args.args
    assert fmt % tuple(args) == (
        "[Moderation] Ban | Target: spammer (700000000000000001) | Moderator: mod | Reason: raid"
    )


@pytest.mark.asyncio
async def test_posts_embed_to_configured_channel(fake_logger):
    channel = SimpleNamespace(send=AsyncMock())
    gateway = SimpleNamespace(find_text_channel=MagicMock(return_value=channel))

    outcome = await ModerationLogger("staff-log").log_action(
        gateway, make_entry(action_type=ActionType.TIMEOUT, additional_info="Duration: 1 hour")
    )

    assert outcome.success is True
    gateway.find_text_channel.assert_called_once_with("staff-log")
    embed = channel.send.await_args.kwargs["embed"]
    assert isinstance(embed, discord.Embed)
    assert embed.title == "⏰ Timeout Action"
    assert [field.name for field in embed.fields] == ["Target User", "Moderator", "Reason", "Additional Info"]


@pytest.mark.asyncio
async def test_send_failure_is_reported_not_raised(fake_logger):
    channel = SimpleNamespace(send=AsyncMock(side_effect=RuntimeError("Missing Access")))
    gateway = SimpleNamespace(find_text_channel=MagicMock(return_value=channel))

    outcome = await ModerationLogger().log_action(gateway, make_entry())

    assert outcome.success is False
    assert outcome.detail == "Missing Access"
    fake_logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_channel_lookup_failure_is_contained(fake_logger):
    gateway = SimpleNamespace(find_text_channel=MagicMock(side_effect=RuntimeError("guild unavailable")))

    outcome = await ModerationLogger().log_action(gateway, make_entry())

    assert outcome.success is False
