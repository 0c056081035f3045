from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from guildwarden.bot.cogs import moderation_cmds
from guildwarden.datatypes.action_datatypes import ActionType, KickAction, ListWarningsAction
from guildwarden.datatypes.discord_datatypes import GuildID, UserID
from guildwarden.datatypes.moderation_datatypes import (
    AdvisoryOutcome,
    ModerationOutcome,
    ModerationResult,
    WarningRecord,
)

GUILD = 700000000000000001
MOD = 700000000000000002
TARGET = 700000000000000003


def make_ctx(guild=True):
    author = SimpleNamespace(id=MOD, name="mod", discriminator="0")
    return SimpleNamespace(
        author=author,
        guild=SimpleNamespace(id=GUILD, name="Guild") if guild else None,
        defer=AsyncMock(),
        send_followup=AsyncMock(),
    )


def make_cog(result, users=None):
    bot = SimpleNamespace(
        get_user=MagicMock(side_effect=lambda user_id: (users or {}).get(user_id)),
        fetch_user=AsyncMock(side_effect=Exception("should not be fetched")),
    )
    dispatcher = SimpleNamespace(dispatch=AsyncMock(return_value=result))
    return moderation_cmds.ModerationActionCog(bot, dispatcher), dispatcher


def test_setup_registers_cog_with_dispatcher():
    captured = {}
    dispatcher = object()
    moderation_cmds.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)), dispatcher)

    assert captured["cog"].dispatcher is dispatcher


@pytest.mark.asyncio
async def test_run_action_outside_guild():
    cog, dispatcher = make_cog(None)
    ctx = make_ctx(guild=False)

    result = await cog.run_action(ctx, KickAction(UserID(TARGET)))

    assert result is None
    ctx.defer.assert_awaited_once_with(ephemeral=True)
    ctx.send_followup.assert_awaited_once_with("This command can only be used in a server!", ephemeral=True)
    dispatcher.dispatch.assert_not_awaited()


@pytest.mark.asyncio
async def test_run_action_relays_failure_message():
    failure = ModerationResult.failure("You cannot moderate yourself!", ActionType.KICK)
    cog, dispatcher = make_cog(failure)
    ctx = make_ctx()

    result = await cog.run_action(ctx, KickAction(UserID(TARGET)))

    assert result is failure
    ctx.send_followup.assert_awaited_once_with("You cannot moderate yourself!", ephemeral=True)
    action, actor, gateway = dispatcher.dispatch.await_args.args
    assert actor is ctx.author
    assert gateway.guild_id == GUILD


@pytest.mark.asyncio
async def test_run_action_renders_result_embed():
    success = ModerationResult(
        ModerationOutcome.SUCCEEDED,
        "target has been kicked.",
        action_type=ActionType.KICK,
        target_id=UserID(TARGET),
        target_tag="target",
        reason="spam",
        log_outcome=AdvisoryOutcome.ok(),
    )
    cog, _ = make_cog(success)
    ctx = make_ctx()

    await cog.run_action(ctx, KickAction(UserID(TARGET), "spam"))

    embed = ctx.send_followup.await_args.kwargs["embed"]
    assert "Kick" in embed.title
    assert any(field.name == "Moderator" and field.value == "mod" for field in embed.fields)


@pytest.mark.asyncio
async def test_run_action_renders_warning_history_with_moderator_names():
    warning = WarningRecord(
        "ab12cd34",
        GuildID(GUILD),
        UserID(TARGET),
        "spam",
        UserID(MOD),
        datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    success = ModerationResult(
        ModerationOutcome.SUCCEEDED,
        "",
        action_type=ActionType.WARNINGS,
        target_id=UserID(TARGET),
        target_tag="target",
        warnings=[warning],
    )
    cog, _ = make_cog(success, users={MOD: SimpleNamespace(name="mod", discriminator="0")})
    ctx = make_ctx()

    await cog.run_action(ctx, ListWarningsAction(UserID(TARGET)))

    embed = ctx.send_followup.await_args.kwargs["embed"]
    assert embed.title == "⚠️ Warning History for target"
    assert embed.fields[0].name == "Warning #1 (ID: ab12cd34)"
    assert f"**Moderator:** mod ({MOD})" in embed.fields[0].value


@pytest.mark.asyncio
async def test_kick_command_builds_action_from_target():
    success = ModerationResult(ModerationOutcome.SUCCEEDED, "", action_type=ActionType.KICK, target_tag="target")
    cog, dispatcher = make_cog(success)
    ctx = make_ctx()
    target = SimpleNamespace(id=TARGET, name="target", discriminator="0")

    await moderation_cmds.ModerationActionCog.kick.callback(cog, ctx, target, "spam")

    action = dispatcher.dispatch.await_args.args[0]
    assert action == KickAction(UserID(TARGET), "spam")
    assert TARGET in {action.target_id}
