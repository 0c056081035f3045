import random
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from guildwarden.bot.cogs import fun_cmds
from guildwarden.bot.cogs.fun_cmds import (
    EIGHT_BALL_RESPONSES,
    coin_statistics,
    eight_ball_color,
    flip_coins,
    parse_poll_options,
    roll_dice,
    rps_outcome,
    tally_poll,
)


def test_eight_ball_has_twenty_answers_in_three_bands():
    assert len(EIGHT_BALL_RESPONSES) == 20
    assert eight_ball_color("It is certain.") == 0x00FF00
    assert eight_ball_color("Signs point to yes.") == 0x00FF00
    assert eight_ball_color("Reply hazy, try again.") == 0xFFFF00
    assert eight_ball_color("Concentrate and ask again.") == 0xFFFF00
    assert eight_ball_color("Very doubtful.") == 0xFF0000


def test_flip_coins_is_seedable():
    first = flip_coins(25, random.Random(7))
    second = flip_coins(25, random.Random(7))

    assert first == second
    assert len(first) == 25
    assert set(first) <= {"Heads", "Tails"}


def test_coin_statistics():
    assert coin_statistics(["Heads", "Tails", "Heads", "Heads"]) == "Heads: 3 (75.0%)\nTails: 1 (25.0%)"


def test_roll_dice_bounds():
    rolls = roll_dice(6, 200, random.Random(1))

    assert len(rolls) == 200
    assert min(rolls) >= 1
    assert max(rolls) <= 6


@pytest.mark.parametrize(
    "player, opponent, result",
    [
        ("rock", "scissors", "You win!"),
        ("paper", "rock", "You win!"),
        ("scissors", "paper", "You win!"),
        ("rock", "paper", "I win!"),
        ("scissors", "rock", "I win!"),
        ("paper", "paper", "It's a tie!"),
    ],
)
def test_rps_outcome(player, opponent, result):
    assert rps_outcome(player, opponent)[0] == result


def test_parse_poll_options():
    assert parse_poll_options(" pizza , tacos,sushi ") == ["pizza", "tacos", "sushi"]
    with pytest.raises(ValueError):
        parse_poll_options("only one")
    with pytest.raises(ValueError):
        parse_poll_options(",".join(str(i) for i in range(11)))


def test_tally_poll_discounts_bot_reaction():
    lines = tally_poll(["yes", "no"], {"1️⃣": 4})

    assert lines == ["1️⃣ yes: 3 votes", "2️⃣ no: 0 votes"]


def test_setup_registers_cog():
    captured = {}
    fun_cmds.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)))

    assert isinstance(captured["cog"], fun_cmds.FunCog)


@pytest.mark.asyncio
async def test_coinflip_single_flip_reply():
    cog = fun_cmds.FunCog(SimpleNamespace(), rng=random.Random(3))
    author = SimpleNamespace(name="alice", discriminator="0", display_avatar=SimpleNamespace(url="https://cdn.example/a.png"))
    ctx = SimpleNamespace(author=author, respond=AsyncMock())

    await fun_cmds.FunCog.coinflip.callback(cog, ctx, 1)

    embed = ctx.respond.await_args.kwargs["embed"]
    assert embed.description.startswith("The coin landed on: **")
    assert embed.footer.text == "Flipped by alice"


@pytest.mark.asyncio
async def test_poll_rejects_bad_options():
    cog = fun_cmds.FunCog(SimpleNamespace())
    ctx = SimpleNamespace(respond=AsyncMock())

    await fun_cmds.FunCog.poll.callback(cog, ctx, "Lunch?", "pizza", 5)

    ctx.respond.assert_awaited_once_with("Please provide between 2 and 10 options, separated by commas.", ephemeral=True)


@pytest.mark.asyncio
async def test_close_poll_edits_poll_message(monkeypatch):
    monkeypatch.setattr(fun_cmds.asyncio, "sleep", AsyncMock())
    reactions = [SimpleNamespace(emoji="1️⃣", count=3), SimpleNamespace(emoji="2️⃣", count=1)]
    refreshed = SimpleNamespace(id=42, reactions=reactions, edit=AsyncMock())
    message = SimpleNamespace(id=42, channel=SimpleNamespace(fetch_message=AsyncMock(return_value=refreshed)))
    ctx = SimpleNamespace(author=SimpleNamespace(name="alice", discriminator="0"), edit=AsyncMock())
    cog = fun_cmds.FunCog(SimpleNamespace())

    await cog._close_poll(ctx, message, "Lunch?", ["pizza", "tacos"], 30)

    fun_cmds.asyncio.sleep.assert_awaited_once_with(30 * 60)
    ctx.edit.assert_not_awaited()
    embed = refreshed.edit.await_args.kwargs["embed"]
    assert embed.title == "📊 Poll Results: Lunch?"
    assert embed.description == "1️⃣ pizza: 2 votes\n\n2️⃣ tacos: 0 votes"
