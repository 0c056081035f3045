"""
Fun cog: casual commands with no server-side state.

Commands: /8ball, /coinflip, /dice, /rps, /poll.

The random parts live in small module-level helpers that take a
``random.Random`` so they can be tested without patching the module.
"""

import asyncio
import datetime
import random
from typing import Dict, List, Optional, Sequence, Set, Tuple

import discord
from discord import Option, OptionChoice
from discord.ext import commands

from guildwarden.datatypes.discord_datatypes import user_tag
from guildwarden.util.logger import get_logger

logger = get_logger("fun_cog")

EIGHT_BALL_RESPONSES: Tuple[str, ...] = (
    # Positive
    "It is certain.",
    "It is decidedly so.",
    "Without a doubt.",
    "Yes definitely.",
    "You may rely on it.",
    "As I see it, yes.",
    "Most likely.",
    "Outlook good.",
    "Yes.",
    "Signs point to yes.",
    # Neutral
    "Reply hazy, try again.",
    "Ask again later.",
    "Better not tell you now.",
    "Cannot predict now.",
    "Concentrate and ask again.",
    # Negative
    "Don't count on it.",
    "My reply is no.",
    "My sources say no.",
    "Outlook not so good.",
    "Very doubtful.",
)

RPS_EMOJIS = {"rock": "🪨", "paper": "📄", "scissors": "✂️"}
RPS_BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}

POLL_EMOJIS = ("1️⃣", "2️⃣", "3️⃣", "4️⃣", "5️⃣", "6️⃣", "7️⃣", "8️⃣", "9️⃣", "🔟")
POLL_MIN_OPTIONS = 2
POLL_MAX_OPTIONS = len(POLL_EMOJIS)


def eight_ball_color(response: str) -> int:
    """Green for positive answers, yellow for neutral, red for negative."""
    index = EIGHT_BALL_RESPONSES.index(response)
    if index < 10:
        return 0x00FF00
    if index < 15:
        return 0xFFFF00
    return 0xFF0000


def flip_coins(times: int, rng: random.Random) -> List[str]:
    return ["Heads" if rng.random() < 0.5 else "Tails" for _ in range(times)]


def coin_statistics(results: Sequence[str]) -> str:
    total = len(results)
    heads = results.count("Heads")
    tails = total - heads
    return f"Heads: {heads} ({heads / total * 100:.1f}%)\nTails: {tails} ({tails / total * 100:.1f}%)"


def roll_dice(sides: int, count: int, rng: random.Random) -> List[int]:
    return [rng.randint(1, sides) for _ in range(count)]


def rps_outcome(player: str, opponent: str) -> Tuple[str, int]:
    """Return the result line and embed color from the player's point of view."""
    if player == opponent:
        return "It's a tie!", 0xFFFF00
    if RPS_BEATS[player] == opponent:
        return "You win!", 0x00FF00
    return "I win!", 0xFF0000


def parse_poll_options(raw: str) -> List[str]:
    """Split comma-separated poll options.

    Raises:
        ValueError: Unless there are between 2 and 10 non-empty options.
    """
    options = [option.strip() for option in raw.split(",") if option.strip()]
    if not POLL_MIN_OPTIONS <= len(options) <= POLL_MAX_OPTIONS:
        raise ValueError("Please provide between 2 and 10 options, separated by commas.")
    return options


def tally_poll(options: Sequence[str], reaction_counts: Dict[str, int]) -> List[str]:
    """One result line per option; the bot's own reaction is not counted."""
    lines = []
    for emoji, option in zip(POLL_EMOJIS, options):
        votes = max(reaction_counts.get(emoji, 0) - 1, 0)
        lines.append(f"{emoji} {option}: {votes} votes")
    return lines


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class FunCog(commands.Cog):
    """Games and small toys for server members."""

    def __init__(self, discord_bot_instance, rng: Optional[random.Random] = None):
        self.discord_bot_instance = discord_bot_instance
        self.rng = rng or random.Random()
        self._poll_tasks: Set[asyncio.Task] = set()
        logger.info("Fun cog loaded")

    def _footer(self, embed: discord.Embed, verb: str, user) -> None:
        embed.set_footer(text=f"{verb} by {user_tag(user)}", icon_url=user.display_avatar.url)

    @commands.slash_command(name="8ball", description="Ask the magic 8-ball a question")
    async def eight_ball(
        self,
        ctx: discord.ApplicationContext,
        question: Option(str, "The question you want to ask", required=True),  # type: ignore
    ):
        response = self.rng.choice(EIGHT_BALL_RESPONSES)
        embed = discord.Embed(title="🎱 Magic 8-Ball", color=discord.Color(eight_ball_color(response)), timestamp=_utcnow())
        embed.add_field(name="Question", value=question, inline=False)
        embed.add_field(name="Answer", value=response, inline=False)
        self._footer(embed, "Asked", ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="coinflip", description="Flip a coin")
    async def coinflip(
        self,
        ctx: discord.ApplicationContext,
        times: Option(int, "Number of times to flip the coin (max 100)", min_value=1, max_value=100, default=1),  # type: ignore
    ):
        results = flip_coins(times, self.rng)
        embed = discord.Embed(title="🪙 Coin Flip", color=discord.Color(0xFFD700), timestamp=_utcnow())
        if times == 1:
            embed.description = f"The coin landed on: **{results[0]}**!"
        else:
            embed.add_field(name="Results", value=", ".join(results), inline=False)
            embed.add_field(name="Statistics", value=coin_statistics(results), inline=True)
        self._footer(embed, "Flipped", ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="dice", description="Roll one or more dice")
    async def dice(
        self,
        ctx: discord.ApplicationContext,
        sides: Option(int, "Number of sides on the dice (default: 6)", min_value=2, max_value=100, default=6),  # type: ignore
        count: Option(int, "Number of dice to roll (default: 1)", min_value=1, max_value=20, default=1),  # type: ignore
        show_sum: Option(bool, "Show the sum of all dice (default: false)", name="sum", default=False),  # type: ignore
    ):
        rolls = roll_dice(sides, count, self.rng)
        embed = discord.Embed(title="🎲 Dice Roll", color=discord.Color(0x4169E1), timestamp=_utcnow())

        if count == 1:
            embed.description = f"You rolled a **{rolls[0]}**!"
        else:
            description = f"Rolling {count} d{sides}...\n\nResults: {', '.join(map(str, rolls))}"
            if show_sum:
                total = sum(rolls)
                description += f"\n\nTotal: **{total}**\nAverage: **{total / count:.2f}**"
            embed.description = description

            if max(rolls) == sides:
                embed.add_field(
                    name="🌟 Critical Success!",
                    value=f"You rolled the highest possible number ({sides})!",
                    inline=False,
                )
            if min(rolls) == 1:
                embed.add_field(name="💫 Critical Fail!", value="You rolled the lowest possible number (1)!", inline=False)

        self._footer(embed, "Rolled", ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="rps", description="Play rock, paper, scissors!")
    async def rps(
        self,
        ctx: discord.ApplicationContext,
        choice: Option(
            str,
            "Choose your weapon!",
            choices=[
                OptionChoice("🪨 Rock", "rock"),
                OptionChoice("📄 Paper", "paper"),
                OptionChoice("✂️ Scissors", "scissors"),
            ],
        ),  # type: ignore
    ):
        bot_choice = self.rng.choice(tuple(RPS_BEATS))
        result, color = rps_outcome(choice, bot_choice)

        embed = discord.Embed(title="🎮 Rock Paper Scissors", color=discord.Color(color), timestamp=_utcnow())
        embed.add_field(name="Your Choice", value=f"{RPS_EMOJIS[choice]} {choice.capitalize()}", inline=True)
        embed.add_field(name="My Choice", value=f"{RPS_EMOJIS[bot_choice]} {bot_choice.capitalize()}", inline=True)
        embed.add_field(name="Result", value=result, inline=False)
        self._footer(embed, "Played", ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="poll", description="Create a poll")
    async def poll(
        self,
        ctx: discord.ApplicationContext,
        question: Option(str, "The poll question", required=True),  # type: ignore
        options: Option(str, "Poll options (separate with commas)", required=True),  # type: ignore
        duration: Option(int, "Poll duration in minutes (default: 5)", min_value=1, max_value=60, default=5),  # type: ignore
    ):
        try:
            choices = parse_poll_options(options)
        except ValueError as exc:
            await ctx.respond(str(exc), ephemeral=True)
            return

        embed = discord.Embed(
            title=f"📊 {question}",
            description="\n\n".join(f"{emoji} {option}" for emoji, option in zip(POLL_EMOJIS, choices)),
            color=discord.Color(0x0099FF),
            timestamp=_utcnow(),
        )
        embed.set_footer(text=f"Poll ends in {duration} minutes • Started by {user_tag(ctx.author)}")

        interaction = await ctx.respond(embed=embed)
        message = await interaction.original_response()
        for emoji in POLL_EMOJIS[: len(choices)]:
            await message.add_reaction(emoji)

        task = asyncio.create_task(self._close_poll(ctx, message, question, choices, duration))
        self._poll_tasks.add(task)
        task.add_done_callback(self._poll_tasks.discard)

    async def _close_poll(self, ctx, message: discord.Message, question: str, choices: List[str], duration: int) -> None:
        """Replace the poll embed with the tally. Edits the message, not the interaction response (tokens last 15 minutes)."""
        await asyncio.sleep(duration * 60)
        try:
            message = await message.channel.fetch_message(message.id)
            counts = {str(reaction.emoji): reaction.count for reaction in message.reactions}
            embed = discord.Embed(
                title=f"📊 Poll Results: {question}",
                description="\n\n".join(tally_poll(choices, counts)),
                color=discord.Color(0x00FF00),
                timestamp=_utcnow(),
            )
            embed.set_footer(text=f"Poll ended • Started by {user_tag(ctx.author)}")
            await message.edit(embed=embed)
        except discord.HTTPException as exc:
            logger.warning("[FUN] Could not close poll %s: %s", message.id, exc)

    def cog_unload(self) -> None:
        for task in list(self._poll_tasks):
            task.cancel()


def setup(discord_bot_instance):
    discord_bot_instance.add_cog(FunCog(discord_bot_instance))
