"""
Moderation cog: the ``/mod`` command group.

Subcommands: kick, ban, unban, timeout, remove_timeout, warn, warnings.

Each subcommand defers ephemerally, turns its options into an action request,
and hands it to the :class:`ModerationDispatcher`. The cog only renders the
result; all checks and Discord mutations happen in the dispatcher.

Quick usage example
    from guildwarden.bot.cogs import moderation_cmds
    moderation_cmds.setup(bot, dispatcher)
"""

from typing import Dict, Iterable

import discord
from discord import Option, OptionChoice
from discord.ext import commands

from guildwarden.datatypes.action_datatypes import (
    ActionType,
    BanAction,
    KickAction,
    ListWarningsAction,
    ModerationAction,
    RemoveTimeoutAction,
    TimeoutAction,
    UnbanAction,
    WarnAction,
)
from guildwarden.datatypes.discord_datatypes import UserID, user_tag
from guildwarden.datatypes.moderation_datatypes import ModerationResult, WarningRecord
from guildwarden.moderation.discord_gateway import DiscordModerationGateway
from guildwarden.moderation.moderation_dispatcher import ModerationDispatcher
from guildwarden.ui.moderation_embed import build_result_embed, build_warning_history_embed
from guildwarden.util.logger import get_logger

logger = get_logger("moderation_cog")

DELETE_MESSAGE_CHOICES = [
    OptionChoice("Don't delete any", 0),
    OptionChoice("Previous 24 hours", 1),
    OptionChoice("Previous 3 days", 3),
    OptionChoice("Previous 7 days", 7),
]


class ModerationActionCog(commands.Cog):
    """Cog exposing manual moderation commands.

    Parameters
    ----------
    discord_bot_instance:
        Active :class:`discord.Bot`, used to resolve users who left the guild.
    dispatcher:
        Shared :class:`ModerationDispatcher` built at startup.
    """

    mod = discord.SlashCommandGroup("mod", "Moderation commands for server management")

    def __init__(self, discord_bot_instance, dispatcher: ModerationDispatcher):
        self.discord_bot_instance = discord_bot_instance
        self.dispatcher = dispatcher
        logger.info("Moderation cog loaded")

    async def _moderator_names(self, warnings: Iterable[WarningRecord]) -> Dict[str, str]:
        """Resolve each distinct moderator ID to ``tag (id)``; unresolvable IDs are left out."""
        names: Dict[str, str] = {}
        for moderator_id in {str(warning.moderator_id) for warning in warnings}:
            user = self.discord_bot_instance.get_user(int(moderator_id))
            if user is None:
                try:
                    user = await self.discord_bot_instance.fetch_user(int(moderator_id))
                except discord.HTTPException:
                    continue
            names[moderator_id] = f"{user_tag(user)} ({moderator_id})"
        return names

    async def run_action(self, ctx: discord.ApplicationContext, action: ModerationAction) -> ModerationResult | None:
        """Dispatch ``action`` for the invoking moderator and send the reply."""
        await ctx.defer(ephemeral=True)

        if ctx.guild is None:
            await ctx.send_followup("This command can only be used in a server!", ephemeral=True)
            return None

        gateway = DiscordModerationGateway(ctx.guild, self.discord_bot_instance)
        result = await self.dispatcher.dispatch(action, ctx.author, gateway)

        if not result.succeeded:
            await ctx.send_followup(result.message, ephemeral=True)
            return result

        if result.action_type is ActionType.WARNINGS:
            embed = build_warning_history_embed(
                result.target_tag or str(result.target_id),
                result.target_avatar_url,
                result.warnings,
                await self._moderator_names(result.warnings),
            )
        else:
            embed = build_result_embed(result, user_tag(ctx.author))

        await ctx.send_followup(embed=embed, ephemeral=True)
        return result

    @mod.command(name="kick", description="Kick a user from the server")
    async def kick(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to kick", required=True),  # type: ignore
        reason: Option(str, "Reason for kicking", required=False, default=None),  # type: ignore
    ) -> None:
        await self.run_action(ctx, KickAction(UserID.from_user(target), reason))

    @mod.command(name="ban", description="Ban a user from the server")
    async def ban(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to ban", required=True),  # type: ignore
        reason: Option(str, "Reason for banning", required=False, default=None),  # type: ignore
        delete_messages: Option(
            int,
            "Delete message history (in days)",
            choices=DELETE_MESSAGE_CHOICES,
            default=0,
        ),  # type: ignore
    ) -> None:
        await self.run_action(ctx, BanAction(UserID.from_user(target), reason, delete_messages))

    @mod.command(name="unban", description="Unban a user from the server")
    async def unban(
        self,
        ctx: discord.ApplicationContext,
        user_id: Option(str, "The ID of the user to unban", required=True),  # type: ignore
        reason: Option(str, "Reason for unbanning", required=False, default=None),  # type: ignore
    ) -> None:
        await self.run_action(ctx, UnbanAction(user_id, reason))

    @mod.command(name="timeout", description="Timeout a user for a specified duration")
    async def timeout(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to timeout", required=True),  # type: ignore
        duration: Option(str, "Timeout duration (1m, 1h, 1d, etc.)", required=True),  # type: ignore
        reason: Option(str, "Reason for timeout", required=False, default=None),  # type: ignore
    ) -> None:
        await self.run_action(ctx, TimeoutAction(UserID.from_user(target), duration, reason))

    @mod.command(name="remove_timeout", description="Remove timeout from a user")
    async def remove_timeout(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to remove timeout from", required=True),  # type: ignore
        reason: Option(str, "Reason for removing timeout", required=False, default=None),  # type: ignore
    ) -> None:
        await self.run_action(ctx, RemoveTimeoutAction(UserID.from_user(target), reason))

    @mod.command(name="warn", description="Issue a warning to a user")
    async def warn(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to warn", required=True),  # type: ignore
        reason: Option(str, "Reason for the warning", required=True),  # type: ignore
    ) -> None:
        await self.run_action(ctx, WarnAction(UserID.from_user(target), reason))

    @mod.command(name="warnings", description="View warnings for a user")
    async def warnings(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to check warnings for", required=True),  # type: ignore
    ) -> None:
        await self.run_action(ctx, ListWarningsAction(UserID.from_user(target)))


def setup(discord_bot_instance, dispatcher: ModerationDispatcher):
    """Register the moderation cog with the bot."""
    discord_bot_instance.add_cog(ModerationActionCog(discord_bot_instance, dispatcher))
