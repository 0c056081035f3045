"""
Embed creation utilities for moderation commands.

Builders here only format; they never call the Discord API.
"""

import datetime
from typing import Iterable, Mapping

import discord

from guildwarden.datatypes.action_datatypes import ACTION_STYLES, ActionType
from guildwarden.datatypes.moderation_datatypes import (
    ModerationLogEntry,
    ModerationResult,
    WarningRecord,
)

# Title shown on the moderator's confirmation embed
RESULT_TITLES = {
    ActionType.BAN: "User Banned",
    ActionType.KICK: "User Kicked",
    ActionType.TIMEOUT: "User Timed Out",
    ActionType.WARN: "User Warned",
    ActionType.UNBAN: "User Unbanned",
    ActionType.REMOVE_TIMEOUT: "Timeout Removed",
}

MAX_EMBED_FIELDS = 25


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def build_mod_log_embed(entry: ModerationLogEntry) -> discord.Embed:
    """Embed posted to the mod-log channel for a completed action."""
    style = ACTION_STYLES[entry.action_type]
    embed = discord.Embed(
        title=f"{style.emoji} {style.name} Action",
        color=discord.Color(style.color),
        timestamp=entry.timestamp,
    )
    embed.add_field(name="Target User", value=f"{entry.target_tag} ({entry.target_id})", inline=True)
    embed.add_field(name="Moderator", value=f"{entry.moderator_tag} ({entry.moderator_id})", inline=True)
    embed.add_field(name="Reason", value=entry.reason, inline=False)
    if entry.additional_info:
        embed.add_field(name="Additional Info", value=entry.additional_info, inline=False)
    if entry.target_avatar_url:
        embed.set_thumbnail(url=entry.target_avatar_url)
    return embed


def build_result_embed(result: ModerationResult, moderator_tag: str) -> discord.Embed:
    """Confirmation embed shown to the moderator after a successful action."""
    action_type = result.action_type
    style = ACTION_STYLES[action_type]
    embed = discord.Embed(
        title=f"{style.emoji} {RESULT_TITLES.get(action_type, style.name)}",
        description=result.message,
        color=discord.Color(style.color),
        timestamp=_utcnow(),
    )
    embed.add_field(name="User", value=f"{result.target_tag} ({result.target_id})", inline=False)

    if action_type is ActionType.WARN:
        embed.add_field(name="Warning ID", value=result.warning_id or "unknown", inline=False)
    if "duration" in result.details:
        embed.add_field(name="Duration", value=result.details["duration"], inline=False)

    embed.add_field(name="Reason", value=result.reason or "No reason provided", inline=False)

    if action_type is ActionType.WARN:
        embed.add_field(name="Total Warnings", value=str(result.warning_count or 0), inline=False)
    if "message_history" in result.details:
        embed.add_field(name="Message History", value=result.details["message_history"], inline=False)

    embed.add_field(name="Moderator", value=moderator_tag, inline=False)

    if result.dm_outcome is not None:
        if result.dm_outcome.success:
            embed.set_footer(text="User has been notified via DM.")
        else:
            embed.set_footer(text="Could not notify user via DM (they may have DMs disabled).")
    return embed


def build_warning_dm_embed(guild_name: str, warning_id: str, reason: str, total: int) -> discord.Embed:
    """Embed sent privately to a member who just received a warning."""
    style = ACTION_STYLES[ActionType.WARN]
    embed = discord.Embed(
        title=f"{style.emoji} Warning Received",
        description=f"You have received a warning in {guild_name}",
        color=discord.Color(style.color),
        timestamp=_utcnow(),
    )
    embed.add_field(name="Warning ID", value=warning_id, inline=False)
    embed.add_field(name="Reason", value=reason, inline=False)
    embed.add_field(name="Total Warnings", value=str(total), inline=False)
    embed.set_footer(text="If you believe this was a mistake, please contact a server administrator.")
    return embed


def build_warning_history_embed(
    target_tag: str,
    avatar_url: str | None,
    warnings: Iterable[WarningRecord],
    moderator_names: Mapping[str, str],
) -> discord.Embed:
    """List a user's warnings, newest first.

    Args:
        target_tag: Display tag of the warned user.
        avatar_url: Thumbnail for the embed, if known.
        warnings: Warnings in display order.
        moderator_names: Moderator ID (as str) to display label; IDs without an
            entry are shown as ``Unknown User (<id>)``.
    """
    warnings = list(warnings)
    embed = discord.Embed(
        title=f"⚠️ Warning History for {target_tag}",
        color=discord.Color(0xFFCC00) if warnings else discord.Color(0x00FF00),
        timestamp=_utcnow(),
    )
    if avatar_url:
        embed.set_thumbnail(url=avatar_url)

    if not warnings:
        embed.description = "This user has no warnings. 🎉"
        return embed

    embed.description = f"Found {len(warnings)} warning{'' if len(warnings) == 1 else 's'} for this user."
    for index, warning in enumerate(warnings[:MAX_EMBED_FIELDS], start=1):
        moderator_id = str(warning.moderator_id)
        moderator = moderator_names.get(moderator_id, f"Unknown User ({moderator_id})")
        embed.add_field(
            name=f"Warning #{index} (ID: {warning.id})",
            value="\n".join(
                (
                    f"**Reason:** {warning.reason}",
                    f"**Date:** <t:{int(warning.timestamp.timestamp())}:f>",
                    f"**Moderator:** {moderator}",
                )
            ),
            inline=False,
        )
    return embed
