"""
discord_gateway.py
==================

Thin adapter between the moderation dispatcher and a py-cord guild.

The dispatcher only talks to an object with this class's methods, so unit
tests can hand it a fake instead of a connected guild. Every mutation lets
py-cord's exceptions (``discord.Forbidden``, ``discord.HTTPException``)
propagate; the dispatcher turns them into failure messages.
"""

import datetime
from typing import Optional

import discord

from guildwarden.datatypes.discord_datatypes import UserID
from guildwarden.ui.moderation_embed import build_warning_dm_embed
from guildwarden.util.logger import get_logger

logger = get_logger("discord_gateway")

SECONDS_PER_DAY = 24 * 60 * 60


class DiscordModerationGateway:
    """Moderation primitives bound to one guild."""

    def __init__(self, guild: discord.Guild, client: Optional[discord.Client] = None) -> None:
        self.guild = guild
        self.client = client

    # --------------------------
    # Lookups
    # --------------------------
    @property
    def guild_id(self) -> int:
        return self.guild.id

    @property
    def guild_name(self) -> str:
        return self.guild.name

    @property
    def owner_id(self) -> int:
        return self.guild.owner_id

    @property
    def bot_member(self) -> Optional[discord.Member]:
        return self.guild.me

    def get_member(self, user_id: UserID) -> Optional[discord.Member]:
        """Return the cached guild member, or None if the user is not in the guild."""
        return self.guild.get_member(UserID(user_id).to_int())

    async def fetch_user(self, user_id: UserID) -> Optional[discord.abc.User]:
        """Resolve a user who may have left the guild."""
        member = self.get_member(user_id)
        if member is not None:
            return member
        if self.client is None:
            return None
        user = self.client.get_user(UserID(user_id).to_int())
        if user is not None:
            return user
        try:
            return await self.client.fetch_user(UserID(user_id).to_int())
        except discord.NotFound:
            return None

    async def fetch_ban(self, user_id: UserID) -> Optional[discord.abc.User]:
        """Return the banned user, or None when the user is not banned."""
        try:
            ban_entry = await self.guild.fetch_ban(discord.Object(id=UserID(user_id).to_int()))
        except discord.NotFound:
            return None
        return ban_entry.user

    def find_text_channel(self, name: str) -> Optional[discord.TextChannel]:
        return discord.utils.get(self.guild.text_channels, name=name)

    # --------------------------
    # Mutations
    # --------------------------
    async def kick(self, member: discord.Member, reason: str) -> None:
        await member.kick(reason=reason)

    async def ban(self, user_id: UserID, reason: str, delete_message_days: int = 0) -> None:
        await self.guild.ban(
            discord.Object(id=UserID(user_id).to_int()),
            reason=reason,
            delete_message_seconds=delete_message_days * SECONDS_PER_DAY,
        )

    async def unban(self, user_id: UserID, reason: str) -> None:
        await self.guild.unban(discord.Object(id=UserID(user_id).to_int()), reason=reason)

    async def set_timeout(self, member: discord.Member, duration_ms: Optional[int], reason: str) -> None:
        """Apply a timeout of ``duration_ms``, or lift it when ``duration_ms`` is None."""
        if duration_ms is None:
            await member.remove_timeout(reason=reason)
        else:
            await member.timeout_for(datetime.timedelta(milliseconds=duration_ms), reason=reason)

    async def notify_warning(self, member: discord.Member, warning_id: str, reason: str, total: int) -> None:
        """DM the warned member. Raises ``discord.Forbidden`` when their DMs are closed."""
        embed = build_warning_dm_embed(self.guild_name, warning_id, reason, total)
        await member.send(embed=embed)
        logger.debug("[GATEWAY] Sent warning %s DM to %s", warning_id, member.id)
