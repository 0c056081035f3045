"""
Welcome message rendering.

Template placeholders:
- ``{user}``: mention of the new member
- ``{username}``: account name
- ``{tag}``: display tag (``name`` or ``name#1234``)
- ``{server}``: guild name
- ``{memberCount}``: guild member count
"""

import datetime
from typing import Any, Optional

import discord

from guildwarden.configuration.app_configuration import DEFAULT_WELCOME_COLOR
from guildwarden.datatypes.discord_datatypes import user_tag
from guildwarden.welcome.welcome_settings import WelcomeSettings, is_hex_color

PREVIEW_NOTE = "This is a preview of your welcome message. New members will see this when they join."
MAX_FIELD_VALUE = 1024


def format_welcome_message(template: Optional[str], member: Any, guild: Any) -> str:
    """Replace every placeholder in ``template``; an empty template renders as ''."""
    if not template:
        return ""
    return (
        template.replace("{user}", getattr(member, "mention", f"<@{member.id}>"))
        .replace("{username}", str(getattr(member, "name", "")))
        .replace("{tag}", user_tag(member))
        .replace("{server}", str(guild.name))
        .replace("{memberCount}", str(getattr(guild, "member_count", 0) or 0))
    )


def parse_color(value: Optional[str]) -> discord.Color:
    """Convert ``#rrggbb`` into a :class:`discord.Color`, falling back to the default blue."""
    if not value or not is_hex_color(value):
        value = DEFAULT_WELCOME_COLOR
    return discord.Color(int(value[1:], 16))


def _icon_url(guild: Any) -> Optional[str]:
    icon = getattr(guild, "icon", None)
    return str(icon.url) if icon else None


def build_welcome_embed(settings: WelcomeSettings, member: Any, guild: Any) -> discord.Embed:
    """Embed posted in the welcome channel when ``member`` joins ``guild``."""
    description = format_welcome_message(settings.message, member, guild) or (
        f"Welcome to the server, {member.mention}! We're glad to have you here."
    )
    embed = discord.Embed(
        title=settings.embed_title or f"Welcome to {guild.name}!",
        description=description,
        color=parse_color(settings.embed_color),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(name="User", value=user_tag(member), inline=True)
    embed.add_field(name="Account Created", value=member.created_at.strftime("%Y-%m-%d"), inline=True)
    embed.add_field(name="Member Count", value=str(guild.member_count or 0), inline=True)

    if settings.show_rules and settings.rules_channel_id:
        embed.add_field(
            name="📜 Server Rules",
            value=f"Please check <#{settings.rules_channel_id}> to get started!",
            inline=False,
        )
    if settings.image_url:
        embed.set_image(url=settings.image_url)

    embed.set_footer(text=settings.footer_text or f"Welcome to {guild.name}!", icon_url=_icon_url(guild))
    return embed


def build_preview_embed(settings: WelcomeSettings, member: Any, guild: Any) -> discord.Embed:
    embed = build_welcome_embed(settings, member, guild)
    embed.add_field(name="⚠️ Preview Mode", value=PREVIEW_NOTE, inline=False)
    return embed


def _clip(text: str, limit: int = MAX_FIELD_VALUE) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def build_status_embed(settings: WelcomeSettings) -> discord.Embed:
    """Summary of the guild's welcome configuration for ``/welcome status``."""
    embed = discord.Embed(
        title="Welcome System Status",
        color=discord.Color(0x0099FF),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name="Status", value="✅ Enabled" if settings.enabled else "❌ Disabled", inline=True)
    embed.add_field(
        name="Welcome Channel",
        value=f"<#{settings.channel_id}>" if settings.channel_id else "Not set",
        inline=True,
    )
    embed.add_field(name="Mention User", value="Yes" if settings.mention_user else "No", inline=True)
    embed.add_field(name="Show Rules", value="Yes" if settings.show_rules else "No", inline=True)
    embed.add_field(
        name="Rules Channel",
        value=f"<#{settings.rules_channel_id}>" if settings.rules_channel_id else "Not set",
        inline=True,
    )
    embed.add_field(name="Embed Color", value=settings.embed_color or DEFAULT_WELCOME_COLOR, inline=True)

    if settings.message:
        embed.add_field(name="Welcome Message", value=f"```\n{_clip(settings.message, MAX_FIELD_VALUE - 8)}\n```", inline=False)
    if settings.embed_title:
        embed.add_field(name="Embed Title", value=_clip(settings.embed_title), inline=True)
    if settings.footer_text:
        embed.add_field(name="Footer Text", value=_clip(settings.footer_text), inline=True)
    if settings.image_url:
        embed.add_field(name="Image URL", value=_clip(settings.image_url), inline=False)
        embed.set_image(url=settings.image_url)
    return embed
