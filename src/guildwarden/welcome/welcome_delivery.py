"""Send the configured welcome embed for a member who joined."""

from typing import Any

from guildwarden.datatypes.discord_datatypes import user_tag
from guildwarden.datatypes.moderation_datatypes import AdvisoryOutcome
from guildwarden.ui.welcome_embed import build_welcome_embed
from guildwarden.util.logger import get_logger
from guildwarden.welcome.welcome_settings import WelcomeSettingsStore

logger = get_logger("welcome_delivery")


async def deliver_welcome(store: WelcomeSettingsStore, member: Any) -> AdvisoryOutcome:
    """Post the welcome message for ``member`` in its guild's welcome channel.

    Returns a failed outcome (and logs it) when welcome messages are disabled,
    the channel is gone, or the send raised. Never raises itself.
    """
    guild = member.guild
    settings = store.get(guild.id)
    if settings is None or not settings.enabled:
        return AdvisoryOutcome.failed("welcome system disabled")

    channel = guild.get_channel(settings.channel_id.to_int()) if settings.channel_id else None
    if channel is None or not hasattr(channel, "send"):
        logger.error("[WELCOME] Welcome channel not found or not a text channel for guild %s", guild.name)
        return AdvisoryOutcome.failed("welcome channel not found")

    try:
        await channel.send(
            content=member.mention if settings.mention_user else None,
            embed=build_welcome_embed(settings, member, guild),
        )
    except Exception as exc:
        logger.error("[WELCOME] Error sending welcome message in guild %s: %s", guild.name, exc)
        return AdvisoryOutcome.failed(str(exc))

    logger.info("[WELCOME] Sent welcome message for %s in %s", user_tag(member), guild.name)
    return AdvisoryOutcome.ok(f"sent to #{getattr(channel, 'name', channel.id)}")
