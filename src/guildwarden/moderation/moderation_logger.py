"""
Moderation logger: console line plus an optional guild ``mod-logs`` channel post.

Posting is best-effort. Whatever goes wrong, :meth:`ModerationLogger.log_action`
returns an :class:`AdvisoryOutcome` and never raises into the dispatcher.
"""

from typing import Any

from guildwarden.configuration.app_configuration import DEFAULT_MOD_LOG_CHANNEL
from guildwarden.datatypes.action_datatypes import ACTION_STYLES
from guildwarden.datatypes.moderation_datatypes import AdvisoryOutcome, ModerationLogEntry
from guildwarden.ui.moderation_embed import build_mod_log_embed
from guildwarden.util.logger import get_logger

logger = get_logger("moderation_logger")

NO_LOG_CHANNEL = "no log channel"


class ModerationLogger:
    """Report completed moderation actions."""

    def __init__(self, channel_name: str = DEFAULT_MOD_LOG_CHANNEL) -> None:
        self.channel_name = channel_name

    async def log_action(self, gateway: Any, entry: ModerationLogEntry) -> AdvisoryOutcome:
        """Write the console line, then post the embed if the guild has a log channel.

        Args:
            gateway: Guild adapter exposing ``find_text_channel(name)``.
            entry: The completed action.

        Returns:
            ``ok("no log channel")`` when the guild has no such channel,
            ``ok`` with the channel name once posted, or ``failed`` with the
            error text when the post raised.
        """
        logger.info(
            "[Moderation] %s | Target: %s (%s) | Moderator: %s | Reason: %s",
            ACTION_STYLES[entry.action_type].name,
            entry.target_tag,
            entry.target_id,
            entry.moderator_tag,
            entry.reason,
        )

        try:
            channel = gateway.find_text_channel(self.channel_name)
            if channel is None:
                return AdvisoryOutcome.ok(NO_LOG_CHANNEL)
            await channel.send(embed=build_mod_log_embed(entry))
        except Exception as exc:
            logger.error("[MODERATION LOGGER] Error logging %s action: %s", entry.action_type, exc)
            return AdvisoryOutcome.failed(str(exc))

        return AdvisoryOutcome.ok(f"posted to #{self.channel_name}")
