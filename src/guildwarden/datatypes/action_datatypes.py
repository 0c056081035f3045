"""
Action types and request structures for manual moderation.

``ActionType`` names every ``/mod`` subcommand. Each subcommand has a frozen
request dataclass carrying exactly the options it needs; the dispatcher
matches on these classes, so the set of actions is closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from guildwarden.datatypes.discord_datatypes import UserID


class ActionType(Enum):
    """Enumeration of supported moderation actions."""

    BAN = "ban"
    UNBAN = "unban"
    KICK = "kick"
    TIMEOUT = "timeout"
    REMOVE_TIMEOUT = "remove_timeout"
    WARN = "warn"
    WARNINGS = "warnings"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ActionStyle:
    """Display name, emoji and embed color used for one action type."""

    name: str
    emoji: str
    color: int


ACTION_STYLES: dict[ActionType, ActionStyle] = {
    ActionType.BAN: ActionStyle("Ban", "🔨", 0xFF0000),
    ActionType.KICK: ActionStyle("Kick", "👢", 0xFF9900),
    ActionType.TIMEOUT: ActionStyle("Timeout", "⏰", 0xFFCC00),
    ActionType.WARN: ActionStyle("Warning", "⚠️", 0xFFFF00),
    ActionType.UNBAN: ActionStyle("Unban", "🔓", 0x00FF00),
    ActionType.REMOVE_TIMEOUT: ActionStyle("Remove Timeout", "⏱️", 0x00FFCC),
    ActionType.WARNINGS: ActionStyle("Warning History", "⚠️", 0xFFCC00),
}

# Infinitive used in "Failed to <verb> <user>" messages
ACTION_VERBS: dict[ActionType, str] = {
    ActionType.BAN: "ban",
    ActionType.KICK: "kick",
    ActionType.TIMEOUT: "timeout",
    ActionType.WARN: "warn",
    ActionType.UNBAN: "unban",
    ActionType.REMOVE_TIMEOUT: "remove timeout from",
    ActionType.WARNINGS: "fetch warning history for",
}


@dataclass(frozen=True, slots=True)
class KickAction:
    target_id: UserID
    reason: str | None = None

    action_type = ActionType.KICK


@dataclass(frozen=True, slots=True)
class BanAction:
    """Ban request. ``delete_message_days`` is one of 0, 1, 3 or 7."""

    target_id: UserID
    reason: str | None = None
    delete_message_days: int = 0

    action_type = ActionType.BAN


@dataclass(frozen=True, slots=True)
class UnbanAction:
    """Unban request. ``user_id`` is the raw text typed by the moderator."""

    user_id: str
    reason: str | None = None

    action_type = ActionType.UNBAN


@dataclass(frozen=True, slots=True)
class TimeoutAction:
    target_id: UserID
    duration: str
    reason: str | None = None

    action_type = ActionType.TIMEOUT


@dataclass(frozen=True, slots=True)
class RemoveTimeoutAction:
    target_id: UserID
    reason: str | None = None

    action_type = ActionType.REMOVE_TIMEOUT


@dataclass(frozen=True, slots=True)
class WarnAction:
    target_id: UserID
    reason: str

    action_type = ActionType.WARN


@dataclass(frozen=True, slots=True)
class ListWarningsAction:
    target_id: UserID

    action_type = ActionType.WARNINGS


ModerationAction = Union[
    KickAction,
    BanAction,
    UnbanAction,
    TimeoutAction,
    RemoveTimeoutAction,
    WarnAction,
    ListWarningsAction,
]
