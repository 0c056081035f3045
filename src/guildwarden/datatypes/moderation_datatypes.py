"""
Value types shared by the moderation core.

Key types:
- `Capability`: the three moderation permissions the guard knows about.
- `PermissionFacts` / `PermissionCheckResult`: input and output of the guard.
- `WarningRecord`: one immutable disciplinary record held by the warning store.
- `AdvisoryOutcome`: result of a best-effort side effect (mod log, DM).
- `ModerationResult`: what the dispatcher hands to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from guildwarden.datatypes.action_datatypes import ActionType
from guildwarden.datatypes.discord_datatypes import GuildID, UserID


class Capability(Enum):
    """Moderation permission required by an action.

    The value is the attribute name on :class:`discord.Permissions`.
    """

    KICK_MEMBERS = "kick_members"
    BAN_MEMBERS = "ban_members"
    MODERATE_MEMBERS = "moderate_members"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class PermissionFacts:
    """Everything the hierarchy guard needs, already resolved from Discord.

    Attributes:
        actor_id: ID of the moderator running the command.
        actor_has_capability: Whether the moderator holds the required capability.
        actor_position: Position of the moderator's highest role.
        target_id: ID of the member being moderated.
        target_position: Position of the target's highest role.
        bot_has_capability: Whether the bot holds the required capability.
        bot_position: Position of the bot's highest role.
        capability: The capability the action requires.
        guild_owner_id: ID of the guild owner.
    """

    actor_id: UserID
    actor_has_capability: bool
    actor_position: int
    target_id: UserID
    target_position: int
    bot_has_capability: bool
    bot_position: int
    capability: Capability
    guild_owner_id: UserID


@dataclass(frozen=True, slots=True)
class PermissionCheckResult:
    success: bool
    message: str


@dataclass(frozen=True, slots=True)
class WarningRecord:
    """A single warning. Never mutated once created.

    Attributes:
        id: Token unique within the guild.
        guild_id: Guild the warning belongs to.
        user_id: Warned user.
        reason: Why the warning was issued.
        moderator_id: Moderator who issued it.
        timestamp: UTC creation time; warnings are listed newest first.
    """

    id: str
    guild_id: GuildID
    user_id: UserID
    reason: str
    moderator_id: UserID
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class AdvisoryOutcome:
    """Result of a side effect that must never fail the parent action."""

    success: bool
    detail: str = ""

    @classmethod
    def ok(cls, detail: str = "") -> "AdvisoryOutcome":
        return cls(True, detail)

    @classmethod
    def failed(cls, detail: str) -> "AdvisoryOutcome":
        return cls(False, detail)


class ModerationOutcome(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class ModerationResult:
    """Terminal state of one dispatched moderation action.

    ``details`` holds action-specific display values (formatted duration,
    deleted-history window). ``log_outcome`` and ``dm_outcome`` record the
    advisory side effects and are informational only.
    """

    outcome: ModerationOutcome
    message: str
    action_type: Optional[ActionType] = None
    target_id: Optional[UserID] = None
    target_tag: Optional[str] = None
    target_avatar_url: Optional[str] = None
    reason: Optional[str] = None
    warning_id: Optional[str] = None
    warning_count: Optional[int] = None
    warnings: List[WarningRecord] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
    log_outcome: Optional[AdvisoryOutcome] = None
    dm_outcome: Optional[AdvisoryOutcome] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is ModerationOutcome.SUCCEEDED

    @classmethod
    def failure(cls, message: str, action_type: Optional[ActionType] = None) -> "ModerationResult":
        return cls(ModerationOutcome.FAILED, message, action_type=action_type)


@dataclass(frozen=True, slots=True)
class ModerationLogEntry:
    """One completed action as written to the console and the mod-log channel."""

    action_type: ActionType
    target_id: UserID
    target_tag: str
    moderator_id: UserID
    moderator_tag: str
    reason: str
    additional_info: Optional[str] = None
    target_avatar_url: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
