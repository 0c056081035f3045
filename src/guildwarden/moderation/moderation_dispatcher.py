"""
moderation_dispatcher.py
========================

Execute one ``/mod`` subcommand from start to finish.

Each action request runs these stages in order:

1. Resolve the target and validate options (membership, duration, ID format).
2. Run the permission and hierarchy guard.
3. Call the guild gateway mutation.
4. Record the action with the moderation logger (best-effort).

The first failing stage ends the run with a failed :class:`ModerationResult`.
Exceptions raised by the gateway are caught here and relayed as
``"Failed to <verb> <user>. Error: <message>"``; nothing raises past
:meth:`ModerationDispatcher.dispatch`.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from guildwarden.configuration.app_configuration import DEFAULT_MAX_TIMEOUT_DAYS, DEFAULT_REASON
from guildwarden.datatypes.action_datatypes import (
    ACTION_VERBS,
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
from guildwarden.datatypes.discord_datatypes import UserID, is_snowflake, user_tag
from guildwarden.datatypes.moderation_datatypes import (
    AdvisoryOutcome,
    Capability,
    ModerationLogEntry,
    ModerationOutcome,
    ModerationResult,
)
from guildwarden.moderation.duration_parser import DAY_MS, format_duration, parse_duration
from guildwarden.moderation.moderation_logger import ModerationLogger
from guildwarden.moderation.permission_guard import check_member_permission, member_has_capability
from guildwarden.moderation.warning_store import WarningStore
from guildwarden.util.logger import get_logger

logger = get_logger("moderation_dispatcher")

NOT_A_MEMBER = "That user doesn't appear to be in this server."
UNKNOWN_SUBCOMMAND = "Unknown subcommand!"
INVALID_DURATION = "Invalid duration format. Examples: 30s, 5m, 1h, 1d"
NOT_TIMED_OUT = "This user is not currently timed out."
UNBAN_NOT_ALLOWED = "You don't have permission to unban members!"
INVALID_USER_ID = "Invalid user ID format. The ID should be a number with 17-20 digits."
NOT_BANNED = "That user is not banned from this server!"
USER_NOT_FOUND = "Failed to find the specified user."
WARN_REASON_REQUIRED = "You must provide a reason for the warning."
WARNINGS_NOT_ALLOWED = "You don't have permission to view warnings!"
UNEXPECTED_ERROR = "An error occurred while executing this command!"

DELETE_HISTORY_LABELS = {
    0: "Don't delete any",
    1: "Previous 24 hours",
    3: "Previous 3 days",
    7: "Previous 7 days",
}


def audit_reason(reason: str, actor: Any) -> str:
    """Reason string recorded in the guild audit log."""
    return f"{reason} - By {user_tag(actor)}"


def is_timed_out(member: Any) -> bool:
    """Whether ``member`` currently has communication disabled."""
    timed_out = getattr(member, "timed_out", None)
    if timed_out is not None:
        return bool(timed_out)
    until = getattr(member, "communication_disabled_until", None)
    return until is not None and until > datetime.now(timezone.utc)


def _avatar_url(user: Any) -> Optional[str]:
    avatar = getattr(user, "display_avatar", None)
    url = getattr(avatar, "url", None)
    return str(url) if url else None


class ModerationDispatcher:
    """Route action requests to their handlers.

    Args:
        warning_store: Store used by ``warn`` and ``warnings``.
        mod_logger: Logger notified after every successful mutation.
        max_timeout_days: Ceiling for ``timeout`` durations.
        default_reason: Reason recorded when the moderator gave none.
    """

    def __init__(
        self,
        warning_store: WarningStore,
        mod_logger: ModerationLogger,
        max_timeout_days: int = DEFAULT_MAX_TIMEOUT_DAYS,
        default_reason: str = DEFAULT_REASON,
    ) -> None:
        self.warning_store = warning_store
        self.mod_logger = mod_logger
        self.max_timeout_days = max_timeout_days
        self.default_reason = default_reason

    @property
    def max_timeout_ms(self) -> int:
        return self.max_timeout_days * DAY_MS

    async def dispatch(self, action: ModerationAction, actor: Any, gateway: Any) -> ModerationResult:
        """Run ``action`` on behalf of ``actor`` inside the guild behind ``gateway``.

        Args:
            action: One of the action request dataclasses.
            actor: The guild member who invoked the command.
            gateway: Guild adapter (see :class:`DiscordModerationGateway`).

        Returns:
            The terminal result. Never raises.
        """
        try:
            match action:
                case KickAction():
                    return await self._kick(action, actor, gateway)
                case BanAction():
                    return await self._ban(action, actor, gateway)
                case UnbanAction():
                    return await self._unban(action, actor, gateway)
                case TimeoutAction():
                    return await self._timeout(action, actor, gateway)
                case RemoveTimeoutAction():
                    return await self._remove_timeout(action, actor, gateway)
                case WarnAction():
                    return await self._warn(action, actor, gateway)
                case ListWarningsAction():
                    return self._list_warnings(action, actor, gateway)
                case _:
                    logger.warning("[MODERATION] Unknown action request: %r", action)
                    return ModerationResult.failure(UNKNOWN_SUBCOMMAND)
        except Exception as exc:
            logger.exception("[MODERATION] Unhandled error while dispatching %r: %s", action, exc)
            return ModerationResult.failure(UNEXPECTED_ERROR, getattr(action, "action_type", None))

    # --------------------------
    # Shared stages
    # --------------------------
    def _guard(self, actor: Any, target: Any, gateway: Any, capability: Capability) -> Optional[str]:
        """Return the guard's refusal message, or None when the action may proceed."""
        result = check_member_permission(actor, target, gateway.bot_member, capability, gateway.owner_id)
        return None if result.success else result.message

    async def _mutate(self, action_type: ActionType, target_label: str, mutation) -> Optional[str]:
        """Await the gateway call; return the relayed error message when it raises."""
        try:
            await mutation
        except Exception as exc:
            logger.error("[MODERATION] Failed to %s %s: %s", ACTION_VERBS[action_type], target_label, exc)
            return f"Failed to {ACTION_VERBS[action_type]} {target_label}. Error: {exc}"
        return None

    async def _record(
        self,
        gateway: Any,
        action_type: ActionType,
        target: Any,
        actor: Any,
        reason: str,
        additional_info: Optional[str] = None,
    ) -> AdvisoryOutcome:
        entry = ModerationLogEntry(
            action_type=action_type,
            target_id=UserID(target.id),
            target_tag=user_tag(target),
            moderator_id=UserID(actor.id),
            moderator_tag=user_tag(actor),
            reason=reason,
            additional_info=additional_info,
            target_avatar_url=_avatar_url(target),
        )
        try:
            return await self.mod_logger.log_action(gateway, entry)
        except Exception as exc:
            logger.error("[MODERATION] Moderation logger raised for %s: %s", action_type, exc)
            return AdvisoryOutcome.failed(str(exc))

    def _success(self, action_type: ActionType, target: Any, reason: str, message: str, **extra) -> ModerationResult:
        return ModerationResult(
            outcome=ModerationOutcome.SUCCEEDED,
            message=message,
            action_type=action_type,
            target_id=UserID(target.id),
            target_tag=user_tag(target),
            target_avatar_url=_avatar_url(target),
            reason=reason,
            **extra,
        )

    def _reason(self, reason: Optional[str]) -> str:
        return reason.strip() if reason and reason.strip() else self.default_reason

    # --------------------------
    # Handlers
    # --------------------------
    async def _kick(self, action: KickAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        member = gateway.get_member(action.target_id)
        if member is None:
            return ModerationResult.failure(NOT_A_MEMBER, action_type)

        refusal = self._guard(actor, member, gateway, Capability.KICK_MEMBERS)
        if refusal:
            return ModerationResult.failure(refusal, action_type)

        reason = self._reason(action.reason)
        error = await self._mutate(action_type, user_tag(member), gateway.kick(member, audit_reason(reason, actor)))
        if error:
            return ModerationResult.failure(error, action_type)

        result = self._success(action_type, member, reason, f"{user_tag(member)} has been kicked from the server.")
        result.log_outcome = await self._record(gateway, action_type, member, actor, reason)
        return result

    async def _ban(self, action: BanAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        member = gateway.get_member(action.target_id)
        target = member
        if target is None:
            try:
                target = await gateway.fetch_user(action.target_id)
            except Exception as exc:
                logger.error("[MODERATION] Failed to look up user %s: %s", action.target_id, exc)
                return ModerationResult.failure(f"Failed to ban user. Error: {exc}", action_type)
        if target is None:
            return ModerationResult.failure(USER_NOT_FOUND, action_type)

        if member is not None:
            refusal = self._guard(actor, member, gateway, Capability.BAN_MEMBERS)
            if refusal:
                return ModerationResult.failure(refusal, action_type)
        elif not member_has_capability(actor, Capability.BAN_MEMBERS):
            return ModerationResult.failure(f"You don't have {Capability.BAN_MEMBERS} permission!", action_type)

        reason = self._reason(action.reason)
        days = action.delete_message_days
        error = await self._mutate(
            action_type,
            user_tag(target),
            gateway.ban(action.target_id, audit_reason(reason, actor), days),
        )
        if error:
            return ModerationResult.failure(error, action_type)

        history = DELETE_HISTORY_LABELS.get(days, f"Previous {days} days")
        result = self._success(
            action_type,
            target,
            reason,
            f"{user_tag(target)} has been banned from the server.",
            details={"message_history": history},
        )
        result.log_outcome = await self._record(
            gateway, action_type, target, actor, reason, f"Message history deleted: {history}"
        )
        return result

    async def _unban(self, action: UnbanAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        if not member_has_capability(actor, Capability.BAN_MEMBERS):
            return ModerationResult.failure(UNBAN_NOT_ALLOWED, action_type)

        raw_id = (action.user_id or "").strip()
        if not is_snowflake(raw_id):
            return ModerationResult.failure(INVALID_USER_ID, action_type)

        try:
            banned_user = await gateway.fetch_ban(raw_id)
        except Exception as exc:
            logger.error("[MODERATION] Failed to read ban list: %s", exc)
            return ModerationResult.failure(f"Failed to unban user. Error: {exc}", action_type)
        if banned_user is None:
            return ModerationResult.failure(NOT_BANNED, action_type)

        reason = self._reason(action.reason)
        error = await self._mutate(action_type, user_tag(banned_user), gateway.unban(raw_id, audit_reason(reason, actor)))
        if error:
            return ModerationResult.failure(error, action_type)

        result = self._success(action_type, banned_user, reason, f"{user_tag(banned_user)} has been unbanned from the server.")
        result.log_outcome = await self._record(gateway, action_type, banned_user, actor, reason)
        return result

    async def _timeout(self, action: TimeoutAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        member = gateway.get_member(action.target_id)
        if member is None:
            return ModerationResult.failure(NOT_A_MEMBER, action_type)

        duration_ms = parse_duration(action.duration)
        if duration_ms is None:
            return ModerationResult.failure(INVALID_DURATION, action_type)
        if duration_ms > self.max_timeout_ms:
            return ModerationResult.failure(
                f"Timeout duration cannot exceed {self.max_timeout_days} days. Please specify a shorter duration.",
                action_type,
            )

        refusal = self._guard(actor, member, gateway, Capability.MODERATE_MEMBERS)
        if refusal:
            return ModerationResult.failure(refusal, action_type)

        reason = self._reason(action.reason)
        error = await self._mutate(
            action_type, user_tag(member), gateway.set_timeout(member, duration_ms, audit_reason(reason, actor))
        )
        if error:
            return ModerationResult.failure(error, action_type)

        duration_text = format_duration(duration_ms)
        result = self._success(
            action_type,
            member,
            reason,
            f"{user_tag(member)} has been timed out for {duration_text}.",
            details={"duration": duration_text, "duration_ms": duration_ms},
        )
        result.log_outcome = await self._record(gateway, action_type, member, actor, reason, f"Duration: {duration_text}")
        return result

    async def _remove_timeout(self, action: RemoveTimeoutAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        member = gateway.get_member(action.target_id)
        if member is None:
            return ModerationResult.failure(NOT_A_MEMBER, action_type)
        if not is_timed_out(member):
            return ModerationResult.failure(NOT_TIMED_OUT, action_type)

        refusal = self._guard(actor, member, gateway, Capability.MODERATE_MEMBERS)
        if refusal:
            return ModerationResult.failure(refusal, action_type)

        reason = self._reason(action.reason)
        error = await self._mutate(
            action_type, user_tag(member), gateway.set_timeout(member, None, audit_reason(reason, actor))
        )
        if error:
            return ModerationResult.failure(error, action_type)

        result = self._success(action_type, member, reason, f"Timeout has been removed from {user_tag(member)}.")
        result.log_outcome = await self._record(gateway, action_type, member, actor, reason)
        return result

    async def _warn(self, action: WarnAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        member = gateway.get_member(action.target_id)
        if member is None:
            return ModerationResult.failure(NOT_A_MEMBER, action_type)
        if not action.reason or not action.reason.strip():
            return ModerationResult.failure(WARN_REASON_REQUIRED, action_type)

        refusal = self._guard(actor, member, gateway, Capability.MODERATE_MEMBERS)
        if refusal:
            return ModerationResult.failure(refusal, action_type)

        reason = action.reason.strip()
        try:
            warning_id = self.warning_store.add_warning(gateway.guild_id, member.id, reason, actor.id)
        except ValueError as exc:
            return ModerationResult.failure(f"Failed to warn {user_tag(member)}. Error: {exc}", action_type)
        total = self.warning_store.count_warnings(gateway.guild_id, member.id)

        try:
            await gateway.notify_warning(member, warning_id, reason, total)
            dm_outcome = AdvisoryOutcome.ok("dm delivered")
        except Exception as exc:
            logger.warning("[MODERATION] Could not DM warning to %s: %s", user_tag(member), exc)
            dm_outcome = AdvisoryOutcome.failed(str(exc))

        result = self._success(
            action_type,
            member,
            reason,
            f"{user_tag(member)} has been warned.",
            warning_id=warning_id,
            warning_count=total,
            dm_outcome=dm_outcome,
        )
        result.log_outcome = await self._record(
            gateway, action_type, member, actor, reason, f"Warning ID: {warning_id} | Total warnings: {total}"
        )
        return result

    def _list_warnings(self, action: ListWarningsAction, actor: Any, gateway: Any) -> ModerationResult:
        action_type = action.action_type
        if not member_has_capability(actor, Capability.MODERATE_MEMBERS):
            return ModerationResult.failure(WARNINGS_NOT_ALLOWED, action_type)

        warnings = self.warning_store.get_warnings(gateway.guild_id, action.target_id)
        member = gateway.get_member(action.target_id)
        target_id = UserID(action.target_id)
        return ModerationResult(
            outcome=ModerationOutcome.SUCCEEDED,
            message=f"Found {len(warnings)} warning(s).",
            action_type=action_type,
            target_id=target_id,
            target_tag=user_tag(member) if member is not None else str(target_id),
            target_avatar_url=_avatar_url(member),
            warnings=warnings,
            warning_count=len(warnings),
        )
