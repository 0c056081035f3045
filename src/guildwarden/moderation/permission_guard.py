"""
permission_guard.py
===================

Permission and role-hierarchy checks for manual moderation.

:func:`check_moderator_permission` is a pure decision over
:class:`PermissionFacts`. :func:`collect_permission_facts` reads those facts
off py-cord members so the decision itself never touches the Discord API.
"""

from typing import Any, Optional

from guildwarden.datatypes.discord_datatypes import UserID
from guildwarden.datatypes.moderation_datatypes import (
    Capability,
    PermissionCheckResult,
    PermissionFacts,
)
from guildwarden.util.logger import get_logger

logger = get_logger("permission_guard")

PERMISSION_CHECK_PASSED = "Permissions check passed."


def check_moderator_permission(facts: PermissionFacts) -> PermissionCheckResult:
    """Decide whether the actor may apply a moderation action to the target.

    Checks run in a fixed order and stop at the first failure, each with its
    own message:

    1. the moderator holds the capability;
    2. the bot holds the capability;
    3. the target ranks strictly below the moderator (the guild owner skips this);
    4. the target ranks strictly below the bot (nobody skips this);
    5. the target is not the guild owner.

    Parameters
    ----------
    facts:
        Capability grants and role positions resolved by the caller.

    Returns
    -------
    PermissionCheckResult
        ``success`` is True only when every check passed.
    """
    capability = facts.capability

    if not facts.actor_has_capability:
        return PermissionCheckResult(False, f"You don't have {capability} permission!")

    if not facts.bot_has_capability:
        return PermissionCheckResult(False, f"I don't have {capability} permission!")

    actor_is_owner = facts.actor_id == facts.guild_owner_id
    if facts.target_position >= facts.actor_position and not actor_is_owner:
        return PermissionCheckResult(
            False,
            "You cannot moderate this user as they have an equal or higher role than you.",
        )

    if facts.target_position >= facts.bot_position:
        return PermissionCheckResult(
            False,
            "I cannot moderate this user as they have an equal or higher role than me.",
        )

    if facts.target_id == facts.guild_owner_id:
        return PermissionCheckResult(False, "I cannot moderate the server owner.")

    return PermissionCheckResult(True, PERMISSION_CHECK_PASSED)


def member_has_capability(member: Any, capability: Capability) -> bool:
    """Return whether ``member`` holds ``capability`` in its guild.

    Administrators implicitly hold every capability.
    """
    permissions = getattr(member, "guild_permissions", None)
    if permissions is None:
        return False
    if getattr(permissions, "administrator", False):
        return True
    return bool(getattr(permissions, capability.value, False))


def highest_role_position(member: Any) -> int:
    """Position of the member's highest role; 0 (``@everyone``) when unknown."""
    top_role = getattr(member, "top_role", None)
    return int(getattr(top_role, "position", 0) or 0)


def collect_permission_facts(
    actor: Any,
    target: Any,
    bot_member: Any,
    capability: Capability,
    guild_owner_id: int | UserID,
) -> PermissionFacts:
    """Build :class:`PermissionFacts` from py-cord member objects.

    Parameters
    ----------
    actor:
        Member running the command.
    target:
        Member the action applies to.
    bot_member:
        The bot's own member object in the guild (``guild.me``).
    capability:
        Capability the action requires.
    guild_owner_id:
        ``guild.owner_id``.
    """
    return PermissionFacts(
        actor_id=UserID(actor.id),
        actor_has_capability=member_has_capability(actor, capability),
        actor_position=highest_role_position(actor),
        target_id=UserID(target.id),
        target_position=highest_role_position(target),
        bot_has_capability=member_has_capability(bot_member, capability),
        bot_position=highest_role_position(bot_member),
        capability=capability,
        guild_owner_id=UserID(guild_owner_id),
    )


def check_member_permission(
    actor: Any,
    target: Any,
    bot_member: Optional[Any],
    capability: Capability,
    guild_owner_id: int | UserID,
) -> PermissionCheckResult:
    """Collect facts from live members and run :func:`check_moderator_permission`.

    A missing bot member is reported before any hierarchy comparison, since
    none of the bot-side checks can be evaluated without it.
    """
    if bot_member is None:
        logger.warning("[PERMISSION GUARD] Bot member unavailable while checking %s", capability)
        return PermissionCheckResult(False, "Failed to retrieve bot's member information.")

    facts = collect_permission_facts(actor, target, bot_member, capability, guild_owner_id)
    result = check_moderator_permission(facts)
    if not result.success:
        logger.debug(
            "[PERMISSION GUARD] Denied %s by %s on %s: %s",
            capability, facts.actor_id, facts.target_id, result.message,
        )
    return result
