"""
In-memory warning storage.

Responsibilities:
- Keep every warning per guild and per user, in insertion order.
- Mint warning IDs that are unique within their guild.
- Index warnings by ID so removal does not scan the whole guild.

Nothing is persisted: a restart forgets every warning. One store is built at
startup and handed to whoever needs it; tests build their own.
"""

import collections
import itertools
import secrets
import threading
from datetime import datetime, timezone
from typing import DefaultDict, Dict, List, Optional, Tuple, Union

from guildwarden.datatypes.discord_datatypes import GuildID, UserID
from guildwarden.datatypes.moderation_datatypes import WarningRecord
from guildwarden.util.logger import get_logger

logger = get_logger("warning_store")

WARNING_ID_BYTES = 4  # 8 hex characters

IdLike = Union[int, str, GuildID, UserID]


class WarningStore:
    """
    Per-guild, per-user collection of :class:`WarningRecord` objects.

    Mutations take a per-guild lock, so concurrent callers on different guilds
    never wait on each other. Readers get new lists of frozen records and
    cannot change what the store holds.
    """

    def __init__(self) -> None:
        # guild_id -> user_id -> [(sequence, warning)] in insertion order
        self._warnings: DefaultDict[GuildID, Dict[UserID, List[Tuple[int, WarningRecord]]]] = (
            collections.defaultdict(dict)
        )
        # guild_id -> warning_id -> user_id
        self._index: DefaultDict[GuildID, Dict[str, UserID]] = collections.defaultdict(dict)

        self._guild_locks: Dict[GuildID, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        # Breaks timestamp ties so equal timestamps still list newest first
        self._sequence = itertools.count()

    def _lock_for(self, guild_id: GuildID) -> threading.Lock:
        with self._locks_guard:
            lock = self._guild_locks.get(guild_id)
            if lock is None:
                lock = self._guild_locks[guild_id] = threading.Lock()
            return lock

    def _new_warning_id(self, guild_id: GuildID) -> str:
        guild_index = self._index[guild_id]
        while True:
            warning_id = secrets.token_hex(WARNING_ID_BYTES)
            if warning_id not in guild_index:
                return warning_id
            logger.debug("[WARNING STORE] Warning ID collision in guild %s, regenerating", guild_id)

    def add_warning(
        self,
        guild_id: IdLike,
        user_id: IdLike,
        reason: str,
        moderator_id: IdLike,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Record a new warning and return its ID.

        Args:
            guild_id: Guild the warning belongs to.
            user_id: Warned user.
            reason: Why the warning was issued; must not be blank.
            moderator_id: Moderator issuing the warning; must not be blank.
            timestamp: Creation time. Defaults to now (UTC).

        Raises:
            ValueError: If ``reason`` or ``moderator_id`` is empty.
        """
        if not reason or not str(reason).strip():
            raise ValueError("A warning requires a reason.")
        if moderator_id is None or not str(moderator_id).strip():
            raise ValueError("A warning requires a moderator.")

        guild_key = GuildID(guild_id)
        user_key = UserID(user_id)
        when = timestamp or datetime.now(timezone.utc)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)

        with self._lock_for(guild_key):
            warning = WarningRecord(
                id=self._new_warning_id(guild_key),
                guild_id=guild_key,
                user_id=user_key,
                reason=reason,
                moderator_id=UserID(moderator_id),
                timestamp=when,
            )
            self._warnings[guild_key].setdefault(user_key, []).append((next(self._sequence), warning))
            self._index[guild_key][warning.id] = user_key

        logger.debug("[WARNING STORE] Added warning %s for user %s in guild %s", warning.id, user_key, guild_key)
        return warning.id

    def get_warnings(self, guild_id: IdLike, user_id: IdLike) -> List[WarningRecord]:
        """Return the user's warnings, newest first (empty list when none)."""
        guild_key = GuildID(guild_id)
        user_key = UserID(user_id)

        with self._lock_for(guild_key):
            entries = list(self._warnings.get(guild_key, {}).get(user_key, ()))

        entries.sort(key=lambda entry: (entry[1].timestamp, entry[0]), reverse=True)
        return [warning for _, warning in entries]

    def count_warnings(self, guild_id: IdLike, user_id: IdLike) -> int:
        guild_key = GuildID(guild_id)
        with self._lock_for(guild_key):
            return len(self._warnings.get(guild_key, {}).get(UserID(user_id), ()))

    def remove_warning(self, guild_id: IdLike, warning_id: str) -> bool:
        """Delete a warning by ID. Returns False when no such warning exists."""
        guild_key = GuildID(guild_id)

        with self._lock_for(guild_key):
            user_key = self._index.get(guild_key, {}).pop(warning_id, None)
            if user_key is None:
                return False

            user_warnings = self._warnings[guild_key].get(user_key, [])
            for position, (_, warning) in enumerate(user_warnings):
                if warning.id == warning_id:
                    del user_warnings[position]
                    break

        logger.debug("[WARNING STORE] Removed warning %s from guild %s", warning_id, guild_key)
        return True

    def clear_warnings(self, guild_id: IdLike, user_id: IdLike) -> int:
        """Delete every warning of the user and return how many were removed."""
        guild_key = GuildID(guild_id)
        user_key = UserID(user_id)

        with self._lock_for(guild_key):
            removed = self._warnings.get(guild_key, {}).pop(user_key, [])
            guild_index = self._index.get(guild_key, {})
            for _, warning in removed:
                guild_index.pop(warning.id, None)

        if removed:
            logger.info("[WARNING STORE] Cleared %d warning(s) for user %s in guild %s", len(removed), user_key, guild_key)
        return len(removed)
