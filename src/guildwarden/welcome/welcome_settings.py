"""
Per-guild welcome message configuration.

Responsibilities:
- Hold one :class:`WelcomeSettings` record per guild, created on first write.
- Validate embed colors before storing them.

Settings live in memory only and are lost on restart.
"""

import dataclasses
import re
import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from guildwarden.configuration.app_configuration import (
    DEFAULT_WELCOME_COLOR,
    DEFAULT_WELCOME_FOOTER,
    DEFAULT_WELCOME_MESSAGE,
    DEFAULT_WELCOME_TITLE,
)
from guildwarden.datatypes.discord_datatypes import ChannelID, GuildID
from guildwarden.util.logger import get_logger

logger = get_logger("welcome_settings")

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

IdLike = Union[int, str, GuildID, ChannelID]


def is_hex_color(value: str) -> bool:
    """True for ``#rrggbb`` strings such as ``#0099ff``."""
    return bool(HEX_COLOR_PATTERN.match(value or ""))


@dataclass(slots=True)
class WelcomeSettings:
    """Welcome configuration of one guild."""

    enabled: bool = False
    channel_id: Optional[ChannelID] = None
    message: str = DEFAULT_WELCOME_MESSAGE
    embed_title: str = DEFAULT_WELCOME_TITLE
    embed_color: str = DEFAULT_WELCOME_COLOR
    footer_text: str = DEFAULT_WELCOME_FOOTER
    mention_user: bool = True
    show_rules: bool = False
    rules_channel_id: Optional[ChannelID] = None
    image_url: Optional[str] = None


SETTING_FIELDS = frozenset(f.name for f in dataclasses.fields(WelcomeSettings))


class WelcomeSettingsStore:
    """
    In-memory registry of :class:`WelcomeSettings`, keyed by guild.

    Readers receive copies; every change goes through :meth:`update` (or one
    of the shortcuts built on it) under a single lock.
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._defaults: Dict[str, Any] = {key: value for key, value in (defaults or {}).items() if key in SETTING_FIELDS}
        self._settings: Dict[GuildID, WelcomeSettings] = {}
        self._lock = threading.Lock()

    def _ensure(self, guild_key: GuildID) -> WelcomeSettings:
        settings = self._settings.get(guild_key)
        if settings is None:
            settings = self._settings[guild_key] = WelcomeSettings(**self._defaults)
            logger.debug("[WELCOME] Initialized welcome settings for guild %s", guild_key)
        return settings

    def init(self, guild_id: IdLike) -> WelcomeSettings:
        """Create default settings for the guild if needed and return a copy."""
        guild_key = GuildID(guild_id)
        with self._lock:
            return dataclasses.replace(self._ensure(guild_key))

    def get(self, guild_id: IdLike) -> Optional[WelcomeSettings]:
        """Return a copy of the guild's settings, or None if never configured."""
        with self._lock:
            settings = self._settings.get(GuildID(guild_id))
            return dataclasses.replace(settings) if settings is not None else None

    def update(self, guild_id: IdLike, **changes: Any) -> WelcomeSettings:
        """Apply ``changes`` to the guild's settings and return the new state.

        Raises:
            ValueError: For an unknown field or an invalid ``embed_color``.
        """
        unknown = set(changes) - SETTING_FIELDS
        if unknown:
            raise ValueError(f"Unknown welcome setting(s): {', '.join(sorted(unknown))}")
        color = changes.get("embed_color")
        if color is not None and not is_hex_color(color):
            raise ValueError(f"Invalid hex color: {color!r}")
        for key in ("channel_id", "rules_channel_id"):
            if changes.get(key) is not None:
                changes[key] = ChannelID(changes[key])

        guild_key = GuildID(guild_id)
        with self._lock:
            updated = dataclasses.replace(self._ensure(guild_key), **changes)
            self._settings[guild_key] = updated
            logger.debug("[WELCOME] Updated %s for guild %s", ", ".join(sorted(changes)), guild_key)
            return dataclasses.replace(updated)

    def enable(self, guild_id: IdLike, channel_id: IdLike) -> WelcomeSettings:
        return self.update(guild_id, enabled=True, channel_id=channel_id)

    def disable(self, guild_id: IdLike) -> WelcomeSettings:
        return self.update(guild_id, enabled=False)

    def set_message(self, guild_id: IdLike, message: str) -> WelcomeSettings:
        return self.update(guild_id, message=message)

    def set_rules_channel(
        self, guild_id: IdLike, show_rules: bool, rules_channel_id: Optional[IdLike] = None
    ) -> WelcomeSettings:
        return self.update(guild_id, show_rules=show_rules, rules_channel_id=rules_channel_id)

    def set_appearance(
        self,
        guild_id: IdLike,
        title: Optional[str] = None,
        color: Optional[str] = None,
        footer: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> WelcomeSettings:
        """Change the embed look; arguments left as None keep their current value."""
        changes = {
            "embed_title": title,
            "embed_color": color,
            "footer_text": footer,
            "image_url": image_url,
        }
        return self.update(guild_id, **{key: value for key, value in changes.items() if value is not None})

    def set_mention(self, guild_id: IdLike, enabled: bool) -> WelcomeSettings:
        return self.update(guild_id, mention_user=enabled)
