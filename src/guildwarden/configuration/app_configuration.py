from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from guildwarden.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_MOD_LOG_CHANNEL = "mod-logs"
DEFAULT_MAX_TIMEOUT_DAYS = 28
DEFAULT_REASON = "No reason provided"
DEFAULT_WELCOME_MESSAGE = (
    "Welcome to {server}, {user}! We're glad to have you here. "
    "You are member number {memberCount}."
)
DEFAULT_WELCOME_TITLE = "👋 New Member!"
DEFAULT_WELCOME_COLOR = "#0099ff"
DEFAULT_WELCOME_FOOTER = "Thanks for joining us!"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts for the moderation and welcome sections. Every shortcut
    falls back to a built-in default when the key is missing or malformed, so a
    missing file still yields a working bot.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns an empty dict when the file is missing or unreadable.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping (do not mutate)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # Moderation shortcuts
    # --------------------------
    @property
    def mod_log_channel(self) -> str:
        """Name of the text channel that receives moderation log embeds."""
        value = self._section("moderation").get("mod_log_channel")
        return str(value) if value else DEFAULT_MOD_LOG_CHANNEL

    @property
    def max_timeout_days(self) -> int:
        """Longest timeout the bot will apply, in days (Discord caps it at 28)."""
        value = self._section("moderation").get("max_timeout_days", DEFAULT_MAX_TIMEOUT_DAYS)
        try:
            days = int(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid max_timeout_days %r; using %d", value, DEFAULT_MAX_TIMEOUT_DAYS)
            return DEFAULT_MAX_TIMEOUT_DAYS
        return days if days > 0 else DEFAULT_MAX_TIMEOUT_DAYS

    @property
    def default_reason(self) -> str:
        value = self._section("moderation").get("default_reason")
        return str(value) if value else DEFAULT_REASON

    # --------------------------
    # Welcome shortcuts
    # --------------------------
    @property
    def welcome_defaults(self) -> Dict[str, Any]:
        """Defaults applied to a guild the first time its welcome settings are touched."""
        section = self._section("welcome")
        return {
            "message": str(section.get("default_message") or DEFAULT_WELCOME_MESSAGE),
            "embed_title": str(section.get("default_title") or DEFAULT_WELCOME_TITLE),
            "embed_color": str(section.get("default_color") or DEFAULT_WELCOME_COLOR),
            "footer_text": str(section.get("default_footer") or DEFAULT_WELCOME_FOOTER),
        }

    # --------------------------
    # Bot shortcuts
    # --------------------------
    @property
    def presence_text(self) -> str:
        """Activity text shown under the bot's name."""
        value = self._section("bot").get("presence")
        return str(value) if value else "over the server"


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
