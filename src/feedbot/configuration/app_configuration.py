from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from feedbot.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_DATABASE_PATH = "./data/feedbot.db"
DEFAULT_LIST_PAGE_SIZE = 1900
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_STATUS_TEXT = "your feeds | /feed:help"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts for the values the bot needs at startup. Uses fcntl file
    locks for safe concurrent access across processes.
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
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s must be a mapping, got %s", self.config_path, type(data).__name__)
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

        Returns an empty dict when the file is missing or malformed.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers must not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Path of the SQLite database file."""
        value = self._section("database").get("path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def list_page_size(self) -> int:
        """Maximum characters per message sent by the ``list`` command.

        Discord rejects messages over 2000 characters; values above 1990 are clamped.
        """
        try:
            value = int(self._section("commands").get("list_page_size", DEFAULT_LIST_PAGE_SIZE))
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid commands.list_page_size, using %d", DEFAULT_LIST_PAGE_SIZE)
            return DEFAULT_LIST_PAGE_SIZE
        if value <= 0:
            return DEFAULT_LIST_PAGE_SIZE
        return min(value, 1990)

    @property
    def request_timeout_seconds(self) -> float:
        """Hard deadline for a single Discord directory or transport call."""
        try:
            value = float(self._section("discord").get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS))
        except (TypeError, ValueError):
            return DEFAULT_REQUEST_TIMEOUT_SECONDS
        return value if value > 0 else DEFAULT_REQUEST_TIMEOUT_SECONDS

    @property
    def status_text(self) -> str:
        """Text shown in the bot's "watching" presence."""
        return str(self._section("discord").get("status_text") or DEFAULT_STATUS_TEXT)


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
