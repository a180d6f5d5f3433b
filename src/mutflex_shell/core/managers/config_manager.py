# src/mutflex_shell/core/managers/config_manager.py
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from mutflex_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

# Points the shell at another settings file, e.g. per article site.
SETTINGS_ENV_VAR = "MUTFLEX_SETTINGS"

_TRUTHY = ("1", "true", "yes", "on")


def _coerce(current: Any, value: Any) -> Any:
    """Casts `value` to the type of the value it replaces."""
    if current is None or isinstance(value, type(current)):
        return value
    if isinstance(current, bool):
        return str(value).strip().lower() in _TRUTHY
    return type(current)(value)


class ConfigManager:
    """
    Singleton holding the editor and shell settings.

    Values come from settings.json and can be changed in memory for the
    running session (`config set ...`). Editors read their constants when
    they are opened, so a change applies to the next editor.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    @staticmethod
    def settings_path() -> Path:
        override = os.environ.get(SETTINGS_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return PathUtils.get_shell_package_root() / "settings.json"

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Looks up a dotted key, e.g. 'editor.visual_edit.debounce_ms'.
        Missing keys and explicit nulls both give `default`.
        """
        node: Any = self._config
        for key in key_path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Stores a value under a dotted key, creating sections on the way.
        Strings typed at the prompt take the type of the existing value.
        """
        *sections, leaf = key_path.split(".")
        node = self._config
        for key in sections:
            node = node.setdefault(key, {})
            if not isinstance(node, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        try:
            value = _coerce(node.get(leaf), value)
        except (ValueError, TypeError):
            logger.warning("Could not cast '%s' to %s, storing it as given.",
                           key_path, type(node.get(leaf)).__name__)

        node[leaf] = value
        logger.info("Configuration updated: %s = %r", key_path, value)
        return True

    def reset(self) -> None:
        """Drops in-memory changes and reloads the settings file."""
        path = self.settings_path()
        if not path.exists():
            logger.warning("Settings file not found at %s, using an empty configuration.", path)
            self._config = {}
            return
        try:
            self._config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", path, e)
            self._config = {}
            return
        logger.info("Configuration loaded from %s.", path)


config_manager = ConfigManager()
