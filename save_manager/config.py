"""Application configuration — JSON-based, with file locking and change notification."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

from loguru import logger

_instance: "Config | None" = None

# Default data directory
_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "save-manager"

ConfigListener = Callable[[str, Any], None]


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based configuration with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "language": "en_US",
        "per_version_saving": False,
        "inherit_version_saves": True,
        # Host ticks before a manual action can be repeated
        "cooldown_ticks": 80,
        "stray_name_length_threshold": 25,
        # Automatic backups kept per directory, 0 keeps all
        "max_backups": 0,
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = config_dir or _DEFAULT_CONFIG_DIR
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._defer_save = False
        self._listeners: list[ConfigListener] = []
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        if self._defer_save:
            return
        with self._lock:
            tmp_path = self._path.with_suffix(".tmp")
            try:
                self._dir.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                tmp_path.unlink(missing_ok=True)

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
            self._save()

    # ── Change notification ──

    def subscribe(self, listener: ConfigListener) -> None:
        """Call *listener(key, value)* after every ``set``."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: ConfigListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(key, value)

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()
        self._notify(key, value)

    # ── Typed properties ──

    @property
    def config_dir(self) -> Path:
        return self._dir

    @property
    def language(self) -> str:
        return self._data.get("language", "en_US")

    @language.setter
    def language(self, value: str) -> None:
        self.set("language", value)

    @property
    def per_version_saving(self) -> bool:
        return bool(self._data.get("per_version_saving", False))

    @per_version_saving.setter
    def per_version_saving(self, value: bool) -> None:
        self.set("per_version_saving", value)

    @property
    def inherit_version_saves(self) -> bool:
        return bool(self._data.get("inherit_version_saves", True))

    @inherit_version_saves.setter
    def inherit_version_saves(self, value: bool) -> None:
        self.set("inherit_version_saves", value)

    @property
    def cooldown_ticks(self) -> int:
        return int(self._data.get("cooldown_ticks", 80))

    @cooldown_ticks.setter
    def cooldown_ticks(self, value: int) -> None:
        self.set("cooldown_ticks", value)

    @property
    def stray_name_length_threshold(self) -> int:
        return int(self._data.get("stray_name_length_threshold", 25))

    @property
    def max_backups(self) -> int:
        return int(self._data.get("max_backups", 0))

    @max_backups.setter
    def max_backups(self, value: int) -> None:
        self.set("max_backups", value)
