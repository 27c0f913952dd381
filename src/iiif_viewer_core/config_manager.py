"""Local configuration manager for the viewer core.

Stores user-editable values (search page limit, language table, request
timeout, logging) in a local `config.json` file.

`config.json` is the single source of truth at runtime; the core only reads
it, except through the explicit setters used by tools and tests.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from .logger import get_logger

logger = get_logger(__name__)


DEFAULT_CONFIG_JSON: dict[str, Any] = {
    "paths": {
        "logs_dir": "data/local/logs",
    },
    "settings": {
        "search": {
            "max_pages": 10,
        },
        "network": {
            "request_timeout": 15,
        },
        "ui": {
            "app_name": "IIIF Search Viewer",
        },
        "languages": [
            {"code": "en", "name": "English"},
            {"code": "de", "name": "Deutsch"},
            {"code": "fr", "name": "Français"},
            {"code": "it", "name": "Italiano"},
            {"code": "es", "name": "Español"},
            {"code": "la", "name": "Latina"},
            {"code": "ar", "name": "العربية"},
            {"code": "fa", "name": "فارسی"},
            {"code": "ota", "name": "Osmanlıca"},
        ],
        "logging": {
            "level": "INFO",
        },
    },
}


def _deep_merge(dst: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    for k, v in (src or {}).items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _deep_merge(dst[k], v)
        else:
            dst[k] = v
    return dst


def _is_parent_writable(path: Path) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        test = path.parent / ".write_test"
        test.write_text("ok", encoding="utf-8")
        test.unlink(missing_ok=True)
        return True
    except OSError:
        return False


def default_config_path() -> Path:
    """Pick a sensible config.json location.

    Priority:
    1) `./config.json` if writable
    2) `~/.iiif-search-viewer/config.json`
    """
    cwd_candidate = Path.cwd() / "config.json"
    if _is_parent_writable(cwd_candidate):
        return cwd_candidate
    return Path.home() / ".iiif-search-viewer" / "config.json"


@dataclass
class ConfigManager:
    """Manages reading and writing the local config.json file."""

    path: Path
    _data: dict[str, Any]

    @classmethod
    def load(cls, path: Path | None = None) -> ConfigManager:
        """Load the configuration from disk, falling back to defaults.

        Unlike a settings UI, the viewer never creates the file on its own:
        a missing file simply means "use the defaults".
        """
        cfg_path = path or default_config_path()
        data: dict[str, Any] = json.loads(json.dumps(DEFAULT_CONFIG_JSON))

        if cfg_path.exists():
            try:
                loaded = json.loads(cfg_path.read_text(encoding="utf-8") or "{}")
                if isinstance(loaded, dict):
                    _deep_merge(data, loaded)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Failed to read config.json at %s: %s", cfg_path, exc)

        return cls(path=cfg_path, _data=data)

    @property
    def data(self) -> dict[str, Any]:
        """Get the full config data dictionary."""
        return self._data

    def set_logs_dir(self, value: str) -> None:
        """Set the logs directory path."""
        self._data.setdefault("paths", {})["logs_dir"] = (value or "data/local/logs").strip()

    def resolve_path(self, key: str, default_rel: str) -> Path:
        """Resolve a path from config, making it absolute."""
        raw = (self._data.get("paths", {}) or {}).get(key) or default_rel
        p = Path(str(raw)).expanduser()
        if p.is_absolute():
            return p
        return (Path.cwd() / p).resolve()

    def get_setting(self, dotted_path: str, default: Any = None) -> Any:
        """Read a nested value from `settings` using a dotted path.

        Example: `get_setting("search.max_pages", 10)`.
        """
        node: Any = self._data.get("settings", {}) or {}
        for part in (dotted_path or "").split("."):
            if not part:
                continue
            if not isinstance(node, dict):
                return default
            node = node.get(part)
        return default if node is None else node

    def set_setting(self, dotted_path: str, value: Any) -> None:
        """Set a nested value in `settings` using a dotted path."""
        if not dotted_path:
            return

        root = self._data.setdefault("settings", {})
        if not isinstance(root, dict):
            self._data["settings"] = {}
            root = self._data["settings"]

        parts = [p for p in dotted_path.split(".") if p]
        node: dict[str, Any] = root
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def get_logs_dir(self) -> Path:
        """Get the logs directory path."""
        path = self.resolve_path("logs_dir", "data/local/logs")
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_max_search_pages(self) -> int:
        """Maximum number of annotation pages fetched for one search."""
        try:
            return max(1, int(self.get_setting("search.max_pages", 10)))
        except (TypeError, ValueError):
            return 10

    def get_request_timeout(self) -> int:
        """HTTP timeout, in seconds, for every resource fetch."""
        try:
            return max(1, int(self.get_setting("network.request_timeout", 15)))
        except (TypeError, ValueError):
            return 15

    def get_languages(self) -> list[dict[str, str]]:
        """Configured language table as a list of `{code, name}` entries."""
        raw = self.get_setting("languages", [])
        if not isinstance(raw, list):
            return []
        return [
            {"code": str(entry["code"]), "name": str(entry.get("name") or entry["code"])}
            for entry in raw
            if isinstance(entry, dict) and entry.get("code")
        ]


@lru_cache(maxsize=1)
def get_config_manager() -> ConfigManager:
    """Get the singleton config manager."""
    return ConfigManager.load()
