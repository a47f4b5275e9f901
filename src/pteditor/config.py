"""Application settings management.

Loads shortcuts, per-column font sizes and save behaviour from
``~/.pteditor/settings.json``, falling back to bundled defaults.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_USER_SETTINGS_PATH = Path.home() / ".pteditor" / "settings.json"

_loaded: bool = False
_shortcuts: dict[str, str] = {}
_font_sizes: dict[str, int] = {}  # "key" / "source" / "dest" → pt size
_behavior: dict[str, object] = {}  # "backup_on_save", "strict_escapes"

COLUMN_NAMES = ("key", "source", "dest")

DEFAULT_FONT_SIZE = 13
MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 48

DEFAULT_BEHAVIOR: dict[str, object] = {
    "backup_on_save": False,
    "strict_escapes": False,
}


def _load_defaults() -> dict[str, str]:
    """Load the bundled default shortcuts using importlib.resources.

    Works whether the package is run from source or installed as a wheel.
    """
    try:
        ref = importlib.resources.files("pteditor").joinpath("default_shortcuts.json")
        with importlib.resources.as_file(ref) as p:
            with open(p, encoding="utf-8") as f:
                return json.load(f)
    except (FileNotFoundError, TypeError):
        return {}


def _load_settings() -> dict:
    """Load the user settings file; a damaged file is ignored."""
    if not _USER_SETTINGS_PATH.exists():
        return {}
    try:
        with open(_USER_SETTINGS_PATH, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", _USER_SETTINGS_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _clamp(size: int) -> int:
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, int(size)))


def _load() -> None:
    """Load and merge default + user configs."""
    global _shortcuts, _font_sizes, _behavior, _loaded
    defaults = _load_defaults()
    user = _load_settings()

    # Shortcuts: defaults overlaid with user overrides
    _shortcuts = dict(defaults)
    if "shortcuts" in user:
        _shortcuts.update(user["shortcuts"])

    _font_sizes = {name: DEFAULT_FONT_SIZE for name in COLUMN_NAMES}
    for name, size in user.get("font_sizes", {}).items():
        if name in _font_sizes:
            _font_sizes[name] = _clamp(size)

    _behavior = dict(DEFAULT_BEHAVIOR)
    _behavior.update(user.get("behavior", {}))

    _loaded = True


def get_shortcuts() -> dict[str, str]:
    """Return the full shortcut mapping (cached after first call)."""
    if not _loaded:
        _load()
    return _shortcuts


def get_shortcut(action: str) -> str:
    """Return the key-sequence string for *action*, or empty string."""
    return get_shortcuts().get(action, "")


def get_font_size(column: str) -> int:
    """Return font size for the 'key', 'source' or 'dest' column."""
    if not _loaded:
        _load()
    return _font_sizes.get(column, DEFAULT_FONT_SIZE)


def get_behavior(key: str, default=None):
    if not _loaded:
        _load()
    return _behavior.get(key, default)
