"""Tests for configuration loading and font sizes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pteditor import config


@pytest.fixture(autouse=True)
def settings_path(tmp_path: Path, monkeypatch) -> Path:
    """Point the settings file into tmp_path; settings load on first use."""
    path = tmp_path / ".pteditor" / "settings.json"
    monkeypatch.setattr(config, "_USER_SETTINGS_PATH", path)
    monkeypatch.setattr(config, "_loaded", False)
    for name in ("_shortcuts", "_font_sizes", "_behavior"):
        monkeypatch.setattr(config, name, {})
    return path


def _write_settings(path: Path, data) -> None:
    path.parent.mkdir(parents=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")


class TestConfig:
    def test_defaults_loaded(self):
        shortcuts = config.get_shortcuts()
        assert isinstance(shortcuts, dict)
        assert shortcuts["file_save_dest"] == "Ctrl+S"

    def test_menu_actions_have_shortcuts(self):
        for action in ("file_open", "file_open_pair", "file_save_source", "file_save_dest",
                       "file_quit", "edit_insert_above", "edit_insert_below", "help_show"):
            assert config.get_shortcut(action)

    def test_unknown_shortcut_returns_empty(self):
        assert config.get_shortcut("__nonexistent__") == ""

    def test_font_size_defaults(self):
        for column in config.COLUMN_NAMES:
            assert config.get_font_size(column) == config.DEFAULT_FONT_SIZE

    def test_behavior_defaults(self):
        assert config.get_behavior("backup_on_save") is False
        assert config.get_behavior("strict_escapes") is False
        assert config.get_behavior("missing", "x") == "x"


class TestUserSettings:
    def test_user_overrides_merged(self, settings_path: Path):
        _write_settings(settings_path, {
            "shortcuts": {"file_quit": "Ctrl+W"},
            "font_sizes": {"key": 16},
            "behavior": {"backup_on_save": True},
        })
        assert config.get_shortcut("file_quit") == "Ctrl+W"
        assert config.get_shortcut("file_open") == "Ctrl+O"
        assert config.get_font_size("key") == 16
        assert config.get_behavior("backup_on_save") is True
        assert config.get_behavior("strict_escapes") is False

    def test_font_sizes_clamped(self, settings_path: Path):
        _write_settings(settings_path, {"font_sizes": {"source": 2, "dest": 99, "bogus": 10}})
        assert config.get_font_size("source") == config.MIN_FONT_SIZE
        assert config.get_font_size("dest") == config.MAX_FONT_SIZE
        assert config.get_font_size("bogus") == config.DEFAULT_FONT_SIZE

    def test_damaged_file_ignored(self, settings_path: Path):
        _write_settings(settings_path, "{not json")
        assert config.get_shortcut("file_open") == "Ctrl+O"
        assert config.get_font_size("dest") == config.DEFAULT_FONT_SIZE
