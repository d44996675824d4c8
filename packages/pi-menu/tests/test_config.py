"""Tests for the menu settings file and configuration merging."""

from __future__ import annotations

import json
from pathlib import Path

from pi.menu.config import (
    MenuColors,
    MenuConfig,
    config_from_settings,
    deep_merge_settings,
    get_settings_path,
    load_config,
    load_settings_file,
)
from pi.menu.text_buffer import DEFAULT_CAPACITY

# --- Deep merge ---


def test_deep_merge_simple():
    assert deep_merge_settings({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}


def test_deep_merge_nested():
    base = {"colors": {"normalForeground": "#000000", "normalBackground": "#cccccc"}}
    overrides = {"colors": {"normalBackground": "#222222"}}
    assert deep_merge_settings(base, overrides) == {
        "colors": {"normalForeground": "#000000", "normalBackground": "#222222"}
    }


def test_deep_merge_none_values_skipped():
    assert deep_merge_settings({"lines": 5}, {"lines": None}) == {"lines": 5}


def test_deep_merge_list_replacement():
    base = {"keybindings": {"cancel": ["escape", "ctrl+c"]}}
    overrides = {"keybindings": {"cancel": ["ctrl+q"]}}
    assert deep_merge_settings(base, overrides)["keybindings"]["cancel"] == ["ctrl+q"]


# --- Settings file ---


def _write_settings(directory: Path, data: object) -> Path:
    path = directory / "menu.json"
    path.write_text(json.dumps(data))
    return path


def test_settings_path_honours_env(tmp_path, monkeypatch):
    monkeypatch.setenv("PI_CONFIG_DIR", str(tmp_path))
    assert get_settings_path() == tmp_path / "menu.json"


def test_missing_file_is_empty(tmp_path):
    assert load_settings_file(tmp_path / "nope.json") == {}


def test_invalid_json_is_ignored(tmp_path):
    path = tmp_path / "menu.json"
    path.write_text("{not json")
    assert load_settings_file(path) == {}


def test_non_object_is_ignored(tmp_path):
    path = _write_settings(tmp_path, ["lines", 5])
    assert load_settings_file(path) == {}


# --- MenuConfig ---


def test_defaults():
    config = config_from_settings({})
    assert config == MenuConfig()
    assert config.case_mode == "sensitive"
    assert config.lines == 0
    assert config.width is None
    assert config.capacity == DEFAULT_CAPACITY
    assert config.colors == MenuColors(
        normal_foreground="#000000",
        normal_background="#cccccc",
        selected_foreground="#ffffff",
        selected_background="#0066ff",
    )


def test_settings_file_values(tmp_path):
    path = _write_settings(
        tmp_path,
        {
            "ignoreCase": True,
            "lines": 8,
            "width": 60,
            "bottom": True,
            "colors": {"selectedBackground": "#005577"},
            "keybindings": {"pageDown": ["ctrl+v"]},
            "pasteCommand": "xsel -o -p",
        },
    )
    config = load_config(settings_path=path)
    assert config.case_mode == "insensitive"
    assert config.lines == 8
    assert config.width == 60
    assert config.bottom
    assert config.colors.selected_background == "#005577"
    assert config.colors.normal_background == "#cccccc"
    assert config.keybindings == {"pageDown": ["ctrl+v"]}
    assert config.paste_command == "xsel -o -p"
    assert config.clipboard_command is None


def test_overrides_beat_settings_file(tmp_path):
    path = _write_settings(tmp_path, {"lines": 8, "ignoreCase": True})
    config = load_config({"lines": 3, "ignoreCase": None}, settings_path=path)
    assert config.lines == 3
    assert config.case_mode == "insensitive"


def test_invalid_numbers_fall_back(tmp_path):
    path = _write_settings(tmp_path, {"lines": -2, "width": "wide", "capacity": 0})
    config = load_config(settings_path=path)
    assert config.lines == 0
    assert config.width is None
    assert config.capacity == DEFAULT_CAPACITY


def test_invalid_keybindings_ignored(tmp_path):
    path = _write_settings(tmp_path, {"keybindings": ["ctrl+v"]})
    assert load_config(settings_path=path).keybindings == {}


def test_env_config_dir(tmp_path, monkeypatch):
    _write_settings(tmp_path, {"lines": 4})
    monkeypatch.setenv("PI_CONFIG_DIR", str(tmp_path))
    assert load_config().lines == 4
