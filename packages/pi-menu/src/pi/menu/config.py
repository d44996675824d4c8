"""Menu configuration: defaults < settings file < command-line overrides.

The settings file is JSON at ``$PI_CONFIG_DIR/menu.json`` (default
``~/.pi/menu.json``) with camelCase keys, for example::

    {
      "ignoreCase": true,
      "lines": 10,
      "colors": {"selectedBackground": "#005577"},
      "keybindings": {"pageDown": ["pageDown", "ctrl+v"]},
      "pasteCommand": "xsel -o -p"
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pi.menu.matcher import CaseMode
from pi.menu.text_buffer import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".pi"
SETTINGS_FILE_NAME = "menu.json"


@dataclass
class MenuColors:
    normal_foreground: str = "#000000"
    normal_background: str = "#cccccc"
    selected_foreground: str = "#ffffff"
    selected_background: str = "#0066ff"


@dataclass
class MenuConfig:
    case_mode: CaseMode = "sensitive"
    lines: int = 0
    width: int | None = None
    bottom: bool = False
    capacity: int = DEFAULT_CAPACITY
    colors: MenuColors = field(default_factory=MenuColors)
    keybindings: dict[str, Any] = field(default_factory=dict)
    paste_command: str | None = None
    clipboard_command: str | None = None


def _settings_defaults() -> dict[str, Any]:
    colors = MenuColors()
    return {
        "ignoreCase": False,
        "lines": 0,
        "width": None,
        "bottom": False,
        "capacity": DEFAULT_CAPACITY,
        "colors": {
            "normalForeground": colors.normal_foreground,
            "normalBackground": colors.normal_background,
            "selectedForeground": colors.selected_foreground,
            "selectedBackground": colors.selected_background,
        },
        "keybindings": {},
        "pasteCommand": None,
        "clipboardCommand": None,
    }


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    Nested dicts merge key by key; any other value replaces the base value.
    ``None`` overrides are skipped.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


def get_config_dir() -> Path:
    return Path(os.environ.get("PI_CONFIG_DIR", Path.home() / CONFIG_DIR_NAME))


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILE_NAME


def load_settings_file(path: Path | None = None) -> dict[str, Any]:
    """Read the settings file; a missing or broken file yields ``{}``."""
    path = path or get_settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        logger.warning("Ignoring settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return {}
    return data


def _int_setting(settings: dict[str, Any], key: str, minimum: int) -> int | None:
    value = settings.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        logger.warning("Ignoring invalid %s setting: %r", key, value)
        return _settings_defaults()[key]
    return value


def config_from_settings(settings: dict[str, Any]) -> MenuConfig:
    merged = deep_merge_settings(_settings_defaults(), settings)
    colors = merged["colors"] if isinstance(merged["colors"], dict) else {}
    defaults = MenuColors()
    keybindings = merged["keybindings"]
    if not isinstance(keybindings, dict):
        logger.warning("Ignoring invalid keybindings setting: %r", keybindings)
        keybindings = {}

    return MenuConfig(
        case_mode="insensitive" if merged["ignoreCase"] else "sensitive",
        lines=_int_setting(merged, "lines", 0) or 0,
        width=_int_setting(merged, "width", 1),
        bottom=bool(merged["bottom"]),
        capacity=_int_setting(merged, "capacity", 1) or DEFAULT_CAPACITY,
        colors=MenuColors(
            normal_foreground=colors.get("normalForeground", defaults.normal_foreground),
            normal_background=colors.get("normalBackground", defaults.normal_background),
            selected_foreground=colors.get("selectedForeground", defaults.selected_foreground),
            selected_background=colors.get("selectedBackground", defaults.selected_background),
        ),
        keybindings=keybindings,
        paste_command=merged["pasteCommand"],
        clipboard_command=merged["clipboardCommand"],
    )


def load_config(
    overrides: dict[str, Any] | None = None,
    settings_path: Path | None = None,
) -> MenuConfig:
    """Build the session configuration from the settings file and overrides.

    *overrides* uses the settings file's keys; ``None`` values leave the
    file's value in place.
    """
    settings = load_settings_file(settings_path)
    if overrides:
        settings = deep_merge_settings(settings, overrides)
    return config_from_settings(settings)
