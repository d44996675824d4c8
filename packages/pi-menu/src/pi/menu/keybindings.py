"""Menu keybindings: which key identifiers trigger which actions."""

from __future__ import annotations

import logging
from typing import Literal, Union

from pi.menu.keys import KeyId, normalize_key_id
from pi.menu.navigation import MenuAction

logger = logging.getLogger(__name__)

# Actions handled by the front end instead of the state machine
PasteAction = Literal["pastePrimary", "pasteClipboard"]

BindingAction = Union[MenuAction, PasteAction]

MenuKeybindingsConfig = dict[BindingAction, Union[KeyId, list[KeyId]]]

DEFAULT_MENU_KEYBINDINGS: MenuKeybindingsConfig = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorHome": ["home", "ctrl+a", "alt+g"],
    "cursorEnd": ["end", "ctrl+e", "shift+alt+g"],
    # Selection
    "selectPrev": ["up", "ctrl+p", "alt+h"],
    "selectNext": ["down", "ctrl+n", "alt+l"],
    "pageUp": ["pageUp", "alt+k"],
    "pageDown": ["pageDown", "alt+j"],
    "complete": ["tab", "ctrl+i"],
    # Deletion
    "deleteLeft": ["backspace", "ctrl+h"],
    "deleteRight": ["delete", "ctrl+d"],
    "deleteWord": ["ctrl+w", "alt+backspace"],
    "deleteToStart": "ctrl+u",
    "deleteToEnd": "ctrl+k",
    # Termination
    "accept": ["enter", "ctrl+j", "ctrl+m"],
    "acceptAlternate": ["shift+enter", "ctrl+shift+j", "ctrl+shift+m"],
    "cancel": ["escape", "ctrl+c", "ctrl+g"],
    # Selection paste
    "pastePrimary": "ctrl+y",
    "pasteClipboard": "ctrl+shift+y",
}


class MenuKeybindingsManager:
    """Resolves key identifiers to actions, defaults overridden by config.

    An override replaces every key of its action; a key claimed by an
    override is released from whichever default action held it.
    """

    def __init__(self, config: MenuKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[BindingAction, list[KeyId]] = {}
        self._key_to_action: dict[KeyId, BindingAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: MenuKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        self._key_to_action.clear()

        for action, keys in DEFAULT_MENU_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = [normalize_key_id(k) for k in key_array]

        for action, keys in config.items():
            if action not in DEFAULT_MENU_KEYBINDINGS:
                logger.warning("ignoring keybinding for unknown action %r", action)
                continue
            key_array = keys if isinstance(keys, list) else [keys]
            overridden = [normalize_key_id(k) for k in key_array]
            for other, other_keys in self._action_to_keys.items():
                if other != action:
                    self._action_to_keys[other] = [k for k in other_keys if k not in overridden]
            self._action_to_keys[action] = overridden

        for action, key_array in self._action_to_keys.items():
            for key in key_array:
                self._key_to_action.setdefault(key, action)

    def action_for(self, key: KeyId | None) -> BindingAction | None:
        if key is None:
            return None
        return self._key_to_action.get(key)

    def matches(self, key: KeyId | None, action: BindingAction) -> bool:
        return key is not None and self.action_for(key) == action

    def get_keys(self, action: BindingAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: MenuKeybindingsConfig) -> None:
        self._build_maps(config)
