"""Prompt keybindings: which key identifiers trigger which action.

The defaults replicate the Linux line discipline (plus the usual readline
Alt word motions), since raw mode turns the kernel's own editing off.
"""

from __future__ import annotations

from typing import Literal

from rtprompt.keys import KeyId

PromptAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Session
    "tab",
    "submit",
    "cancel",
    "interrupt",
]

KeybindingsConfig = dict[PromptAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[PromptAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["alt+b", "ctrl+left", "alt+left"],
    "cursorWordRight": ["alt+f", "ctrl+right", "alt+right"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    "deleteWordBackward": "ctrl+w",
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # Session
    "tab": "tab",
    "submit": "enter",
    "cancel": "escape",
    "interrupt": "ctrl+c",
}


class Keybindings:
    """Maps key identifiers to prompt actions, with optional overrides."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[PromptAction, list[KeyId]] = {}
        self._key_to_action: dict[KeyId, PromptAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            if action not in DEFAULT_KEYBINDINGS:
                raise ValueError(f"Unknown prompt action: {action!r}")
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # An overridden key wins over the default action it used to trigger
        self._key_to_action = {}
        for action, keys in self._action_to_keys.items():
            if action in config:
                continue
            for key in keys:
                self._key_to_action[key] = action
        for action in config:
            for key in self._action_to_keys[action]:
                self._key_to_action[key] = action

    def action_for(self, key: KeyId | None) -> PromptAction | None:
        """Return the action bound to *key*, if any."""
        if key is None:
            return None
        return self._key_to_action.get(key)

    def matches(self, key: KeyId | None, action: PromptAction) -> bool:
        """Check if *key* is bound to *action*."""
        return key is not None and key in self._action_to_keys.get(action, [])

    def get_keys(self, action: PromptAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: KeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)
