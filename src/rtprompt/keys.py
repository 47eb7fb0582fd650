"""Keyboard input parsing for the realtime prompt.

Turns one complete terminal input sequence (as emitted by
:class:`~rtprompt.stdin_buffer.StdinBuffer`) into a :class:`KeyEvent`.
Key identifiers follow the ``"ctrl+a"`` / ``"alt+b"`` / ``"enter"``
convention used by :mod:`rtprompt.keybindings`.
"""

from __future__ import annotations

from dataclasses import dataclass

KeyId = str

# ---------------------------------------------------------------------------
# Named keys
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    up = "up"
    down = "down"
    left = "left"
    right = "right"
    paste = "paste"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


MODIFIER_PREFIXES = ("ctrl+", "alt+")

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
}

# Modified arrows (xterm style): ESC [ 1 ; <mod> <letter>
LEGACY_MODIFIED_SEQUENCES: dict[str, str] = {
    "\x1b[1;3C": "alt+right",
    "\x1b[1;3D": "alt+left",
    "\x1b[1;5C": "ctrl+right",
    "\x1b[1;5D": "ctrl+left",
}

# Single control bytes that have a dedicated name instead of ctrl+<letter>
_CONTROL_NAMES: dict[str, str] = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b": "escape",
    "\x00": "ctrl+space",
    "\x1c": "ctrl+\\",
    "\x1d": "ctrl+]",
    "\x1e": "ctrl+^",
    "\x1f": "ctrl+_",
}


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A single abstracted key press.

    ``rune`` is the printable character the key produces, or ``None`` when
    there is no such character. ``"\\x00"`` is never a rune: the NUL byte
    parses to ``ctrl+space`` with ``rune=None``. ``text`` carries the
    content of a bracketed paste. ``error`` is set (and everything else
    empty) when reading input failed.
    """

    key: KeyId | None
    rune: str | None = None
    text: str = ""
    error: BaseException | None = None

    @property
    def has_modifier(self) -> bool:
        return self.key is not None and self.key.startswith(MODIFIER_PREFIXES)

    @property
    def is_printable(self) -> bool:
        """True when the event should insert its rune into the buffer."""
        return self.rune is not None and not self.has_modifier


def paste_event(content: str) -> KeyEvent:
    return KeyEvent(key=Key.paste, text=content)


def error_event(exc: BaseException) -> KeyEvent:
    return KeyEvent(key=None, error=exc)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _control_key(ch: str) -> KeyId | None:
    name = _CONTROL_NAMES.get(ch)
    if name is not None:
        return name
    code = ord(ch)
    if 1 <= code <= 26:
        return f"ctrl+{chr(code + 96)}"
    return None


def parse_key(data: str) -> KeyEvent | None:
    """Parse one complete input sequence into a :class:`KeyEvent`.

    Returns ``None`` for empty input. Unknown escape sequences produce an
    event whose ``key`` is the raw sequence and whose ``rune`` is ``None``,
    so they are ignored by the router rather than inserted as text.
    """
    if not data:
        return None

    if data == " ":
        return KeyEvent(key=Key.space, rune=" ")

    if len(data) == 1:
        control = _control_key(data)
        if control is not None:
            return KeyEvent(key=control)
        if data.isprintable():
            return KeyEvent(key=data, rune=data)
        return KeyEvent(key=None)

    named = LEGACY_KEY_SEQUENCES.get(data) or LEGACY_MODIFIED_SEQUENCES.get(data)
    if named is not None:
        return KeyEvent(key=named)

    if data.startswith("\x1b"):
        # Alt combos arrive as ESC followed by the key itself
        if len(data) == 2:
            inner = data[1]
            if inner in ("\x7f", "\x08"):
                return KeyEvent(key="alt+backspace")
            control = _control_key(inner)
            if control is not None:
                return KeyEvent(key=f"alt+{control}")
            if inner.isprintable():
                return KeyEvent(key=f"alt+{inner}", rune=inner)
        return KeyEvent(key=data)

    # A multi-character chunk that is not an escape sequence (e.g. an IME
    # commit) is inserted as-is when it is entirely printable.
    if data.isprintable():
        return KeyEvent(key=None, rune=data)
    return KeyEvent(key=None)
