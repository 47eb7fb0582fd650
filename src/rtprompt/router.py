"""KeyRouter: applies key events to a LineBuffer.

The router owns no terminal state. It reports what a key did through a
:class:`RouteResult` so the session can decide whether to repaint the
input line, issue a callback invocation, or end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rtprompt.keybindings import Keybindings, PromptAction
from rtprompt.keys import Key, KeyEvent
from rtprompt.line_buffer import LineBuffer

Outcome = Literal["continue", "submit", "cancel", "interrupt"]

_EDITS: dict[PromptAction, Callable[[LineBuffer], bool]] = {
    "cursorLeft": lambda buf: buf.move_cursor(-1),
    "cursorRight": lambda buf: buf.move_cursor(1),
    "cursorWordLeft": LineBuffer.move_word_backward,
    "cursorWordRight": LineBuffer.move_word_forward,
    "cursorLineStart": lambda buf: buf.move_to(0),
    "cursorLineEnd": lambda buf: buf.move_to(len(buf.text)),
    "deleteCharBackward": lambda buf: buf.delete_backward(1),
    "deleteCharForward": lambda buf: buf.delete_forward(1),
    "deleteWordBackward": LineBuffer.delete_word_backward,
    "deleteToLineStart": LineBuffer.delete_to_start,
    "deleteToLineEnd": LineBuffer.delete_to_end,
}

_SESSION_ACTIONS: dict[PromptAction, Outcome] = {
    "submit": "submit",
    "cancel": "cancel",
    "interrupt": "interrupt",
}


@dataclass(frozen=True)
class RouteResult:
    """What a single key press did to the buffer."""

    outcome: Outcome = "continue"
    text_changed: bool = False
    cursor_moved: bool = False
    tab: bool = False

    @property
    def should_invoke(self) -> bool:
        """Whether the callback needs a fresh invocation for this key.

        Navigation never triggers recomputation; Enter is handled by the
        final synchronous invocation instead.
        """
        return self.outcome == "continue" and (self.text_changed or self.tab)

    @property
    def needs_echo(self) -> bool:
        return self.text_changed or self.cursor_moved


class KeyRouter:
    """Routes key events to buffer edits or session-ending outcomes."""

    def __init__(self, buffer: LineBuffer, keybindings: Keybindings | None = None) -> None:
        self.buffer = buffer
        self.keybindings = keybindings or Keybindings()

    def route(self, event: KeyEvent) -> RouteResult:
        if event.error is not None:
            return RouteResult()

        old_text = self.buffer.text
        old_cursor = self.buffer.cursor

        action = self.keybindings.action_for(event.key)
        if action in _SESSION_ACTIONS:
            return RouteResult(outcome=_SESSION_ACTIONS[action])

        tab = action == "tab"
        edit = _EDITS.get(action) if action is not None else None
        if edit is not None:
            edit(self.buffer)
        elif event.key == Key.paste:
            self.buffer.insert(_single_line(event.text))
        elif not tab and event.is_printable:
            self.buffer.insert(event.rune or "")
        # Anything else has no printable rune and is ignored

        return RouteResult(
            text_changed=self.buffer.text != old_text,
            cursor_moved=self.buffer.cursor != old_cursor,
            tab=tab,
        )


def _single_line(text: str) -> str:
    return text.replace("\r\n", "").replace("\r", "").replace("\n", "")
