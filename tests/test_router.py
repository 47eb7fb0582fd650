"""Tests for rtprompt.router.KeyRouter."""

from __future__ import annotations

import pytest

from rtprompt.keybindings import Keybindings
from rtprompt.keys import error_event, parse_key, paste_event
from rtprompt.line_buffer import LineBuffer
from rtprompt.router import KeyRouter, RouteResult


def make_router(text: str = "", cursor: int | None = None) -> KeyRouter:
    return KeyRouter(LineBuffer(text, cursor))


def press(router: KeyRouter, *sequences: str) -> RouteResult:
    result = RouteResult()
    for data in sequences:
        result = router.route(parse_key(data))
    return result


class TestTyping:
    def test_printable_inserts_and_invokes(self) -> None:
        router = make_router()
        result = press(router, "h")
        assert router.buffer.text == "h"
        assert result.text_changed
        assert result.should_invoke
        assert result.needs_echo

    def test_type_word(self) -> None:
        router = make_router()
        press(router, *"hi there")
        assert router.buffer.text == "hi there"
        assert router.buffer.cursor == 8

    def test_insert_mid_line(self) -> None:
        router = make_router("ac", 1)
        press(router, "b")
        assert (router.buffer.text, router.buffer.cursor) == ("abc", 2)

    def test_unbound_control_is_ignored(self) -> None:
        router = make_router("abc")
        result = press(router, "\x1a")
        assert router.buffer.text == "abc"
        assert not result.should_invoke
        assert not result.needs_echo

    def test_unbound_alt_is_not_inserted(self) -> None:
        router = make_router("abc")
        press(router, "\x1bx")
        assert router.buffer.text == "abc"

    def test_paste_strips_newlines(self) -> None:
        router = make_router()
        result = router.route(paste_event("one\ntwo\r\nthree"))
        assert router.buffer.text == "onetwothree"
        assert result.should_invoke

    def test_error_event_does_nothing(self) -> None:
        router = make_router("abc")
        result = router.route(error_event(OSError("x")))
        assert result == RouteResult()


class TestNavigation:
    @pytest.mark.parametrize(
        "keys, cursor",
        [
            (["\x1b[D"], 3),
            (["\x02"], 3),
            (["\x01"], 0),
            (["\x01", "\x05"], 4),
            (["\x01", "\x06"], 1),
            (["\x1bb"], 0),
        ],
    )
    def test_moves_without_invoking(self, keys: list[str], cursor: int) -> None:
        router = make_router("text")
        result = press(router, *keys)
        assert router.buffer.text == "text"
        assert router.buffer.cursor == cursor
        assert result.cursor_moved
        assert not result.should_invoke
        assert result.needs_echo

    def test_left_at_start_changes_nothing(self) -> None:
        router = make_router("abc", 0)
        result = press(router, "\x1b[D")
        assert not result.needs_echo

    def test_alt_b_after_trailing_space(self) -> None:
        router = make_router("this is a test ")
        press(router, "\x1bb")
        assert router.buffer.cursor == 10

    def test_alt_f(self) -> None:
        router = make_router("this is a test", 0)
        press(router, "\x1bf")
        assert router.buffer.cursor == 5

    def test_ctrl_arrows_move_by_word(self) -> None:
        router = make_router("this is a test")
        press(router, "\x1b[1;5D")
        assert router.buffer.cursor == 10
        press(router, "\x1b[1;5D", "\x1b[1;5C")
        assert router.buffer.cursor == 10


class TestEditing:
    def test_backspace(self) -> None:
        router = make_router("abc")
        result = press(router, "\x7f")
        assert router.buffer.text == "ab"
        assert result.should_invoke

    def test_backspace_at_start_does_not_invoke(self) -> None:
        router = make_router("abc", 0)
        result = press(router, "\x7f")
        assert router.buffer.text == "abc"
        assert not result.should_invoke

    def test_ctrl_d_deletes_forward(self) -> None:
        router = make_router("abc", 0)
        press(router, "\x04")
        assert router.buffer.text == "bc"

    def test_ctrl_w(self) -> None:
        router = make_router("hello world")
        press(router, "\x17")
        assert router.buffer.text == "hello "

    def test_ctrl_u(self) -> None:
        router = make_router("hello world", 6)
        press(router, "\x15")
        assert (router.buffer.text, router.buffer.cursor) == ("world", 0)

    def test_ctrl_k(self) -> None:
        router = make_router("hello world", 5)
        press(router, "\x0b")
        assert router.buffer.text == "hello"


class TestSessionKeys:
    def test_tab_invokes_without_editing(self) -> None:
        router = make_router("abc")
        result = press(router, "\t")
        assert router.buffer.text == "abc"
        assert result.tab
        assert result.should_invoke
        assert not result.needs_echo

    @pytest.mark.parametrize(
        "data, outcome",
        [("\r", "submit"), ("\x1b", "cancel"), ("\x03", "interrupt")],
    )
    def test_session_outcomes(self, data: str, outcome: str) -> None:
        router = make_router("abc")
        result = press(router, data)
        assert result.outcome == outcome
        assert not result.should_invoke
        assert router.buffer.text == "abc"

    def test_custom_bindings(self) -> None:
        router = KeyRouter(LineBuffer("abc"), Keybindings({"submit": "ctrl+o"}))
        assert press(router, "\r").outcome == "continue"
        assert press(router, "\x0f").outcome == "submit"
