"""Tests for rtprompt.utils -- width measurement and truncation."""

from __future__ import annotations

import pytest

from rtprompt.utils import extract_ansi_code, truncate_to_width, visible_width


class TestVisibleWidth:
    @pytest.mark.parametrize(
        "text, width",
        [
            ("", 0),
            ("hello", 5),
            ("\x1b[31mred\x1b[0m", 3),
            ("日本語", 6),
            ("é", 1),
            ("a\tb", 5),
        ],
    )
    def test_widths(self, text: str, width: int) -> None:
        assert visible_width(text) == width

    def test_hyperlink_is_invisible(self) -> None:
        assert visible_width("\x1b]8;;http://x\x07link\x1b]8;;\x07") == 4


class TestExtractAnsiCode:
    def test_csi(self) -> None:
        assert extract_ansi_code("a\x1b[2Kb", 1) == ("\x1b[2K", 4)

    def test_not_escape(self) -> None:
        assert extract_ansi_code("abc", 0) is None


class TestTruncateToWidth:
    def test_fits(self) -> None:
        assert truncate_to_width("short", 10) == "short"

    def test_cut_with_ellipsis(self) -> None:
        assert truncate_to_width("hello world", 8) == "hello..."

    def test_styled_text_is_reset(self) -> None:
        result = truncate_to_width("\x1b[34mhello world\x1b[39m", 8)
        assert result == "\x1b[34mhello\x1b[0m..."

    def test_wide_chars_not_split(self) -> None:
        result = truncate_to_width("日本語テキスト", 7)
        assert visible_width(result) <= 7
        assert result.endswith("...")

    def test_zero_width(self) -> None:
        assert truncate_to_width("abc", 0) == ""
