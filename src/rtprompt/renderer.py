"""Renderer: in-place painting of the auxiliary region below the prompt.

Layout, counted in rows below the prompt line (row 0)::

    row 0          prompt + typed text        <- cursor lives here
    rows 1..p      padding, never cleared
    rows p+1..p+n  content, cleared before every paint

Every paint saves the cursor on the prompt row, writes below it and
restores it, so the user's cursor never visibly leaves the input line.
Each operation is emitted as a single ``Terminal.write`` so a paint can
never be interleaved with another write.
"""

from __future__ import annotations

import logging

from rtprompt.terminal import Terminal
from rtprompt.utils import truncate_to_width, visible_width

logger = logging.getLogger(__name__)

_SAVE_CURSOR = "\x1b[s"
_RESTORE_CURSOR = "\x1b[u"
_CLEAR_LINE = "\x1b[2K"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_RIGHT_FMT = "\x1b[{}C"


class Renderer:
    """Paints callback output beneath the prompt and tracks what it wrote."""

    def __init__(
        self,
        terminal: Terminal,
        padding: int = 2,
        *,
        truncate_lines: bool = True,
    ) -> None:
        if padding < 0:
            raise ValueError(f"padding must be non-negative, got {padding}")
        self.terminal = terminal
        self.padding = padding
        self.truncate_lines = truncate_lines

        self._written_line_count = 0
        self._content_line_count = 0
        self._content_padding = padding
        self._closed = False

    @property
    def written_line_count(self) -> int:
        """Rows below the prompt touched so far (content plus padding)."""
        return self._written_line_count

    @property
    def content_line_count(self) -> int:
        """Rows of content currently on screen."""
        return self._content_line_count

    @property
    def closed(self) -> bool:
        return self._closed

    # -- prompt line ------------------------------------------------------

    def echo(self, prefix: str, text: str, cursor: int) -> None:
        """Repaint the prompt line and put the cursor at *cursor*."""
        if self._closed:
            return
        column = visible_width(prefix + text[:cursor])
        out = "\r" + _CLEAR_LINE + prefix + text + "\r"
        if column:
            out += _CURSOR_RIGHT_FMT.format(column)
        self.terminal.write(out)

    # -- auxiliary region -------------------------------------------------

    def paint(self, s: str, padding: int | None = None) -> None:
        """Paint *s* below the prompt, *padding* rows down.

        An empty string is a no-op: nothing is cleared or written, so the
        previous output stays on screen.
        """
        if self._closed or not s:
            return
        self.terminal.write(self._paint_sequence(s, self._padding(padding)))

    def clear_previous_region(self, n: int | None = None, padding: int | None = None) -> None:
        """Erase the *n* content rows that sit below *padding* rows.

        Defaults to the region of the last paint.
        """
        if self._closed:
            return
        sequence = self._clear_sequence(n, padding)
        if sequence:
            self.terminal.write(sequence)

    def refresh(self, s: str) -> None:
        """Replace the current output with *s* in one write."""
        if self._closed or not s:
            return
        sequence = self._clear_sequence(None, None)
        sequence += self._paint_sequence(s, self.padding)
        self.terminal.write(sequence)

    def finish(self, *, clear: bool = True) -> None:
        """Leave the region for good and park the cursor below the prompt.

        With *clear* every row this renderer touched is erased; otherwise
        enough newlines are written to scroll past the last output. Any
        later paint is ignored.
        """
        if self._closed:
            return
        self._closed = True

        rows = self._written_line_count
        if clear:
            out = ""
            if rows:
                out = _SAVE_CURSOR + ("\n" + _CLEAR_LINE) * rows + _RESTORE_CURSOR
            out += "\r\n"
        else:
            out = "\r\n" * (rows + 1)
        self.terminal.write(out)
        logger.debug("renderer finished (rows=%d, clear=%s)", rows, clear)

    # -- sequences --------------------------------------------------------

    def _padding(self, padding: int | None) -> int:
        return self.padding if padding is None else padding

    def _fit(self, s: str, padding: int) -> list[str]:
        lines = s.split("\n")
        if not self.truncate_lines:
            return lines
        # Content must fit between the prompt row and the bottom of the
        # screen, or the cursor can no longer travel back to the prompt.
        max_lines = max(self.terminal.rows - padding - 1, 1)
        width = max(self.terminal.columns - 1, 1)
        return [truncate_to_width(line, width) for line in lines[:max_lines]]

    def _paint_sequence(self, s: str, padding: int) -> str:
        lines = self._fit(s, padding)
        n = len(lines)

        # Make room (scrolling if needed) and wipe the rows the content lands on
        out = ["\n" * padding]
        out.append(("\n" + _CLEAR_LINE) * n)

        # Back to the prompt row, then draw relative to it
        out.append(_CURSOR_UP_FMT.format(n + padding))
        out.append(_SAVE_CURSOR)
        out.append("\n\r" * padding)
        for line in lines:
            out.append("\n\r" + _CLEAR_LINE + line)
        out.append(_RESTORE_CURSOR)

        self._content_line_count = n
        self._content_padding = padding
        self._written_line_count = max(self._written_line_count, n + padding)
        return "".join(out)

    def _clear_sequence(self, n: int | None, padding: int | None) -> str:
        if n is None:
            n = self._content_line_count
        if padding is None:
            padding = self._content_padding
        if n <= 0:
            return ""
        self._content_line_count = 0
        return (
            _SAVE_CURSOR
            + "\n" * padding
            + ("\n" + _CLEAR_LINE) * n
            + _RESTORE_CURSOR
        )
