"""In-memory text and cursor model for the prompt line.

Pure data: no terminal I/O happens here. Every operation keeps
``0 <= cursor <= len(text)`` and treats out-of-range requests as no-ops.
Each mutating method returns ``True`` when it changed text or cursor.
"""

from __future__ import annotations


class LineBuffer:
    """Editable single line of text with a cursor."""

    def __init__(self, text: str = "", cursor: int | None = None) -> None:
        self._text = text
        self._cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))

    def __repr__(self) -> str:
        return f"LineBuffer(text={self._text!r}, cursor={self._cursor})"

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    # -- edits --------------------------------------------------------------

    def insert_at(self, cursor: int, s: str) -> bool:
        """Insert *s* at *cursor* and leave the cursor just after it."""
        if not s:
            return False
        at = max(0, min(cursor, len(self._text)))
        self._text = self._text[:at] + s + self._text[at:]
        self._cursor = at + len(s)
        return True

    def insert(self, s: str) -> bool:
        return self.insert_at(self._cursor, s)

    def delete_backward(self, n: int = 1) -> bool:
        """Remove up to *n* characters before the cursor."""
        n = min(n, self._cursor)
        if n <= 0:
            return False
        start = self._cursor - n
        self._text = self._text[:start] + self._text[self._cursor :]
        self._cursor = start
        return True

    def delete_forward(self, n: int = 1) -> bool:
        """Remove up to *n* characters starting at the cursor."""
        n = min(n, len(self._text) - self._cursor)
        if n <= 0:
            return False
        self._text = self._text[: self._cursor] + self._text[self._cursor + n :]
        return True

    def move_cursor(self, delta: int) -> bool:
        target = max(0, min(self._cursor + delta, len(self._text)))
        if target == self._cursor:
            return False
        self._cursor = target
        return True

    def move_to(self, position: int) -> bool:
        return self.move_cursor(position - self._cursor)

    # -- word boundaries ----------------------------------------------------

    def word_boundary_before(self) -> int:
        """Index of the nearest space before the cursor, or -1.

        Trailing spaces directly before the cursor are skipped first, so
        ``"this is a test "`` with the cursor at the end yields the space
        before ``"test"``.
        """
        return self._text[: self._cursor].rstrip(" ").rfind(" ")

    def word_boundary_after(self) -> int:
        """Index of the nearest space at or after the cursor, or ``len(text)``.

        A run of spaces directly at the cursor is skipped before searching.
        """
        forward = self._text[self._cursor :]
        skip = len(forward) - len(forward.lstrip(" "))
        index = forward.find(" ", skip)
        if index == -1:
            return len(self._text)
        return self._cursor + index

    # -- word-level commands ------------------------------------------------

    def move_word_backward(self) -> bool:
        return self.move_to(self.word_boundary_before() + 1)

    def move_word_forward(self) -> bool:
        return self.move_to(self.word_boundary_after() + 1)

    def delete_word_backward(self) -> bool:
        return self.delete_backward(self._cursor - self.word_boundary_before() - 1)

    def delete_to_start(self) -> bool:
        return self.delete_backward(self._cursor)

    def delete_to_end(self) -> bool:
        return self.delete_forward(len(self._text) - self._cursor)
