"""Terminal abstraction for the raw-mode prompt session.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
puts the controlling terminal into raw mode, reads key input through the
asyncio event loop, and restores the original mode exactly once.
"""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
import os
import sys
import termios
import tty
from typing import Callable, Protocol

from rtprompt.keys import KeyEvent, error_event, paste_event, parse_key
from rtprompt.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_FATAL_READ_ERRNOS = frozenset({errno.EIO, errno.EBADF, errno.ENXIO})


class TerminalModeError(RuntimeError):
    """The terminal could not be switched into raw mode."""


class Terminal(Protocol):
    """Interface for terminal I/O operations used by a prompt session."""

    def start(self, on_key: Callable[[KeyEvent], None]) -> None:
        """Enter raw mode and begin delivering key events.

        Raises :class:`TerminalModeError` if raw mode is unavailable.
        """
        ...

    def stop(self) -> None:
        """Restore the original terminal mode. Safe to call repeatedly."""
        ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


class ProcessTerminal:
    """Concrete terminal backed by the process's stdin/stdout.

    Raw mode is set with :mod:`tty` and undone with :mod:`termios`. Input is
    read with ``loop.add_reader`` so it never blocks the event loop, then
    decoded incrementally and split into key sequences by
    :class:`StdinBuffer`.
    """

    def __init__(self, *, escape_timeout: float = 0.01) -> None:
        self._escape_timeout = escape_timeout
        self._on_key: Callable[[KeyEvent], None] | None = None
        self._stdin_buffer: StdinBuffer | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._original_termios: list | None = None
        self._reader_loop: asyncio.AbstractEventLoop | None = None
        self._write_log_path: str = os.environ.get("RTPROMPT_WRITE_LOG", "")

    # -- properties ---------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._original_termios is not None

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(self, on_key: Callable[[KeyEvent], None]) -> None:
        """Enable raw mode and bracketed paste, then begin reading stdin."""
        try:
            fd = sys.stdin.fileno()
            original = termios.tcgetattr(fd)
            tty.setraw(fd)
        except (termios.error, OSError, ValueError) as exc:
            raise TerminalModeError(f"cannot switch terminal to raw mode: {exc}") from exc

        self._original_termios = original
        self._on_key = on_key
        self._raw_write(_BRACKETED_PASTE_ENABLE)

        self._stdin_buffer = StdinBuffer(timeout=self._escape_timeout)
        self._stdin_buffer.on_data(self._on_sequence)
        self._stdin_buffer.on_paste(lambda content: self._deliver(paste_event(content)))

        self._reader_loop = asyncio.get_running_loop()
        self._reader_loop.add_reader(fd, self._on_stdin_readable)
        logger.debug("terminal in raw mode (fd=%d)", fd)

    def stop(self) -> None:
        """Restore terminal state. Only the first call has any effect."""
        if self._original_termios is None:
            return
        original, self._original_termios = self._original_termios, None

        fd = sys.stdin.fileno()
        self._remove_stdin_reader(fd)
        if self._stdin_buffer is not None:
            self._stdin_buffer.clear()
            self._stdin_buffer = None
        self._on_key = None

        self._raw_write(_BRACKETED_PASTE_DISABLE)
        termios.tcsetattr(fd, termios.TCSADRAIN, original)
        logger.debug("terminal mode restored")

    # -- write --------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    # -- private: stdin reading --------------------------------------------

    def _remove_stdin_reader(self, fd: int) -> None:
        if self._reader_loop is None:
            return
        if not self._reader_loop.is_closed():
            self._reader_loop.remove_reader(fd)
        self._reader_loop = None

    def _on_stdin_readable(self) -> None:
        """Callback invoked by the event loop when stdin has data."""
        fd = sys.stdin.fileno()
        try:
            raw = os.read(fd, 4096)
        except OSError as exc:
            logger.debug("stdin read failed: %s", exc)
            if exc.errno in _FATAL_READ_ERRNOS:
                # Hangup or closed fd: the fd stays readable forever
                self._remove_stdin_reader(fd)
                self._deliver(error_event(EOFError(f"stdin unreadable: {exc}")))
            else:
                self._deliver(error_event(exc))
            return

        if not raw:
            # stdin closed; stop polling and report it as an error event
            self._remove_stdin_reader(fd)
            self._deliver(error_event(EOFError("stdin closed")))
            return

        data = self._decoder.decode(raw)
        if data and self._stdin_buffer is not None:
            self._stdin_buffer.process(data)

    def _on_sequence(self, data: str) -> None:
        event = parse_key(data)
        if event is not None:
            self._deliver(event)

    def _deliver(self, event: KeyEvent) -> None:
        if self._on_key is not None:
            self._on_key(event)

    # -- private: raw write ------------------------------------------------

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
