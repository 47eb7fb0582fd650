"""Prompt: one realtime input session.

Wires the terminal, line buffer, key router, renderer and callback
pipeline together. From ``run()`` until it returns the terminal is in raw
mode; anything else written to stdout/stderr in that window will throw
the layout off.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass, field
from typing import Callable

from rtprompt.config import PromptConfig
from rtprompt.keybindings import Keybindings
from rtprompt.keys import KeyEvent
from rtprompt.line_buffer import LineBuffer
from rtprompt.pipeline import Callback, CallbackPipeline, empty_callback
from rtprompt.renderer import Renderer
from rtprompt.router import KeyRouter, Outcome
from rtprompt.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)


@dataclass
class PromptState:
    """Per-session prompt state, mutated only through key routing."""

    prefix: str
    buffer: LineBuffer = field(default_factory=LineBuffer)
    padding_lines: int = 2
    debug_enabled: bool = False

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def cursor(self) -> int:
        return self.buffer.cursor

    def debug_dump(self) -> str:
        return f"text={self.text}\npos={self.cursor}"


class Prompt:
    """A single-line prompt whose *callback* output is shown beneath it.

    The callback receives ``(text, tab_pressed, enter_pressed)`` and runs
    whenever the text changes or Tab is pressed, plus once at start with
    empty input. Its output replaces the previous output in place. When
    Enter is pressed it runs one last time with ``enter_pressed=True``
    before the session ends.
    """

    def __init__(
        self,
        prefix: str,
        callback: Callback | None = None,
        *,
        config: PromptConfig | None = None,
        terminal: Terminal | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.config = config or PromptConfig()
        self.callback: Callback = callback or empty_callback
        self.state = PromptState(
            prefix=prefix,
            padding_lines=self.config.padding,
            debug_enabled=self.config.debug,
        )
        self._router = KeyRouter(self.state.buffer, Keybindings(self.config.keybindings))
        self._terminal = terminal
        self._clock = clock

        self._renderer: Renderer | None = None
        self._pipeline: CallbackPipeline | None = None
        self._done: asyncio.Future[Outcome] | None = None
        self._closed = False

        self._last_output = ""
        self._annotation = ""

    @property
    def text(self) -> str:
        return self.state.text

    @property
    def renderer(self) -> Renderer | None:
        return self._renderer

    @property
    def pipeline(self) -> CallbackPipeline | None:
        return self._pipeline

    # -- running ------------------------------------------------------------

    def wait(self) -> str:
        """Run the session to completion and return the final text."""
        return asyncio.run(self.run())

    async def run(self) -> str:
        """Run the session on the current event loop.

        Returns the text in the buffer when the session ends. Raises
        :class:`TerminalModeError` before writing anything if raw mode is
        unavailable, and re-raises any exception thrown by the callback
        once the terminal has been restored.
        """
        if self._done is not None:
            raise RuntimeError("a Prompt can only be run once")

        loop = asyncio.get_running_loop()
        self._done = loop.create_future()

        terminal = self._terminal or ProcessTerminal(escape_timeout=self.config.escape_timeout)
        self._terminal = terminal
        terminal.start(self._handle_key)
        logger.debug("prompt session started (prefix=%r)", self.state.prefix)

        self._renderer = Renderer(
            terminal,
            self.state.padding_lines,
            truncate_lines=self.config.truncate_lines,
        )
        if self._clock is not None:
            self._pipeline = CallbackPipeline(self.callback, self._apply_output, clock=self._clock)
        else:
            self._pipeline = CallbackPipeline(self.callback, self._apply_output)

        try:
            terminal.write(self.state.prefix)
            worker = self._pipeline.start()
            self._pipeline.issue("", False, False)

            await asyncio.wait({self._done, worker}, return_when=asyncio.FIRST_COMPLETED)
            if worker.done():
                # The worker only ever stops by raising
                worker.result()

            outcome = self._done.result()
            if outcome == "submit":
                # The callback must see every edit before the final call
                await self._pipeline.drain()
                await self._pipeline.stop()
                await self._pipeline.invoke_final(self.state.text)
            logger.debug("prompt session ended (%s)", outcome)
        finally:
            await self._pipeline.stop()
            self._pipeline.close()
            self._teardown()

        return self.state.text

    # -- key handling -------------------------------------------------------

    def _handle_key(self, event: KeyEvent) -> None:
        if self._closed or self._done is None or self._done.done():
            return
        if self._renderer is None or self._pipeline is None:
            return

        if event.error is not None:
            if isinstance(event.error, EOFError):
                self._done.set_result("cancel")
                return
            logger.debug("key read error: %s", event.error)
            self._annotation = f"error: {event.error}"
            self._repaint()
            return

        had_annotation = bool(self._annotation)
        self._annotation = ""

        result = self._router.route(event)
        if result.outcome == "interrupt":
            self._interrupt()
            return
        if result.outcome != "continue":
            self._done.set_result(result.outcome)
            return

        if result.needs_echo:
            self._renderer.echo(self.state.prefix, self.state.text, self.state.cursor)
        if result.should_invoke:
            self._pipeline.issue(self.state.text, result.tab, False)
        if self.state.debug_enabled or had_annotation:
            self._repaint()

    def _interrupt(self) -> None:
        """Restore the terminal, then deliver SIGINT to ourselves."""
        logger.debug("interrupt key pressed")
        self._teardown()
        signal.raise_signal(signal.SIGINT)
        # Only reached when SIGINT is ignored or handled without raising
        if self._done is not None and not self._done.done():
            self._done.set_result("interrupt")

    # -- rendering ----------------------------------------------------------

    def _apply_output(self, output: str) -> None:
        if not output:
            return
        self._last_output = output
        self._repaint()

    def _repaint(self) -> None:
        if self._renderer is not None:
            self._renderer.refresh(self._compose(self._last_output))

    def _compose(self, output: str) -> str:
        extras: list[str] = []
        if self._annotation:
            extras.append(self._annotation)
        if self.state.debug_enabled:
            extras.append(self.state.debug_dump())
        if not extras:
            return output
        parts = [output.rstrip("\n")] if output else []
        return "\n".join(parts + extras)

    def _teardown(self) -> None:
        """Restore the terminal and release the output region, exactly once."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._terminal is not None:
                self._terminal.stop()
        finally:
            if self._renderer is not None:
                self._renderer.finish(clear=self.config.clear_on_exit)
