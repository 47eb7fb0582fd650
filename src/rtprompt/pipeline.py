"""Asynchronous callback pipeline with "latest wins" rendering.

Key handling issues invocations; a worker task runs the caller's callback
on a dedicated single-thread executor so a slow callback never delays
key input. Every invocation runs, in issue order, so a stateful callback
(such as the closest-match picker) sees each text change and Tab press.
Each invocation is stamped with a strictly increasing monotonic
timestamp, and a result is applied only if it was produced for
an invocation at least as new as the most recently issued one. Stale
results are dropped, not cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[str, bool, bool], str]
"""``(text, tab_pressed, enter_pressed) -> output`` rendered below the prompt."""


@dataclass(frozen=True)
class CallbackInvocation:
    text: str
    tab_pressed: bool
    enter_pressed: bool
    issued_at: int


@dataclass(frozen=True)
class CallbackResult:
    produced_for: int
    output: str


def empty_callback(text: str, tab_pressed: bool, enter_pressed: bool) -> str:
    return ""


class CallbackPipeline:
    """Runs a :data:`Callback` off the key-reading path.

    Issued invocations wait in a FIFO queue and run one at a time, in
    issue order, never concurrently. None is skipped: only the rendering
    of their results is subject to the staleness check.

    ``on_result`` is called on the event loop thread with the output of
    every result that is not stale.
    """

    def __init__(
        self,
        callback: Callback,
        on_result: Callable[[str], None],
        *,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        self._callback = callback
        self._on_result = on_result
        self._clock = clock

        self._latest_issued: int | None = None
        self._queue: asyncio.Queue[CallbackInvocation] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rtprompt-callback")

    @property
    def latest_issued(self) -> int | None:
        return self._latest_issued

    @property
    def worker(self) -> asyncio.Task[None] | None:
        return self._worker

    @property
    def pending(self) -> int:
        """Invocations issued but not yet picked up by the worker."""
        return self._queue.qsize()

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> asyncio.Task[None]:
        """Start the worker task on the running loop."""
        if self._worker is None:
            self._worker = asyncio.get_running_loop().create_task(self._run(), name="rtprompt-callback-worker")
        return self._worker

    async def drain(self) -> None:
        """Wait until every issued invocation has run and been delivered.

        Re-raises the callback's exception if the worker dies meanwhile.
        """
        worker = self._worker
        if worker is None or worker.done():
            if worker is not None:
                worker.result()
            return
        joined = asyncio.ensure_future(self._queue.join())
        try:
            await asyncio.wait({joined, worker}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            joined.cancel()
        if worker.done():
            worker.result()

    async def stop(self) -> None:
        """Stop the worker and discard invocations that have not started.

        A callback already running on the executor thread finishes in the
        background; its result is discarded.
        """
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        worker, self._worker = self._worker, None
        if worker is None or worker.done():
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass

    def close(self) -> None:
        """Release the executor without waiting for a running callback."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    # -- issuing ------------------------------------------------------------

    def issue(self, text: str, tab_pressed: bool = False, enter_pressed: bool = False) -> CallbackInvocation:
        """Record a new invocation as the latest and queue it for the worker.

        The "latest issued" marker moves immediately, before the callback
        runs, which is what makes any in-flight result stale.
        """
        now = self._clock()
        if self._latest_issued is not None and now <= self._latest_issued:
            now = self._latest_issued + 1
        invocation = CallbackInvocation(text, tab_pressed, enter_pressed, issued_at=now)
        self._latest_issued = now
        self._queue.put_nowait(invocation)
        return invocation

    def is_stale(self, result: CallbackResult) -> bool:
        return self._latest_issued is not None and result.produced_for < self._latest_issued

    def deliver(self, result: CallbackResult) -> bool:
        """Apply *result* unless it is stale. Returns whether it was applied."""
        if self.is_stale(result):
            logger.debug(
                "dropping stale result (produced for %d, latest %d)",
                result.produced_for,
                self._latest_issued,
            )
            return False
        self._on_result(result.output)
        return True

    async def invoke_final(self, text: str) -> str:
        """Run the Enter-time invocation and wait for it.

        Runs on the same executor as every other invocation, so it never
        overlaps one that is still executing. Its output is not rendered.
        Call :meth:`drain` first so the callback has seen every earlier
        invocation.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._callback, text, False, True)

    # -- worker -------------------------------------------------------------

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            invocation = await self._queue.get()
            try:
                output = await loop.run_in_executor(
                    self._executor,
                    self._callback,
                    invocation.text,
                    invocation.tab_pressed,
                    invocation.enter_pressed,
                )
                self.deliver(CallbackResult(produced_for=invocation.issued_at, output=output))
            finally:
                self._queue.task_done()
