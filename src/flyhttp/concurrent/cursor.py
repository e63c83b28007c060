# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Cursor — the caller-owned, single-assignment handle of one call.

The engine side holds the writers (:meth:`Cursor.complete`,
:meth:`Cursor.fail`); the caller holds the readers. The first write wins
and is published atomically; later writes are ignored and logged.

Readers may block (``response()``, ``wait()``) or suspend
(``await aresponse()``, ``await await_done()``) and may be used
concurrently from any number of threads and event loops.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass

import structlog

from flyhttp.kernel.exceptions import CursorFailedException, OperationTimeoutException
from flyhttp.message import Request, Response

logger = structlog.get_logger("flyhttp.cursor")


@dataclass(frozen=True)
class CursorOutcome:
    """Terminal state of a call: exactly one of ``response``/``failure`` is set."""

    response: Response | None = None
    failure: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _wake(future: asyncio.Future[None]) -> None:
    # cancelled waiters stay cancelled
    if not future.done():
        future.set_result(None)


def _notify(loop: asyncio.AbstractEventLoop, future: asyncio.Future[None]) -> None:
    """Schedule *future*'s wake-up on *loop*; a loop that closed meanwhile is skipped."""
    try:
        loop.call_soon_threadsafe(_wake, future)
    except RuntimeError:
        logger.debug("cursor.wake_skipped", reason="event loop closed")


class Cursor:
    """Handle exposing the in-flight or completed result of one request.

    Args:
        request: The request this cursor is bound to.
        strategy: Name of the strategy that produced the cursor.
    """

    def __init__(self, request: Request, strategy: str = "") -> None:
        self._request = request
        self._strategy = strategy
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._outcome: CursorOutcome | None = None
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @property
    def request(self) -> Request:
        return self._request

    @property
    def strategy(self) -> str:
        return self._strategy

    # -- writers ----------------------------------------------------------

    def complete(self, response: Response) -> bool:
        """Publish a successful response. Returns False if already completed."""
        return self._publish(CursorOutcome(response=response))

    def fail(self, cause: BaseException) -> bool:
        """Publish a failure. Returns False if already completed."""
        return self._publish(CursorOutcome(failure=cause))

    def _publish(self, outcome: CursorOutcome) -> bool:
        with self._lock:
            if self._outcome is not None:
                logger.warning(
                    "cursor.duplicate_completion",
                    request=str(self._request),
                    strategy=self._strategy,
                    kept="failure" if self._outcome.failure is not None else "response",
                    ignored="failure" if outcome.failure is not None else "response",
                )
                return False
            self._outcome = outcome
            waiters, self._waiters = self._waiters, []
        self._done.set()
        for loop, future in waiters:
            _notify(loop, future)
        return True

    # -- readers ----------------------------------------------------------

    def is_done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the call completes. Returns False if *timeout* elapsed first."""
        return self._done.wait(timeout)

    def outcome(self, timeout: float | None = None) -> CursorOutcome:
        """Block until completion and return the terminal state without raising for failures.

        Raises:
            OperationTimeoutException: If *timeout* seconds elapse first.
        """
        if not self._done.wait(timeout):
            raise OperationTimeoutException(
                f"{self._request} did not complete within {timeout}s",
                code="CURSOR_WAIT_TIMEOUT",
                context={"strategy": self._strategy},
            )
        assert self._outcome is not None
        return self._outcome

    def failure(self, timeout: float | None = None) -> BaseException | None:
        return self.outcome(timeout).failure

    def response(self, timeout: float | None = None) -> Response:
        """Block until completion and return the response.

        Without a *timeout* this waits forever on an engine that never calls
        back; configure a strategy timeout to bound it.

        Raises:
            CursorFailedException: If the call failed; the cause is chained.
            OperationTimeoutException: If *timeout* seconds elapse first.
        """
        return self._unwrap(self.outcome(timeout))

    def body(self, timeout: float | None = None) -> bytes:
        return self.response(timeout).body

    def text(self, timeout: float | None = None) -> str:
        return self.response(timeout).text

    async def await_done(self) -> None:
        """Suspend the current coroutine until the call completes."""
        if self._done.is_set():
            return
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()
        with self._lock:
            if self._outcome is not None:
                return
            self._waiters.append((loop, future))
        try:
            await future
        finally:
            with self._lock:
                if (loop, future) in self._waiters:
                    self._waiters.remove((loop, future))

    async def aoutcome(self) -> CursorOutcome:
        await self.await_done()
        assert self._outcome is not None
        return self._outcome

    async def aresponse(self) -> Response:
        return self._unwrap(await self.aoutcome())

    async def abody(self) -> bytes:
        return (await self.aresponse()).body

    def _unwrap(self, outcome: CursorOutcome) -> Response:
        if outcome.failure is not None:
            raise CursorFailedException(
                f"{self._request} failed: {outcome.failure}",
                code="CURSOR_FAILED",
                context={"strategy": self._strategy},
            ) from outcome.failure
        assert outcome.response is not None
        return outcome.response

    def __repr__(self) -> str:
        if self._outcome is None:
            state = "pending"
        elif self._outcome.failure is not None:
            state = f"failed={self._outcome.failure!r}"
        else:
            state = f"status={self._outcome.response.status}"  # type: ignore[union-attr]
        return f"Cursor({self._request}, strategy={self._strategy!r}, {state})"
