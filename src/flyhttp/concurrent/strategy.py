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
"""Execution strategies — run one engine call under a chosen concurrency discipline.

Three policies ship with the library:

- ``wait`` (:class:`WaitStrategy`): blocks the caller until the cursor is
  populated.
- ``async`` (:class:`ExecutorStrategy`): runs the call on a thread pool and
  returns at once; cursor accessors block lazily.
- ``suspend`` (:class:`SuspendStrategy`): ``await execute_suspend(...)``
  suspends the calling coroutine until the cursor is populated.

Every strategy accepts an optional ``timeout``. Without one, an engine that
never calls back leaves the cursor pending forever.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import timedelta
from enum import StrEnum
from typing import ClassVar

import structlog

from flyhttp.concurrent.adapters.blocking_performer import BlockingPerformer
from flyhttp.concurrent.adapters.coroutine_performer import CoroutinePerformer
from flyhttp.concurrent.cursor import Cursor
from flyhttp.concurrent.ports.outbound import (
    PerformerPort,
    StrategyPort,
    SuspendPerformerPort,
    SuspendStrategyPort,
    Trigger,
)
from flyhttp.engine.ports.outbound import EnginePort
from flyhttp.kernel.exceptions import (
    InfrastructureException,
    InvalidArgumentException,
    OperationTimeoutException,
)
from flyhttp.message import Request, Response

logger = structlog.get_logger("flyhttp.strategy")


class StrategyName(StrEnum):
    """Names of the built-in strategies."""

    WAIT = "wait"
    ASYNC = "async"
    SUSPEND = "suspend"


class _Call:
    """Wires one engine call to its cursor and to the performer's triggers."""

    def __init__(self, engine: EnginePort, request: Request, cursor: Cursor, timeout: float | None) -> None:
        self._engine = engine
        self._request = request
        self._cursor = cursor
        self._timeout = timeout
        self._triggers: list[Trigger] = []
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._timed_out = False

    def register(self, trigger: Trigger) -> None:
        self._triggers.append(trigger)

    def run(self) -> None:
        if self._timeout is not None:
            self._timer = threading.Timer(self._timeout, self._on_timeout)
            self._timer.daemon = True
            self._timer.start()
        try:
            self._engine.connect(self._request, self._on_success, self._on_failure)
        except BaseException:
            self._cancel_timer()
            raise

    def _on_success(self, response: Response) -> None:
        with self._lock:
            late = self._timed_out
            if not late:
                self._cursor.complete(response)
        if late:
            self._log_late("response")
        self._finish()

    def _on_failure(self, cause: BaseException) -> None:
        with self._lock:
            late = self._timed_out
            if not late:
                self._cursor.fail(cause)
        if late:
            self._log_late("failure")
        self._finish()

    def _on_timeout(self) -> None:
        failure = OperationTimeoutException(
            f"{self._request} exceeded timeout of {self._timeout}s",
            code="STRATEGY_TIMEOUT",
            context={"strategy": self._cursor.strategy},
        )
        with self._lock:
            if self._cursor.is_done():
                return
            self._timed_out = self._cursor.fail(failure)
        if self._timed_out:
            logger.info("strategy.timeout", request=str(self._request), timeout=self._timeout)
        self._finish()

    def _log_late(self, kind: str) -> None:
        # timer already published the failure
        logger.debug("strategy.late_completion", request=str(self._request), ignored=kind)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _finish(self) -> None:
        self._cancel_timer()
        for trigger in list(self._triggers):
            trigger()


class _BaseStrategy:
    name: ClassVar[StrategyName]

    def __init__(self, timeout: timedelta | None = None) -> None:
        if timeout is not None and timeout <= timedelta(0):
            raise InvalidArgumentException(f"timeout must be positive, got {timeout}")
        self._timeout = timeout.total_seconds() if timeout is not None else None

    @property
    def timeout(self) -> timedelta | None:
        return timedelta(seconds=self._timeout) if self._timeout is not None else None

    def _prepare(self, engine: EnginePort, request: Request) -> tuple[Cursor, _Call]:
        if not isinstance(engine, EnginePort):
            raise InvalidArgumentException(f"engine must implement connect(), got {type(engine).__name__}")
        if not isinstance(request, Request):
            raise InvalidArgumentException(f"request must be a Request, got {type(request).__name__}")
        logger.debug("strategy.execute", strategy=str(self.name), request=str(request))
        cursor = Cursor(request, strategy=str(self.name))
        return cursor, _Call(engine, request, cursor, self._timeout)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout})"


class WaitStrategy(_BaseStrategy):
    """Blocks the calling thread until the cursor is populated."""

    name = StrategyName.WAIT

    def __init__(self, performer: PerformerPort | None = None, timeout: timedelta | None = None) -> None:
        super().__init__(timeout)
        self._performer = performer or BlockingPerformer.DEFAULT

    def execute(self, engine: EnginePort, request: Request) -> Cursor:
        cursor, call = self._prepare(engine, request)
        self._performer.perform(call.run, call.register)
        return cursor


class ExecutorStrategy(_BaseStrategy):
    """Runs each call on a background thread pool and returns immediately.

    The pool thread drives the blocking performer, so a worker stays busy
    until its call completes. Errors raised synchronously on the worker are
    recorded as the cursor's failure.

    Args:
        executor: Caller-supplied executor. When omitted, an owned
            ThreadPoolExecutor with *max_workers* threads is created and
            shut down by :meth:`stop`.
        max_workers: Size of the owned pool.
        performer: Blocking performer used on the worker thread.
        timeout: Optional per-call timeout.
    """

    name = StrategyName.ASYNC

    def __init__(
        self,
        executor: Executor | None = None,
        max_workers: int = 4,
        performer: PerformerPort | None = None,
        timeout: timedelta | None = None,
    ) -> None:
        super().__init__(timeout)
        if executor is None and max_workers < 1:
            raise InvalidArgumentException(f"max_workers must be >= 1, got {max_workers}")
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="flyhttp-async")
        self._performer = performer or BlockingPerformer.DEFAULT

    def execute(self, engine: EnginePort, request: Request) -> Cursor:
        cursor, call = self._prepare(engine, request)
        future = self._executor.submit(self._performer.perform, call.run, call.register)
        future.add_done_callback(lambda f: self._record_crash(cursor, f))
        return cursor

    @staticmethod
    def _record_crash(cursor: Cursor, future: Future[None]) -> None:
        if cursor.is_done():
            return
        if future.cancelled():
            cursor.fail(InfrastructureException(f"{cursor.request} was cancelled before it ran", code="CANCELLED"))
            return
        error = future.exception()
        if error is not None:
            logger.debug("strategy.worker_error", request=str(cursor.request), error=repr(error))
            cursor.fail(error)

    def start(self) -> None:
        """No-op -- the pool starts threads on demand."""

    def stop(self) -> None:
        """Shut down the owned pool after in-flight calls finish."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> ExecutorStrategy:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class SuspendStrategy(_BaseStrategy):
    """Suspends the calling coroutine until the cursor is populated."""

    name = StrategyName.SUSPEND

    def __init__(self, performer: SuspendPerformerPort | None = None, timeout: timedelta | None = None) -> None:
        super().__init__(timeout)
        self._performer = performer or CoroutinePerformer.DEFAULT

    async def execute_suspend(self, engine: EnginePort, request: Request) -> Cursor:
        cursor, call = self._prepare(engine, request)
        await self._performer.perform_suspend(call.run, call.register)
        return cursor


WAIT = WaitStrategy()
ASYNC = ExecutorStrategy()
SUSPEND = SuspendStrategy()

_DEFAULTS: dict[StrategyName, StrategyPort | SuspendStrategyPort] = {
    StrategyName.WAIT: WAIT,
    StrategyName.ASYNC: ASYNC,
    StrategyName.SUSPEND: SUSPEND,
}


def _parse_name(name: str) -> StrategyName:
    try:
        return StrategyName(str(name).lower())
    except ValueError:
        choices = ", ".join(n.value for n in StrategyName)
        raise InvalidArgumentException(f"unknown strategy '{name}' (expected one of: {choices})") from None


def resolve_strategy(name: str) -> StrategyPort | SuspendStrategyPort:
    """Return the shared default strategy registered under *name*."""
    return _DEFAULTS[_parse_name(name)]


def create_strategy(
    name: str,
    *,
    timeout: timedelta | None = None,
    max_workers: int = 4,
) -> WaitStrategy | ExecutorStrategy | SuspendStrategy:
    """Build a new, caller-owned strategy instance for *name*."""
    parsed = _parse_name(name)
    if parsed is StrategyName.WAIT:
        return WaitStrategy(timeout=timeout)
    if parsed is StrategyName.ASYNC:
        return ExecutorStrategy(max_workers=max_workers, timeout=timeout)
    return SuspendStrategy(timeout=timeout)
