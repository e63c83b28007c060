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
"""Tests for the wait, async-executor and suspend strategies."""

from __future__ import annotations

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from structlog.testing import capture_logs

from flyhttp.concurrent.ports.outbound import StrategyPort, SuspendStrategyPort
from flyhttp.concurrent.strategy import (
    ASYNC,
    SUSPEND,
    WAIT,
    ExecutorStrategy,
    StrategyName,
    SuspendStrategy,
    WaitStrategy,
    create_strategy,
    resolve_strategy,
)
from flyhttp.kernel.exceptions import (
    CursorFailedException,
    EngineException,
    InfrastructureException,
    InvalidArgumentException,
    OperationTimeoutException,
)
from flyhttp.message import Request, Response
from flyhttp.testing import StubEngine

REQUEST = Request("GET", "https://example.com/resource")


class _ExplodingEngine:
    def connect(self, request, on_success, on_failure) -> None:
        raise ConnectionError("socket refused")


def _poll_done(cursor, deadline: float = 5.0) -> bool:
    end = time.monotonic() + deadline
    while time.monotonic() < end:
        if cursor.is_done():
            return True
        time.sleep(0.005)
    return False


class TestStrategyNames:
    def test_names(self):
        assert WAIT.name == StrategyName.WAIT == "wait"
        assert ASYNC.name == StrategyName.ASYNC == "async"
        assert SUSPEND.name == StrategyName.SUSPEND == "suspend"

    def test_resolve_strategy_returns_shared_defaults(self):
        assert resolve_strategy("wait") is WAIT
        assert resolve_strategy("ASYNC") is ASYNC
        assert resolve_strategy(StrategyName.SUSPEND) is SUSPEND

    def test_resolve_unknown_name(self):
        with pytest.raises(InvalidArgumentException, match="unknown strategy 'later'"):
            resolve_strategy("later")

    def test_create_strategy_builds_new_instances(self):
        wait = create_strategy("wait", timeout=timedelta(seconds=1))
        assert isinstance(wait, WaitStrategy) and wait is not WAIT
        assert wait.timeout == timedelta(seconds=1)
        with create_strategy("async", max_workers=1) as executor:
            assert isinstance(executor, ExecutorStrategy)
        assert isinstance(create_strategy("suspend"), SuspendStrategy)

    def test_ports(self):
        assert isinstance(WAIT, StrategyPort)
        assert isinstance(ASYNC, StrategyPort)
        assert isinstance(SUSPEND, SuspendStrategyPort)
        assert not isinstance(SUSPEND, StrategyPort)
        assert not isinstance(WAIT, SuspendStrategyPort)


class TestArgumentErrors:
    def test_rejects_non_engine(self):
        with pytest.raises(InvalidArgumentException, match="engine"):
            WAIT.execute(object(), REQUEST)  # type: ignore[arg-type]

    def test_rejects_non_request(self):
        with pytest.raises(InvalidArgumentException, match="request"):
            WAIT.execute(StubEngine.succeeding(), "GET /")  # type: ignore[arg-type]

    def test_rejects_non_request_before_scheduling(self):
        engine = StubEngine.succeeding()
        with pytest.raises(InvalidArgumentException):
            ASYNC.execute(engine, None)  # type: ignore[arg-type]
        assert engine.requests == []

    @pytest.mark.asyncio
    async def test_suspend_rejects_non_engine(self):
        with pytest.raises(InvalidArgumentException):
            await SUSPEND.execute_suspend(None, REQUEST)  # type: ignore[arg-type]

    @pytest.mark.parametrize("timeout", [timedelta(0), timedelta(seconds=-1)])
    def test_rejects_non_positive_timeout(self, timeout):
        with pytest.raises(InvalidArgumentException, match="timeout"):
            WaitStrategy(timeout=timeout)

    def test_rejects_empty_pool(self):
        with pytest.raises(InvalidArgumentException, match="max_workers"):
            ExecutorStrategy(max_workers=0)


class TestWaitStrategy:
    def test_returns_populated_cursor(self):
        cursor = WAIT.execute(StubEngine.succeeding(), REQUEST)
        assert cursor.is_done()
        assert cursor.request is REQUEST
        assert cursor.strategy == "wait"
        assert cursor.body() == b"ok"

    def test_does_not_return_before_callback(self):
        engine = StubEngine.succeeding(delay=0.05)
        cursor = WAIT.execute(engine, REQUEST)
        returned_at = time.monotonic()
        assert cursor.is_done()
        assert returned_at >= engine.callback_times[0]

    def test_failure_is_recorded_not_raised(self):
        cause = EngineException("timeout")
        cursor = WAIT.execute(StubEngine.failing(cause), REQUEST)
        assert cursor.failure() is cause
        with pytest.raises(CursorFailedException):
            cursor.response()

    def test_synchronous_engine_error_propagates(self):
        with pytest.raises(ConnectionError, match="socket refused"):
            WAIT.execute(_ExplodingEngine(), REQUEST)

    def test_timeout_publishes_failure_for_hung_engine(self):
        strategy = WaitStrategy(timeout=timedelta(milliseconds=50))
        cursor = strategy.execute(StubEngine.hanging(), REQUEST)
        assert isinstance(cursor.failure(), OperationTimeoutException)
        assert cursor.failure().code == "STRATEGY_TIMEOUT"

    def test_late_engine_completion_after_timeout_is_ignored(self):
        strategy = WaitStrategy(timeout=timedelta(milliseconds=20))
        engine = StubEngine.succeeding(delay=0.2)
        cursor = strategy.execute(engine, REQUEST)
        assert isinstance(cursor.failure(), OperationTimeoutException)
        end = time.monotonic() + 5
        while not engine.callback_times and time.monotonic() < end:
            time.sleep(0.01)
        assert engine.callback_times
        assert isinstance(cursor.failure(), OperationTimeoutException)

    def test_late_engine_completion_is_not_reported_as_duplicate(self):
        strategy = WaitStrategy(timeout=timedelta(milliseconds=20))
        with capture_logs() as logs:
            cursor = strategy.execute(StubEngine.succeeding(delay=0.1), REQUEST)
            end = time.monotonic() + 5
            while time.monotonic() < end and not any(e["event"] == "strategy.late_completion" for e in logs):
                time.sleep(0.01)
        events = [e["event"] for e in logs]
        assert "strategy.late_completion" in events
        assert "cursor.duplicate_completion" not in events
        late = next(e for e in logs if e["event"] == "strategy.late_completion")
        assert late["log_level"] == "debug"
        assert late["ignored"] == "response"
        assert isinstance(cursor.failure(), OperationTimeoutException)

    def test_spurious_engine_callback_is_still_a_duplicate(self):
        engine = StubEngine.failing(spurious=Response(200))
        with capture_logs() as logs:
            cursor = WaitStrategy(timeout=timedelta(seconds=5)).execute(engine, REQUEST)
        assert isinstance(cursor.failure(), EngineException)
        assert [e["log_level"] for e in logs if e["event"] == "cursor.duplicate_completion"] == ["warning"]

    def test_completion_before_timeout_wins(self):
        strategy = WaitStrategy(timeout=timedelta(seconds=5))
        cursor = strategy.execute(StubEngine.succeeding(), REQUEST)
        assert cursor.response().status == 200


class TestExecutorStrategy:
    def test_returns_before_engine_completes(self):
        release = threading.Event()

        class _GatedEngine:
            def connect(self, request, on_success, on_failure) -> None:
                def later() -> None:
                    release.wait(5)
                    on_success(Response(200, body=b"ok"))

                threading.Thread(target=later, daemon=True).start()

        with ExecutorStrategy(max_workers=1) as strategy:
            cursor = strategy.execute(_GatedEngine(), REQUEST)
            assert not cursor.is_done()
            release.set()
            assert cursor.body(timeout=5) == b"ok"
        assert cursor.strategy == "async"

    def test_accessor_blocks_lazily(self):
        with ExecutorStrategy(max_workers=2) as strategy:
            cursor = strategy.execute(StubEngine.succeeding(delay=0.05), REQUEST)
            assert cursor.response(timeout=5).status == 200

    def test_caller_supplied_executor_is_not_shut_down(self):
        pool = ThreadPoolExecutor(max_workers=1)
        try:
            strategy = ExecutorStrategy(executor=pool)
            cursor = strategy.execute(StubEngine.succeeding(), REQUEST)
            assert cursor.body(timeout=5) == b"ok"
            strategy.stop()
            assert pool.submit(lambda: 42).result(timeout=5) == 42
        finally:
            pool.shutdown()

    def test_worker_error_is_recorded_as_failure(self):
        with ExecutorStrategy(max_workers=1) as strategy:
            cursor = strategy.execute(_ExplodingEngine(), REQUEST)
            assert isinstance(cursor.outcome(timeout=5).failure, ConnectionError)

    def test_cancelled_call_is_recorded_as_failure(self):
        gate = threading.Event()
        pool = ThreadPoolExecutor(max_workers=1)
        blocker = pool.submit(gate.wait, 5)
        strategy = ExecutorStrategy(executor=pool)
        cursor = strategy.execute(StubEngine.succeeding(), REQUEST)
        pool.shutdown(wait=False, cancel_futures=True)
        gate.set()
        blocker.result(timeout=5)

        failure = cursor.failure(timeout=5)
        assert isinstance(failure, InfrastructureException)
        assert failure.code == "CANCELLED"

    def test_timeout_applies(self):
        with ExecutorStrategy(max_workers=1, timeout=timedelta(milliseconds=30)) as strategy:
            cursor = strategy.execute(StubEngine.hanging(), REQUEST)
            assert isinstance(cursor.failure(timeout=5), OperationTimeoutException)

    def test_many_concurrent_calls(self):
        engine = StubEngine.succeeding(delay=0.01)
        with ExecutorStrategy(max_workers=4) as strategy:
            cursors = [strategy.execute(engine, REQUEST) for _ in range(20)]
            assert all(c.body(timeout=5) == b"ok" for c in cursors)
        assert len(engine.requests) == 20


class TestSuspendStrategy:
    @pytest.mark.asyncio
    async def test_returns_populated_cursor(self):
        cursor = await SUSPEND.execute_suspend(StubEngine.succeeding(), REQUEST)
        assert cursor.is_done()
        assert cursor.strategy == "suspend"
        assert (await cursor.aresponse()).body == b"ok"

    @pytest.mark.asyncio
    async def test_resumes_strictly_after_engine_callback(self):
        engine = StubEngine.succeeding(delay=0.05)
        cursor = await SUSPEND.execute_suspend(engine, REQUEST)
        resumed_at = time.monotonic()
        assert cursor.is_done()
        assert resumed_at >= engine.callback_times[0]

    @pytest.mark.asyncio
    async def test_loop_stays_responsive_while_suspended(self):
        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0.005)

        tick_task = asyncio.ensure_future(ticker())
        try:
            await SUSPEND.execute_suspend(StubEngine.succeeding(delay=0.1), REQUEST)
        finally:
            tick_task.cancel()
        assert ticks > 1

    @pytest.mark.asyncio
    async def test_failure_is_recorded(self):
        cause = EngineException("timeout")
        cursor = await SUSPEND.execute_suspend(StubEngine.failing(cause, delay=0.01), REQUEST)
        assert (await cursor.aoutcome()).failure is cause

    @pytest.mark.asyncio
    async def test_timeout_applies(self):
        strategy = SuspendStrategy(timeout=timedelta(milliseconds=30))
        cursor = await asyncio.wait_for(strategy.execute_suspend(StubEngine.hanging(), REQUEST), timeout=5)
        assert isinstance(cursor.failure(), OperationTimeoutException)

    @pytest.mark.asyncio
    async def test_synchronous_engine_error_propagates(self):
        with pytest.raises(ConnectionError):
            await SUSPEND.execute_suspend(_ExplodingEngine(), REQUEST)


class TestCrossStrategyEquivalence:
    RESPONSE = Response(200, headers={"Content-Type": "text/plain"}, body=b"ok")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delay", [0.0, 0.02])
    async def test_all_strategies_yield_equal_responses(self, delay):
        engine = StubEngine.succeeding(self.RESPONSE, delay=delay)

        waited = WAIT.execute(engine, REQUEST)
        with ExecutorStrategy(max_workers=1) as strategy:
            pooled = strategy.execute(engine, REQUEST)
            assert _poll_done(pooled)
        suspended = await SUSPEND.execute_suspend(engine, REQUEST)

        assert waited.response() == pooled.response() == suspended.response() == self.RESPONSE
        assert waited.body() == pooled.body() == suspended.body() == b"ok"

    @pytest.mark.asyncio
    async def test_delayed_failure_then_spurious_success(self):
        cause = EngineException("timeout")
        engine = StubEngine.failing(cause, delay=0.02, spurious=Response(200, body=b"spurious"))

        waited = WAIT.execute(engine, REQUEST)
        with ExecutorStrategy(max_workers=1) as strategy:
            pooled = strategy.execute(engine, REQUEST)
            pooled.wait(timeout=5)
        suspended = await SUSPEND.execute_suspend(engine, REQUEST)

        time.sleep(0.05)
        for cursor in (waited, pooled, suspended):
            assert cursor.failure() is cause
            with pytest.raises(CursorFailedException):
                cursor.body()
