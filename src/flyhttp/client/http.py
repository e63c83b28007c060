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
"""Dispatchers: build a request, pick engine and strategy, return a cursor.

    engine = HttpxEngine(base_url="https://example.com")

    cursor = Http(engine, "wait").get("/")
    print(cursor.response().status)

    cursor = await SuspendHttp(engine).get("/")
    print(cursor.text())
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta

import structlog

from flyhttp.client.properties import ClientProperties
from flyhttp.concurrent.cursor import Cursor
from flyhttp.concurrent.ports.outbound import StrategyPort, SuspendStrategyPort
from flyhttp.concurrent.strategy import (
    ExecutorStrategy,
    StrategyName,
    SuspendStrategy,
    WaitStrategy,
    create_strategy,
    resolve_strategy,
)
from flyhttp.core.config import Config
from flyhttp.engine.adapters.httpx_engine import HttpxEngine
from flyhttp.engine.ports.outbound import EnginePort
from flyhttp.kernel.exceptions import InvalidArgumentException
from flyhttp.kernel.lifecycle import Lifecycle
from flyhttp.logging.structlog_adapter import StructlogAdapter
from flyhttp.message import Request

logger = structlog.get_logger("flyhttp.client")

Headers = Mapping[str, str] | Iterable[tuple[str, str]] | None


def _require_engine(engine: object) -> EnginePort:
    if not isinstance(engine, EnginePort):
        raise InvalidArgumentException(f"engine must implement connect(), got {type(engine).__name__}")
    return engine


def _resolve(strategy: object) -> object:
    if isinstance(strategy, str):
        return resolve_strategy(strategy)
    return strategy


def _owned_parts(config: Config) -> tuple[HttpxEngine, WaitStrategy | ExecutorStrategy | SuspendStrategy]:
    if config.get("flyhttp.logging") is not None:
        StructlogAdapter().configure(config)
    props = config.bind(ClientProperties)
    engine = HttpxEngine(
        base_url=props.base_url,
        timeout=timedelta(seconds=props.engine_timeout_seconds),
        headers=props.headers,
        max_workers=props.engine_workers,
    )
    timeout = timedelta(seconds=props.timeout_seconds) if props.timeout_seconds is not None else None
    strategy = create_strategy(props.strategy, timeout=timeout, max_workers=props.max_workers)
    return engine, strategy


class _Dispatcher:
    def __init__(self, engine: EnginePort) -> None:
        self._engine = _require_engine(engine)
        self._owned: list[Lifecycle] = []

    @property
    def engine(self) -> EnginePort:
        return self._engine

    def close(self) -> None:
        """Stop the engine and strategy this dispatcher created from config."""
        for part in reversed(self._owned):
            part.stop()
        self._owned.clear()


class Http(_Dispatcher):
    """Blocking-call dispatcher over a synchronous strategy.

    Args:
        engine: Network engine performing the exchange.
        strategy: A strategy instance or a registered name (``wait``,
            ``async``). Suspending strategies are rejected; use
            :class:`SuspendHttp`.
    """

    def __init__(self, engine: EnginePort, strategy: StrategyPort | str = StrategyName.WAIT) -> None:
        super().__init__(engine)
        resolved = _resolve(strategy)
        if not isinstance(resolved, StrategyPort):
            raise InvalidArgumentException(f"Http needs a synchronous strategy, got {resolved!r}")
        self._strategy = resolved

    @property
    def strategy(self) -> StrategyPort:
        return self._strategy

    @classmethod
    def from_config(cls, config: Config) -> Http:
        """Build a dispatcher, engine and strategy from ``flyhttp.client.*``."""
        engine, strategy = _owned_parts(config)
        if not isinstance(strategy, StrategyPort):
            engine.stop()
            raise InvalidArgumentException(f"flyhttp.client.strategy '{strategy.name}' cannot be used with Http")
        http = cls(engine, strategy)
        http._owned = [part for part in (engine, strategy) if isinstance(part, Lifecycle)]
        return http

    def send(self, request: Request) -> Cursor:
        logger.debug("http.fetch", method=request.method, url=request.url, strategy=self._strategy.name)
        return self._strategy.execute(self._engine, request)

    def fetch(self, method: str, url: str, headers: Headers = None, body: bytes | str | None = None) -> Cursor:
        return self.send(Request(method, url, headers, body))  # type: ignore[arg-type]

    def get(self, url: str, headers: Headers = None) -> Cursor:
        """Send a GET request."""
        return self.fetch("GET", url, headers)

    def post(self, url: str, body: bytes | str | None = None, headers: Headers = None) -> Cursor:
        """Send a POST request."""
        return self.fetch("POST", url, headers, body)

    def put(self, url: str, body: bytes | str | None = None, headers: Headers = None) -> Cursor:
        """Send a PUT request."""
        return self.fetch("PUT", url, headers, body)

    def delete(self, url: str, headers: Headers = None) -> Cursor:
        """Send a DELETE request."""
        return self.fetch("DELETE", url, headers)

    def __enter__(self) -> Http:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SuspendHttp(_Dispatcher):
    """Coroutine dispatcher over a suspending strategy.

    The cursor returned by ``await fetch(...)`` is already populated.
    """

    def __init__(self, engine: EnginePort, strategy: SuspendStrategyPort | str = StrategyName.SUSPEND) -> None:
        super().__init__(engine)
        resolved = _resolve(strategy)
        if not isinstance(resolved, SuspendStrategyPort):
            raise InvalidArgumentException(f"SuspendHttp needs a suspending strategy, got {resolved!r}")
        self._strategy = resolved

    @property
    def strategy(self) -> SuspendStrategyPort:
        return self._strategy

    @classmethod
    def from_config(cls, config: Config) -> SuspendHttp:
        """Build a dispatcher from ``flyhttp.client.*``; the strategy must be ``suspend``."""
        engine, strategy = _owned_parts(config)
        if not isinstance(strategy, SuspendStrategyPort):
            engine.stop()
            if isinstance(strategy, Lifecycle):
                strategy.stop()
            raise InvalidArgumentException(f"flyhttp.client.strategy '{strategy.name}' cannot be used with SuspendHttp")
        http = cls(engine, strategy)
        http._owned = [engine]
        return http

    async def send(self, request: Request) -> Cursor:
        logger.debug("http.fetch", method=request.method, url=request.url, strategy=self._strategy.name)
        return await self._strategy.execute_suspend(self._engine, request)

    async def fetch(self, method: str, url: str, headers: Headers = None, body: bytes | str | None = None) -> Cursor:
        return await self.send(Request(method, url, headers, body))  # type: ignore[arg-type]

    async def get(self, url: str, headers: Headers = None) -> Cursor:
        """Send a GET request."""
        return await self.fetch("GET", url, headers)

    async def post(self, url: str, body: bytes | str | None = None, headers: Headers = None) -> Cursor:
        """Send a POST request."""
        return await self.fetch("POST", url, headers, body)

    async def put(self, url: str, body: bytes | str | None = None, headers: Headers = None) -> Cursor:
        """Send a PUT request."""
        return await self.fetch("PUT", url, headers, body)

    async def delete(self, url: str, headers: Headers = None) -> Cursor:
        """Send a DELETE request."""
        return await self.fetch("DELETE", url, headers)


def fetch(
    engine: EnginePort,
    strategy: StrategyPort | str,
    method: str,
    url: str,
    headers: Headers = None,
    body: bytes | str | None = None,
) -> Cursor:
    """Run one request through *strategy* and return its cursor."""
    return Http(engine, strategy).fetch(method, url, headers, body)


async def fetch_suspend(
    engine: EnginePort,
    strategy: SuspendStrategyPort | str,
    method: str,
    url: str,
    headers: Headers = None,
    body: bytes | str | None = None,
) -> Cursor:
    """Run one request through a suspending *strategy* and return its populated cursor."""
    return await SuspendHttp(engine, strategy).fetch(method, url, headers, body)
