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
"""Performer and strategy ports — how a call is run, and who picks the how."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from flyhttp.concurrent.cursor import Cursor
    from flyhttp.engine.ports.outbound import EnginePort
    from flyhttp.message import Request

Trigger = Callable[[], None]
Work = Callable[[], None]
CallbackConsumer = Callable[[Trigger], None]


@runtime_checkable
class PerformerPort(Protocol):
    """Runs ``work`` on the calling thread and blocks until triggered."""

    def perform(self, work: Work, callback_consumer: CallbackConsumer) -> None:
        """Hand a trigger to ``callback_consumer``, run ``work``, wait for the trigger."""
        ...


@runtime_checkable
class SuspendPerformerPort(Protocol):
    """Runs ``work`` and suspends the calling coroutine until triggered."""

    async def perform_suspend(self, work: Work, callback_consumer: CallbackConsumer) -> None:
        """Hand a trigger to ``callback_consumer``, run ``work``, await the trigger."""
        ...


@runtime_checkable
class StrategyPort(Protocol):
    """Named policy producing a cursor for one call from synchronous code."""

    name: str

    def execute(self, engine: EnginePort, request: Request) -> Cursor: ...


@runtime_checkable
class SuspendStrategyPort(Protocol):
    """Named policy producing a cursor for one call from a coroutine."""

    name: str

    async def execute_suspend(self, engine: EnginePort, request: Request) -> Cursor: ...
