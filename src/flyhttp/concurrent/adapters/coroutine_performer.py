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
"""AsyncIO suspending performer adapter."""

from __future__ import annotations

import asyncio
from typing import ClassVar

import structlog

from flyhttp.concurrent.ports.outbound import CallbackConsumer, Work

logger = structlog.get_logger("flyhttp.performer")


def _resume(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class CoroutinePerformer:
    """Performer that suspends the calling coroutine until triggered.

    The pending state is an ``asyncio.Future`` on the running loop; the
    trigger resolves it through ``call_soon_threadsafe`` and may be fired
    from any thread, any number of times.

    Completion ordering is guaranteed: the coroutine resumes strictly after
    the trigger fires. The completion thread is not: the trigger runs on
    whatever thread the engine calls back on, and the coroutine resumes on
    its own loop.

    Cancelling the awaiting task does not cancel the engine call; a trigger
    arriving afterwards is a no-op.
    """

    DEFAULT: ClassVar[CoroutinePerformer]

    async def perform_suspend(self, work: Work, callback_consumer: CallbackConsumer) -> None:
        loop = asyncio.get_running_loop()
        resumed: asyncio.Future[None] = loop.create_future()

        def trigger() -> None:
            try:
                loop.call_soon_threadsafe(_resume, resumed)
            except RuntimeError:
                logger.debug("performer.resume_skipped", reason="event loop closed")

        callback_consumer(trigger)
        work()
        await resumed


CoroutinePerformer.DEFAULT = CoroutinePerformer()
