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
"""Blocking performer adapter."""

from __future__ import annotations

import threading
from typing import ClassVar

from flyhttp.concurrent.ports.outbound import CallbackConsumer, Work


class BlockingPerformer:
    """Performer that parks the calling thread on a one-shot latch.

    The trigger is registered before ``work`` starts, so a trigger fired
    synchronously from inside ``work`` is never missed. If ``work`` raises,
    the exception propagates without blocking.
    """

    DEFAULT: ClassVar[BlockingPerformer]

    def perform(self, work: Work, callback_consumer: CallbackConsumer) -> None:
        latch = threading.Event()
        callback_consumer(latch.set)
        work()
        latch.wait()


BlockingPerformer.DEFAULT = BlockingPerformer()
