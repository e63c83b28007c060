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
"""Unified lifecycle protocol for resource-owning adapters.

Engines that own connection pools and strategies that own worker threads
implement this protocol so callers can release them deterministically.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for resource-owning adapters.

    Implementations are usable right after construction; ``start()`` is
    allowed to be a no-op. ``stop()`` must be idempotent.
    """

    def start(self) -> None:
        """Acquire resources eagerly (optional)."""
        ...

    def stop(self) -> None:
        """Release pools, threads and connections.

        In-flight calls are allowed to finish before resources go away.
        """
        ...
