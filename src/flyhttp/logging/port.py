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
"""LoggingPort — how flyhttp's library loggers are routed and levelled.

Library modules log structured events on a fixed set of named loggers
(see :data:`LIBRARY_LOGGERS`). An implementation of this port decides
where those events go and at which level each logger starts.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flyhttp.core.config import Config

# logger name -> events it carries
LIBRARY_LOGGERS: dict[str, tuple[str, ...]] = {
    "flyhttp.engine": ("engine.failure",),
    "flyhttp.strategy": (
        "strategy.execute",
        "strategy.timeout",
        "strategy.late_completion",
        "strategy.worker_error",
    ),
    "flyhttp.cursor": ("cursor.duplicate_completion", "cursor.wake_skipped"),
    "flyhttp.performer": ("performer.resume_skipped",),
    "flyhttp.client": ("http.fetch",),
}


@runtime_checkable
class LoggingPort(Protocol):
    """Port for configuring the library loggers from ``flyhttp.logging.*``."""

    def configure(self, config: Config) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...
    def levels(self) -> dict[str, str]: ...
