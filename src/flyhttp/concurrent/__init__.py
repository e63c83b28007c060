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
"""flyhttp Concurrent — performers, strategies and the cursor they populate.

Framework-agnostic types (ports, cursor) are exported directly.
Default performer and strategy adapters are re-exported for convenience.
"""

# Framework-agnostic exports
from flyhttp.concurrent.cursor import Cursor, CursorOutcome
from flyhttp.concurrent.ports.outbound import (
    PerformerPort,
    StrategyPort,
    SuspendPerformerPort,
    SuspendStrategyPort,
)

# Default adapter re-exports
from flyhttp.concurrent.adapters.blocking_performer import BlockingPerformer
from flyhttp.concurrent.adapters.coroutine_performer import CoroutinePerformer
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

__all__ = [
    # Framework-agnostic
    "Cursor",
    "CursorOutcome",
    "PerformerPort",
    "StrategyPort",
    "SuspendPerformerPort",
    "SuspendStrategyPort",
    # Adapters
    "BlockingPerformer",
    "CoroutinePerformer",
    "ExecutorStrategy",
    "StrategyName",
    "SuspendStrategy",
    "WaitStrategy",
    "ASYNC",
    "SUSPEND",
    "WAIT",
    "create_strategy",
    "resolve_strategy",
]
