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
"""flyhttp — HTTP client facade with pluggable engines and execution strategies."""

from flyhttp.client import ClientProperties, Http, SuspendHttp, fetch, fetch_suspend
from flyhttp.concurrent import (
    ASYNC,
    SUSPEND,
    WAIT,
    BlockingPerformer,
    CoroutinePerformer,
    Cursor,
    CursorOutcome,
    ExecutorStrategy,
    StrategyName,
    SuspendStrategy,
    WaitStrategy,
    create_strategy,
    resolve_strategy,
)
from flyhttp.core import Config
from flyhttp.engine import EnginePort, HttpxEngine
from flyhttp.message import Method, Request, Response

__version__ = "0.1.0"

__all__ = [
    "ASYNC",
    "SUSPEND",
    "WAIT",
    "BlockingPerformer",
    "ClientProperties",
    "Config",
    "CoroutinePerformer",
    "Cursor",
    "CursorOutcome",
    "EnginePort",
    "ExecutorStrategy",
    "Http",
    "HttpxEngine",
    "Method",
    "Request",
    "Response",
    "StrategyName",
    "SuspendHttp",
    "SuspendStrategy",
    "WaitStrategy",
    "__version__",
    "create_strategy",
    "fetch",
    "fetch_suspend",
    "resolve_strategy",
]
