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
"""Client configuration properties.

YAML structure::

    flyhttp:
      client:
        strategy: wait            # wait | async | suspend
        timeout_seconds: 10       # per-call timeout, unset = wait forever
        max_workers: 4            # async strategy pool size
        engine_timeout_seconds: 30
        engine_workers: 8
        base_url: https://api.example.com
        headers:
          User-Agent: flyhttp
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from flyhttp.concurrent.strategy import StrategyName
from flyhttp.core.config import config_properties


@config_properties(prefix="flyhttp.client")
class ClientProperties(BaseModel):
    """Configuration for the dispatcher, its strategy and its engine (flyhttp.client.*)."""

    strategy: StrategyName = StrategyName.WAIT
    timeout_seconds: float | None = Field(default=None, gt=0)
    max_workers: int = Field(default=4, ge=1)
    engine_timeout_seconds: float = Field(default=30.0, gt=0)
    engine_workers: int = Field(default=8, ge=1)
    base_url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
