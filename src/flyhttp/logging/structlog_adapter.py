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
"""StructlogAdapter — routes flyhttp's library loggers through structlog.

Every logger in :data:`~flyhttp.logging.port.LIBRARY_LOGGERS` starts at a
default level: contract breaches (``cursor.duplicate_completion``) and
timeouts (``strategy.timeout``) are visible out of the box, per-call
chatter (``strategy.execute``, ``http.fetch``) is not. Any of them can be
overridden from config.

YAML structure::

    flyhttp:
      logging:
        format: console        # or json
        level:
          root: INFO
          flyhttp.strategy: DEBUG     # also show strategy.late_completion
          flyhttp.cursor: ERROR       # silence duplicate completions
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flyhttp.core.config import Config
from flyhttp.kernel.exceptions import InvalidArgumentException

DEFAULT_LEVELS: dict[str, str] = {
    "flyhttp.engine": "WARNING",
    "flyhttp.strategy": "INFO",
    "flyhttp.cursor": "WARNING",
    "flyhttp.performer": "WARNING",
    "flyhttp.client": "WARNING",
}

_FORMATS = ("console", "json")


def _level_value(name: str, level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise InvalidArgumentException(
            f"unknown log level {level!r} for logger '{name}'",
            code="INVALID_LOG_LEVEL",
            context={"logger": name},
        )
    return value


class StructlogAdapter:
    """LoggingPort backed by structlog on top of stdlib logging.

    Loggers are not cached on first use, so a later :meth:`configure`
    re-routes loggers that library modules created at import time.
    """

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._format = "console"
        self._levels: dict[str, str] = dict(DEFAULT_LEVELS)

    def configure(self, config: Config) -> None:
        """Apply library defaults, then ``flyhttp.logging.*`` overrides."""
        level_section = dict(config.get_section("flyhttp.logging.level"))
        root = str(level_section.pop("root", "INFO")).upper()
        _level_value("root", root)
        fmt = str(config.get("flyhttp.logging.format", "console")).lower()
        if fmt not in _FORMATS:
            raise InvalidArgumentException(f"unknown log format {fmt!r}, expected one of {_FORMATS}")

        levels = dict(DEFAULT_LEVELS)
        for name, level in level_section.items():
            _level_value(name, level)
            levels[name] = str(level).upper()

        self._root_level, self._format, self._levels = root, fmt, levels
        self._setup_structlog()
        for name, level in self._levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of one stdlib logger; unknown level names are rejected."""
        logging.getLogger(name).setLevel(_level_value(name, level))
        self._levels[name] = str(level).upper()

    def levels(self) -> dict[str, str]:
        """Configured level of every library logger plus any overrides."""
        return dict(self._levels)

    def _setup_structlog(self) -> None:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
        ]
        if self._format == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=_level_value("root", self._root_level),
            force=True,
        )
