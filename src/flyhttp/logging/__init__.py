"""flyhttp Logging — level and route the library's structured events."""

from flyhttp.logging.port import LIBRARY_LOGGERS, LoggingPort
from flyhttp.logging.structlog_adapter import DEFAULT_LEVELS, StructlogAdapter

__all__ = ["DEFAULT_LEVELS", "LIBRARY_LOGGERS", "LoggingPort", "StructlogAdapter"]
