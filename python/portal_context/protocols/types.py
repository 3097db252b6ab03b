"""Shared enums and value types.

These are plain value types with no behavior beyond ordering/parsing,
imported by every other module in the package.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional


class EnvironmentName(str, Enum):
    """Deployment environment derived from the host URL."""

    DEV = "dev"
    UAT = "uat"
    PROD = "prod"


class LogLevel(IntEnum):
    """Log level ordering (lowest is most verbose)."""

    VERBOSE = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        """Accept a LogLevel, its int value or its (case-insensitive) name."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        if name == "DEBUG":
            return cls.VERBOSE
        if name == "WARN":
            return cls.WARNING
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown log level: {value}") from None


class CacheStrategy(str, Enum):
    """Declarative cache strategy for an API client handle."""

    NONE = "none"
    MEMORY = "memory"
    STORAGE = "storage"
    PESSIMISTIC = "pessimistic"


@dataclass(frozen=True)
class LogEntry:
    """One recorded log line."""

    level: LogLevel
    message: str
    timestamp_ms: int
    correlation_id: str
    component: str
    data: Optional[dict] = None


@dataclass(frozen=True)
class PerformanceMetric:
    """Timing of one tracked operation."""

    name: str
    duration_ms: float
    success: bool
    timestamp_ms: int


__all__ = [
    "EnvironmentName",
    "LogLevel",
    "CacheStrategy",
    "LogEntry",
    "PerformanceMetric",
]
