"""Protocols and shared value types for portal_context."""

from portal_context.protocols.interfaces import (
    CacheStoreProtocol,
    ContextModule,
    LoggerProtocol,
    PlatformHandle,
)
from portal_context.protocols.types import (
    CacheStrategy,
    EnvironmentName,
    LogEntry,
    LogLevel,
    PerformanceMetric,
)

__all__ = [
    # Interfaces
    "LoggerProtocol",
    "PlatformHandle",
    "CacheStoreProtocol",
    "ContextModule",
    # Types
    "EnvironmentName",
    "LogLevel",
    "CacheStrategy",
    "LogEntry",
    "PerformanceMetric",
]
