"""ContextLogger - leveled, bounded-history logger backed by structlog.

Every accepted entry is kept in a fixed-capacity ring buffer (oldest
evicted first) so diagnostics can be read back in-process, and is emitted
through structlog with component / correlation_id / environment bound.
"""

from __future__ import annotations

import sys
import time
import traceback
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

import structlog

from portal_context.config.constants import LOG_HISTORY_CAPACITY, PACKAGE_NAME
from portal_context.environment import default_log_level
from portal_context.protocols import EnvironmentName, LogEntry, LogLevel

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = ("password", "token", "authorization", "secret", "key")

_EMITTERS = {
    LogLevel.VERBOSE: "debug",
    LogLevel.INFO: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


def sanitize_data(data: Any) -> Any:
    """Redact values whose key looks sensitive. Nested dicts are walked."""
    if not isinstance(data, dict):
        return data
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if any(s in lowered for s in SENSITIVE_KEYS):
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_data(value)
        else:
            sanitized[key] = value
    return sanitized


def categorize_error(error: Any) -> str:
    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    if isinstance(status, int):
        if status >= 500:
            return "ServerError"
        if status >= 400:
            return "ClientError"
    message = str(error).lower()
    if "timeout" in message:
        return "TimeoutError"
    if "network" in message:
        return "NetworkError"
    return "UnknownError"


def extract_error_info(
    error: Any,
    data: Optional[Dict[str, Any]],
    environment: EnvironmentName,
) -> Optional[Dict[str, Any]]:
    """Merge a structured description of `error` into `data`."""
    if error is None:
        return data
    info: Dict[str, Any] = dict(data or {})
    details: Dict[str, Any] = {
        "name": type(error).__name__,
        "message": getattr(error, "message", None) or str(error),
        "type": categorize_error(error),
    }
    status = getattr(error, "status", None)
    if status is not None:
        details["status"] = status
    code = getattr(error, "code", None)
    if code is not None:
        details["code"] = code
    if environment == EnvironmentName.DEV and isinstance(error, BaseException):
        details["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    info["error"] = details
    return info


class ContextLogger:
    """LoggerProtocol implementation with level gating and history.

    Args:
        component: Component name stamped on every entry
        correlation_id: Process correlation id stamped on every entry
        environment: Deployment environment (drives default level and
            whether tracebacks are captured)
        level: Minimum level; derived from environment when None
        enable_console: Emit through structlog (history is kept either way)
        max_entries: Ring buffer capacity
    """

    def __init__(
        self,
        *,
        component: str,
        correlation_id: str,
        environment: EnvironmentName = EnvironmentName.PROD,
        level: Optional[LogLevel] = None,
        enable_console: bool = True,
        max_entries: int = LOG_HISTORY_CAPACITY,
        context: Optional[Dict[str, Any]] = None,
        base_logger: Any = None,
        _entries: Optional[Deque[LogEntry]] = None,
    ):
        self._component = component
        self._correlation_id = correlation_id
        self._environment = environment
        self._level = level if level is not None else default_log_level(environment)
        self._enable_console = enable_console
        self._max_entries = max_entries
        self._context = dict(context or {})
        self._entries: Deque[LogEntry] = (
            _entries if _entries is not None else deque(maxlen=max_entries)
        )
        self._timers: Dict[str, float] = {}
        self._base = base_logger or structlog.get_logger(PACKAGE_NAME)
        bound = dict(self._context)
        bound.update(
            component=component,
            correlation_id=correlation_id,
            environment=environment.value,
        )
        self._logger = self._base.bind(**bound)

    # ─── Properties ───

    @property
    def component(self) -> str:
        return self._component

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    @property
    def environment(self) -> EnvironmentName:
        return self._environment

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def enable_console(self) -> bool:
        return self._enable_console

    # ─── LoggerProtocol ───

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.VERBOSE, message, kwargs or None)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, kwargs or None)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, kwargs or None)

    def error(self, message: str, error: Any = None, **kwargs: Any) -> None:
        """Log at ERROR, attaching a structured description of `error`."""
        data = extract_error_info(error, kwargs or None, self._environment)
        self._log(LogLevel.ERROR, message, data)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log the exception currently being handled at ERROR."""
        self.error(message, error=sys.exc_info()[1], **kwargs)

    def success(self, message: str, **kwargs: Any) -> None:
        """INFO entry flagged as a completed milestone."""
        self._log(LogLevel.INFO, message, {**kwargs, "success": True})

    def bind(self, **kwargs: Any) -> "ContextLogger":
        """Child logger with extra bound context and the same history."""
        component = kwargs.pop("component", self._component)
        return ContextLogger(
            component=component,
            correlation_id=self._correlation_id,
            environment=self._environment,
            level=self._level,
            enable_console=self._enable_console,
            max_entries=self._max_entries,
            context={**self._context, **kwargs},
            base_logger=self._base,
            _entries=self._entries,
        )

    def child(
        self,
        component: str,
        *,
        enable_console: Optional[bool] = None,
    ) -> "ContextLogger":
        """Logger sharing level/environment/correlation id, own component and history."""
        return ContextLogger(
            component=component,
            correlation_id=self._correlation_id,
            environment=self._environment,
            level=self._level,
            enable_console=self._enable_console if enable_console is None else enable_console,
            max_entries=self._max_entries,
            base_logger=self._base,
        )

    # ─── Timers ───

    def start_timer(self, name: str) -> Callable[[], float]:
        """Start a named timer. Calling the returned function stops it,
        logs the duration at INFO and returns it in milliseconds."""
        started = time.perf_counter()
        self._timers[name] = started

        def stop() -> float:
            duration_ms = (time.perf_counter() - started) * 1000
            self._timers.pop(name, None)
            self._log(LogLevel.INFO, f"Timer: {name}", {"duration_ms": round(duration_ms)})
            return duration_ms

        return stop

    def active_timers(self) -> List[str]:
        return list(self._timers)

    # ─── History ───

    def entries(self) -> List[LogEntry]:
        """Snapshot of recorded entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._timers.clear()

    # ─── Internals ───

    def _log(self, level: LogLevel, message: str, data: Optional[Dict[str, Any]]) -> None:
        if level < self._level:
            return

        data = sanitize_data(data)
        self._entries.append(
            LogEntry(
                level=level,
                message=message,
                timestamp_ms=int(time.time() * 1000),
                correlation_id=self._correlation_id,
                component=self._component,
                data=data,
            )
        )

        if self._enable_console:
            emit = getattr(self._logger, _EMITTERS[level])
            payload = dict(data or {})
            if "event" in payload:
                payload["event_data"] = payload.pop("event")
            emit(message, **payload)

    def __repr__(self) -> str:
        return (
            f"ContextLogger(component={self._component!r}, "
            f"level={self._level.name}, environment={self._environment.value})"
        )


__all__ = [
    "ContextLogger",
    "sanitize_data",
    "categorize_error",
    "extract_error_info",
    "REDACTED",
]
