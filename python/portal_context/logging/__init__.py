"""Centralized logging for portal_context.

Usage:
    from portal_context.logging import configure_logging, create_logger

    configure_logging("INFO", json_output=False)
    logger = create_logger("Dashboard", correlation_id="ctx-abc")
    logger.info("dashboard_loaded", items=12)
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Union

import structlog

from portal_context.config.constants import CORRELATION_ID_PREFIX
from portal_context.logging.logger import (
    REDACTED,
    ContextLogger,
    categorize_error,
    extract_error_info,
    sanitize_data,
)
from portal_context.protocols import EnvironmentName, LogLevel

# Module state
_CONFIGURED = False

_STDLIB_LEVELS = {
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def to_stdlib_level(level: Union[LogLevel, str, int]) -> int:
    return _STDLIB_LEVELS[LogLevel.parse(level)]


def configure_logging(
    level: Union[LogLevel, str, int] = LogLevel.INFO,
    *,
    json_output: bool = True,
) -> None:
    """Configure structlog and stdlib logging.

    This should be called ONCE at application startup; later calls are
    ignored.

    Args:
        level: Lowest level structlog lets through
        json_output: If True, output JSON; if False, console format
    """
    global _CONFIGURED

    if _CONFIGURED:
        return

    log_level = to_stdlib_level(level)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
    )

    # Silence noisy libraries
    for noisy in ["httpx", "httpcore"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def is_logging_configured() -> bool:
    return _CONFIGURED


def create_logger(
    component: str,
    *,
    correlation_id: Optional[str] = None,
    environment: EnvironmentName = EnvironmentName.PROD,
    level: Optional[LogLevel] = None,
    enable_console: bool = True,
    **context: Any,
) -> ContextLogger:
    """Create a ContextLogger for dependency injection.

    Args:
        component: Component name (e.g., "Dashboard", "sites")
        correlation_id: Correlation id; a placeholder is used when omitted
        environment: Deployment environment
        level: Minimum level (environment default when None)
        enable_console: Emit through structlog
        **context: Additional context to bind

    Returns:
        ContextLogger
    """
    return ContextLogger(
        component=component,
        correlation_id=correlation_id or f"{CORRELATION_ID_PREFIX}-unbound",
        environment=environment,
        level=level,
        enable_console=enable_console,
        context=context,
    )


__all__ = [
    # Configuration
    "configure_logging",
    "is_logging_configured",
    "to_stdlib_level",
    # Logger creation
    "create_logger",
    # Types
    "ContextLogger",
    # Helpers
    "sanitize_data",
    "categorize_error",
    "extract_error_info",
    "REDACTED",
]
