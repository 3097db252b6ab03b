"""Context health check.

Derives a point-in-time health summary from the PerformanceTracker and
the active configuration. The context counts as healthy while it has no
HIGH or CRITICAL issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from portal_context.context import Context
from portal_context.protocols import CacheStrategy, EnvironmentName

SLOW_AVERAGE_MS = 2_000
SLOW_OPERATIONS_WARNING = 5
ERROR_RATE_WARNING = 0.1
ERROR_RATE_CRITICAL = 0.5


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueType(str, Enum):
    PERFORMANCE = "performance"
    NETWORK = "network"
    CONFIGURATION = "configuration"


@dataclass
class ContextIssue:
    severity: IssueSeverity
    type: IssueType
    message: str
    details: Optional[Dict[str, Any]] = None
    resolution: Optional[str] = None


@dataclass
class PerformanceSummary:
    average_response_time: float
    slow_operations: int
    error_rate: float


@dataclass
class ContextHealthCheck:
    is_healthy: bool
    performance: PerformanceSummary
    issues: List[ContextIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


def check_context_health(context: Context) -> ContextHealthCheck:
    tracker = context.performance_tracker
    config = context.config
    summary = PerformanceSummary(
        average_response_time=tracker.average_time(),
        slow_operations=len(tracker.slow_operations()),
        error_rate=round(tracker.error_rate(), 4),
    )
    issues: List[ContextIssue] = []
    recommendations: List[str] = []

    if context.http_transport.closed:
        issues.append(
            ContextIssue(
                severity=IssueSeverity.CRITICAL,
                type=IssueType.NETWORK,
                message="HTTP transport is closed",
                resolution="Re-initialize the context",
            )
        )

    if summary.error_rate >= ERROR_RATE_CRITICAL:
        severity: Optional[IssueSeverity] = IssueSeverity.CRITICAL
    elif summary.error_rate >= ERROR_RATE_WARNING:
        severity = IssueSeverity.HIGH
    else:
        severity = None
    if severity is not None:
        issues.append(
            ContextIssue(
                severity=severity,
                type=IssueType.NETWORK,
                message=f"High error rate: {summary.error_rate:.0%} of tracked operations failed",
                details={"failed": len(tracker.failed_operations()), "tracked": len(tracker)},
                resolution="Check connectivity and permissions on the failing endpoints",
            )
        )

    if summary.average_response_time > SLOW_AVERAGE_MS:
        issues.append(
            ContextIssue(
                severity=IssueSeverity.MEDIUM,
                type=IssueType.PERFORMANCE,
                message=f"Average response time is {summary.average_response_time:.0f}ms",
                details={"threshold_ms": SLOW_AVERAGE_MS},
            )
        )

    if summary.slow_operations >= SLOW_OPERATIONS_WARNING:
        issues.append(
            ContextIssue(
                severity=IssueSeverity.MEDIUM,
                type=IssueType.PERFORMANCE,
                message=f"{summary.slow_operations} slow operations recorded",
            )
        )
        if config.cache.strategy == CacheStrategy.NONE:
            recommendations.append("Enable a cache strategy to reduce repeated slow reads")

    if config.http.retries == 0:
        issues.append(
            ContextIssue(
                severity=IssueSeverity.LOW,
                type=IssueType.CONFIGURATION,
                message="HTTP retries are disabled",
                resolution="Set http.retries to at least 1 to absorb transient failures",
            )
        )

    if context.environment == EnvironmentName.PROD and config.cache.strategy == CacheStrategy.NONE:
        recommendations.append("Consider the memory or storage cache strategy in production")

    if not config.logging.enable_performance:
        recommendations.append("Enable logging.enable_performance to collect health metrics")

    is_healthy = not any(
        issue.severity in (IssueSeverity.HIGH, IssueSeverity.CRITICAL) for issue in issues
    )
    return ContextHealthCheck(
        is_healthy=is_healthy,
        performance=summary,
        issues=issues,
        recommendations=recommendations,
    )


__all__ = [
    "IssueSeverity",
    "IssueType",
    "ContextIssue",
    "PerformanceSummary",
    "ContextHealthCheck",
    "check_context_health",
]
