"""PerformanceTracker - bounded ring buffer of operation timings.

Usage:
    tracker = PerformanceTracker(logger=logger)
    items = await tracker.track("load_items", lambda: client.get_json("web/lists"))
    tracker.average_time("load_items")
"""

from __future__ import annotations

import time
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, TypeVar

from portal_context.config.constants import (
    METRIC_HISTORY_CAPACITY,
    SLOW_OPERATION_THRESHOLD_MS,
)
from portal_context.protocols import LoggerProtocol, PerformanceMetric

T = TypeVar("T")


class PerformanceTracker:
    """Records timings of awaited operations, oldest evicted first."""

    def __init__(
        self,
        logger: LoggerProtocol,
        *,
        enabled: bool = True,
        max_metrics: int = METRIC_HISTORY_CAPACITY,
        slow_threshold_ms: float = SLOW_OPERATION_THRESHOLD_MS,
    ):
        self._logger = logger
        self._enabled = enabled
        self._slow_threshold_ms = slow_threshold_ms
        self._metrics: Deque[PerformanceMetric] = deque(maxlen=max_metrics)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def capacity(self) -> int:
        return self._metrics.maxlen or 0

    async def track(self, name: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Await `operation()` and record its duration and outcome.

        Exceptions propagate unchanged after the failed metric is recorded.
        """
        if not self._enabled:
            return await operation()

        started = time.perf_counter()
        timestamp_ms = int(time.time() * 1000)
        success = True
        try:
            return await operation()
        except BaseException:
            success = False
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            self.record(
                PerformanceMetric(
                    name=name,
                    duration_ms=round(duration_ms, 2),
                    success=success,
                    timestamp_ms=timestamp_ms,
                )
            )

    def record(self, metric: PerformanceMetric) -> None:
        self._metrics.append(metric)
        if metric.duration_ms > self._slow_threshold_ms:
            self._logger.warning(
                f"Slow operation detected: {metric.name}",
                duration_ms=round(metric.duration_ms),
                success=metric.success,
            )

    def metrics(self) -> List[PerformanceMetric]:
        return list(self._metrics)

    def average_time(self, name: Optional[str] = None) -> float:
        """Mean duration in ms, optionally for one operation name; 0 when empty."""
        selected = [m for m in self._metrics if name is None or m.name == name]
        if not selected:
            return 0.0
        return round(sum(m.duration_ms for m in selected) / len(selected), 2)

    def slow_operations(
        self, threshold_ms: float = SLOW_OPERATION_THRESHOLD_MS
    ) -> List[PerformanceMetric]:
        return [m for m in self._metrics if m.duration_ms > threshold_ms]

    def failed_operations(self) -> List[PerformanceMetric]:
        return [m for m in self._metrics if not m.success]

    def error_rate(self) -> float:
        if not self._metrics:
            return 0.0
        return len(self.failed_operations()) / len(self._metrics)

    def clear(self) -> None:
        self._metrics.clear()

    def __len__(self) -> int:
        return len(self._metrics)


__all__ = ["PerformanceTracker"]
