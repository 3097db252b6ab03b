"""Unit tests for check_context_health."""

from portal_context.health import IssueSeverity, IssueType, check_context_health
from portal_context.protocols import PerformanceMetric


def _metric(duration_ms=10.0, success=True):
    return PerformanceMetric(name="op", duration_ms=duration_ms, success=success, timestamp_ms=0)


def _severities(report):
    return [issue.severity for issue in report.issues]


class TestHealth:
    async def test_fresh_context_is_healthy(self, manager, platform):
        ctx = await manager.initialize(platform, {"cache": {"strategy": "memory"}})

        report = check_context_health(ctx)

        assert report.is_healthy is True
        assert report.issues == []
        assert report.performance.error_rate == 0

    async def test_high_error_rate(self, manager, platform):
        ctx = await manager.initialize(platform)
        tracker = ctx.performance_tracker
        for success in (True, True, True, True, False):
            tracker.record(_metric(success=success))

        report = check_context_health(ctx)

        assert report.is_healthy is False
        assert IssueSeverity.HIGH in _severities(report)
        assert report.performance.error_rate == 0.2

    async def test_critical_error_rate(self, manager, platform):
        ctx = await manager.initialize(platform)
        ctx.performance_tracker.record(_metric(success=False))

        report = check_context_health(ctx)

        assert IssueSeverity.CRITICAL in _severities(report)
        assert report.is_healthy is False

    async def test_slow_operations_recommend_cache(self, manager, platform):
        ctx = await manager.initialize(platform, {"cache": {"strategy": "none"}})
        for _ in range(5):
            ctx.performance_tracker.record(_metric(duration_ms=2_500))

        report = check_context_health(ctx)

        assert report.is_healthy is True
        assert [i.type for i in report.issues] == [IssueType.PERFORMANCE, IssueType.PERFORMANCE]
        assert any("cache strategy" in r for r in report.recommendations)

    async def test_disabled_retries_flagged(self, manager, platform):
        ctx = await manager.initialize(platform, {"http": {"retries": 0}})

        report = check_context_health(ctx)

        assert report.issues[0].severity == IssueSeverity.LOW
        assert report.issues[0].type == IssueType.CONFIGURATION
        assert report.is_healthy is True

    async def test_closed_transport_is_critical(self, manager, platform):
        ctx = await manager.initialize(platform, {"cache": {"strategy": "memory"}})
        ctx.http_transport.close()

        report = check_context_health(ctx)

        assert report.is_healthy is False
        assert report.issues[0].type == IssueType.NETWORK

    async def test_recommendations_for_configuration(self, manager, platform):
        ctx = await manager.initialize(platform, {"logging": {"enable_performance": False}})

        report = check_context_health(ctx)

        assert len(report.recommendations) == 2
