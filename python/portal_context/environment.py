"""Environment detection from host URL heuristics.

Detection never raises: anything unexpected resolves to PROD, which also
carries the least verbose default log level.
"""

from typing import Any

from portal_context.protocols import EnvironmentName, LogLevel

_DEV_MARKERS = ("/dev", "localhost", "debug")
_UAT_MARKERS = ("/uat", "/test", "/staging")


def detect_environment(url: Any) -> EnvironmentName:
    """Derive the environment from a site URL."""
    try:
        lowered = str(url).lower()
    except Exception:
        return EnvironmentName.PROD

    if any(marker in lowered for marker in _DEV_MARKERS):
        return EnvironmentName.DEV
    if any(marker in lowered for marker in _UAT_MARKERS):
        return EnvironmentName.UAT
    return EnvironmentName.PROD


def detect_platform_environment(platform: Any) -> EnvironmentName:
    """Detect from a PlatformHandle, tolerating handles without a site_url."""
    try:
        return detect_environment(platform.site_url)
    except Exception:
        return EnvironmentName.PROD


def default_log_level(environment: EnvironmentName) -> LogLevel:
    if environment == EnvironmentName.DEV:
        return LogLevel.VERBOSE
    if environment == EnvironmentName.UAT:
        return LogLevel.INFO
    return LogLevel.WARNING


__all__ = [
    "detect_environment",
    "detect_platform_environment",
    "default_log_level",
]
