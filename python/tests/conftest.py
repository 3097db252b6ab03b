"""Pytest configuration for portal_context tests.

This conftest.py provides fixtures and configuration for the
portal_context test suite.

Key Principles:
- No network: HTTP is served by httpx.MockTransport handlers
- Each test gets a fresh ContextManager; the process-wide holder is reset
- Durable cache files go to a per-test temporary directory
"""

import sys
from pathlib import Path

import pytest

# Add paths for imports
# 1. python/ root (for the portal_context package)
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))

# 2. tests directory (for fixtures.*)
tests_root = Path(__file__).parent
if str(tests_root) not in sys.path:
    sys.path.insert(0, str(tests_root))


# =============================================================================
# IMPORT FIXTURES FROM FIXTURES PACKAGE
# =============================================================================

from fixtures.http import scripted_handler  # noqa: E402,F401
from fixtures.platform import platform, dev_platform  # noqa: E402,F401
from fixtures.context import manager, context_logger  # noqa: E402,F401


@pytest.fixture(autouse=True)
def isolated_cache_dir(tmp_path, monkeypatch):
    """Point the durable cache tier at a per-test directory."""
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("PORTAL_CONTEXT_CACHE_DIR", str(cache_dir))
    return cache_dir


@pytest.fixture(autouse=True)
def reset_process_manager():
    """Drop the process-wide ContextManager after each test."""
    from portal_context.bootstrap import reset_context_manager

    yield
    reset_context_manager()


# =============================================================================
# PYTEST MARKERS
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (may use mocks)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow-running tests (real backoff delays)"
    )
