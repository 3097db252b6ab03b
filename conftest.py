"""Root conftest.py for portal_context tests.

This file MUST be at the repository root for fixtures to be discovered
when running tests from any subdirectory.

Provides shared fixtures used across all test modules:
- mock_logger: MagicMock satisfying LoggerProtocol
- mock_platform: MagicMock satisfying PlatformHandle
"""

import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    bind() returns the same mock so calls made through bound loggers
    can be asserted on the fixture itself.
    """
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    logger.success = MagicMock()
    logger.bind = MagicMock(return_value=logger)
    return logger


@pytest.fixture
def mock_platform():
    """Create a mock platform handle.

    Provides:
    - site_url -> primary site URL
    - platform_headers() -> {"Cookie": "session=abc"}
    - get_access_token(resource) -> "token-123"
    """
    platform = MagicMock()
    platform.site_url = "https://tenant.example.com/sites/portal"
    platform.platform_headers = MagicMock(return_value={"Cookie": "session=abc"})
    platform.get_access_token = AsyncMock(return_value="token-123")
    return platform

