"""ContextManager and logger fixtures."""

import pytest

from portal_context.bootstrap import ContextManager
from portal_context.logging import create_logger
from portal_context.protocols import EnvironmentName, LogLevel


@pytest.fixture
async def manager(scripted_handler):
    """Fresh ContextManager whose transport talks to `scripted_handler`."""
    client = scripted_handler.client()
    mgr = ContextManager(http_client=client)
    yield mgr
    await mgr.shutdown()
    await client.aclose()


@pytest.fixture
def context_logger():
    """Real ContextLogger recording everything, console output off."""
    return create_logger(
        "Test",
        correlation_id="ctx-test-000001",
        environment=EnvironmentName.DEV,
        level=LogLevel.VERBOSE,
        enable_console=False,
    )
