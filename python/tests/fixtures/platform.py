"""Platform handle fixtures."""

import pytest

from portal_context.platform import StaticPlatformHandle

PRIMARY_SITE_URL = "https://tenant.example.com/sites/portal"
DEV_SITE_URL = "https://tenant.example.com/dev/portal"


def make_platform(site_url: str = PRIMARY_SITE_URL) -> StaticPlatformHandle:
    return StaticPlatformHandle(
        site_url=site_url,
        headers={"Cookie": "FedAuth=session-abc"},
        tokens={"api://orders": "orders-token"},
        default_token="default-token",
    )


@pytest.fixture
def platform():
    """Production-looking primary site."""
    return make_platform()


@pytest.fixture
def dev_platform():
    return make_platform(DEV_SITE_URL)
