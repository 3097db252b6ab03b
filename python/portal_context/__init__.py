"""Portal Context - client runtime for a collaboration-platform REST API.

Bootstraps one process-wide Context holding the API client tiers, logger,
HTTP transport and performance tracker, and manages connections to
secondary sites that share the primary site's authentication.

Sub-packages:
- cache/      - Cache strategy factory, behaviors, memory/file stores
- config/     - ContextConfig (pydantic-settings), SiteConfig, constants
- http/       - Retrying httpx transport and request/response types
- logging/    - structlog configuration and ContextLogger
- modules/    - Optional context modules (links)
- protocols/  - Protocols and shared enums

Top-level modules:
- bootstrap   - ContextManager, process-wide holder and shortcuts
- context     - Context value and client tier construction
- sites       - SiteConnectionRegistry
- api_client  - Site-scoped API client
- performance - PerformanceTracker
- presets     - Ready-made initialization profiles
- health      - Context health check

Usage:
    from portal_context import StaticPlatformHandle, bootstrap

    platform = StaticPlatformHandle(site_url="https://tenant.example.com/sites/portal")
    ctx = await bootstrap.initialize(platform, {"cache": {"strategy": "memory"}})
    web = await ctx.api_client_cached.web("Title")
"""

__version__ = "1.0.0"

from portal_context.api_client import ApiClient
from portal_context.bootstrap import (
    ContextManager,
    get_context_manager,
    reset_context_manager,
    set_context_manager,
)
from portal_context.config import ContextConfig, SiteConfig
from portal_context.context import Context
from portal_context.errors import ContextError, NotInitialized
from portal_context.platform import StaticPlatformHandle
from portal_context.protocols import CacheStrategy, EnvironmentName, LogLevel, PlatformHandle
from portal_context.sites import SiteConnectionRegistry, SiteContext

__all__ = [
    "__version__",
    "ApiClient",
    "ContextManager",
    "get_context_manager",
    "set_context_manager",
    "reset_context_manager",
    "ContextConfig",
    "SiteConfig",
    "Context",
    "ContextError",
    "NotInitialized",
    "StaticPlatformHandle",
    "CacheStrategy",
    "EnvironmentName",
    "LogLevel",
    "PlatformHandle",
    "SiteConnectionRegistry",
    "SiteContext",
]
