"""Context - immutable result of bootstrap.

Also holds the three-tier client construction shared by the primary
context and every secondary site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, NamedTuple, Optional

from portal_context.api_client import ApiClient
from portal_context.cache import CacheStrategyFactory
from portal_context.config import CacheConfig, ContextConfig
from portal_context.http import HttpTransport
from portal_context.logging import ContextLogger
from portal_context.performance import PerformanceTracker
from portal_context.protocols import CacheStrategy, EnvironmentName, PlatformHandle

if TYPE_CHECKING:
    from portal_context.sites import SiteConnectionRegistry


class ClientTiers(NamedTuple):
    """Plain, cached and pessimistic handles onto one site."""

    plain: ApiClient
    cached: ApiClient
    pessimistic: ApiClient


def build_client_tiers(
    client: ApiClient,
    cache_config: CacheConfig,
    factory: CacheStrategyFactory,
) -> ClientTiers:
    """Attach the configured cache behavior to the right handle.

    `pessimistic` goes on the reference-data handle only; `memory` and
    `storage` go on the cached handle. Handles without a behavior alias
    the plain client, so with strategy `none` all three are one object.
    """
    behavior = factory.create_behavior(cache_config.strategy, cache_config.ttl)
    if behavior is None:
        return ClientTiers(client, client, client)
    if cache_config.strategy == CacheStrategy.PESSIMISTIC:
        return ClientTiers(client, client, client.using(behavior))
    return ClientTiers(client, client.using(behavior), client)


@dataclass(frozen=True)
class Context:
    """Process-wide bootstrap result. Never mutated after construction.

    Module results registered later land in `extensions`, a read-only view
    over a mapping owned by the ContextManager.
    """

    platform_handle: PlatformHandle
    correlation_id: str
    environment: EnvironmentName
    api_client: ApiClient
    api_client_cached: ApiClient
    api_client_pessimistic: ApiClient
    logger: ContextLogger
    http_transport: HttpTransport
    performance_tracker: PerformanceTracker
    cache: CacheStrategyFactory
    config: ContextConfig
    sites: "SiteConnectionRegistry"
    extensions: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def component_name(self) -> str:
        return self.config.component_name

    @property
    def site_url(self) -> str:
        return self.api_client.base_url

    def extension(self, name: str) -> Optional[Any]:
        """Result registered by the module called `name`, or None."""
        return self.extensions.get(name)


__all__ = [
    "Context",
    "ClientTiers",
    "build_client_tiers",
]
