"""Ready-made initialization profiles.

    ctx = await presets.smart(platform, "Dashboard")

`smart` picks a profile from the environment detected on the platform
URL: development for dev, a memory-cached INFO profile for uat, and
production otherwise.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from portal_context.bootstrap import ContextManager, get_context_manager
from portal_context.config import CacheConfig, ContextConfig, HttpConfig, LoggingConfig
from portal_context.context import Context
from portal_context.environment import detect_platform_environment
from portal_context.protocols import CacheStrategy, EnvironmentName, LogLevel, PlatformHandle


def basic_config(component_name: str) -> ContextConfig:
    return ContextConfig(
        component_name=component_name,
        logging=LoggingConfig(level=LogLevel.INFO, enable_console=True, enable_performance=False),
        cache=CacheConfig(strategy=CacheStrategy.MEMORY, ttl=300_000),
        http=HttpConfig(timeout=30_000, retries=2, enable_auth=True),
    )


def production_config(component_name: str) -> ContextConfig:
    return ContextConfig(
        component_name=component_name,
        logging=LoggingConfig(level=LogLevel.WARNING, enable_console=False, enable_performance=True),
        cache=CacheConfig(strategy=CacheStrategy.STORAGE, ttl=600_000),
        http=HttpConfig(timeout=20_000, retries=3, enable_auth=True),
    )


def development_config(component_name: str) -> ContextConfig:
    return ContextConfig(
        component_name=component_name,
        logging=LoggingConfig(level=LogLevel.VERBOSE, enable_console=True, enable_performance=True),
        cache=CacheConfig(strategy=CacheStrategy.NONE),
        http=HttpConfig(timeout=60_000, retries=1, enable_auth=True),
    )


def teams_config(component_name: str) -> ContextConfig:
    return ContextConfig(
        component_name=component_name,
        logging=LoggingConfig(level=LogLevel.INFO, enable_performance=True),
        cache=CacheConfig(strategy=CacheStrategy.MEMORY, ttl=120_000),
        http=HttpConfig(timeout=20_000, retries=2, enable_auth=True),
    )


def uat_config(component_name: str) -> ContextConfig:
    return ContextConfig(
        component_name=component_name,
        logging=LoggingConfig(level=LogLevel.INFO, enable_performance=True),
        cache=CacheConfig(strategy=CacheStrategy.MEMORY, ttl=300_000),
    )


def smart_config(component_name: str, environment: EnvironmentName) -> ContextConfig:
    if environment == EnvironmentName.DEV:
        return development_config(component_name)
    if environment == EnvironmentName.UAT:
        return uat_config(component_name)
    return production_config(component_name)


PRESETS: Dict[str, Callable[[str], ContextConfig]] = {
    "basic": basic_config,
    "production": production_config,
    "development": development_config,
    "teams": teams_config,
}


async def basic(
    platform: PlatformHandle,
    component_name: str,
    *,
    manager: Optional[ContextManager] = None,
) -> Context:
    """INFO logging, 5 minute memory cache, default HTTP settings."""
    return await (manager or get_context_manager()).initialize(platform, basic_config(component_name))


async def production(
    platform: PlatformHandle,
    component_name: str,
    *,
    manager: Optional[ContextManager] = None,
) -> Context:
    """WARNING logging without console output, 10 minute durable cache, 3 retries."""
    return await (manager or get_context_manager()).initialize(
        platform, production_config(component_name)
    )


async def development(
    platform: PlatformHandle,
    component_name: str,
    *,
    manager: Optional[ContextManager] = None,
) -> Context:
    """VERBOSE logging, no cache, long timeout."""
    return await (manager or get_context_manager()).initialize(
        platform, development_config(component_name)
    )


async def teams(
    platform: PlatformHandle,
    component_name: str,
    *,
    manager: Optional[ContextManager] = None,
) -> Context:
    """Short-lived memory cache and shorter timeout for embedded hosts."""
    return await (manager or get_context_manager()).initialize(platform, teams_config(component_name))


async def smart(
    platform: PlatformHandle,
    component_name: str,
    *,
    manager: Optional[ContextManager] = None,
) -> Context:
    environment = detect_platform_environment(platform)
    return await (manager or get_context_manager()).initialize(
        platform, smart_config(component_name, environment)
    )


__all__ = [
    "PRESETS",
    "basic_config",
    "production_config",
    "development_config",
    "teams_config",
    "uat_config",
    "smart_config",
    "basic",
    "production",
    "development",
    "teams",
    "smart",
]
