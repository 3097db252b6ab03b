"""ContextManager - one-time bootstrap of the process-wide Context.

State machine:

    uninitialized --initialize()--> initializing --ok--> ready
          ^                              |                 |
          +-------- failure / reset() ---+----- reset() ---+

Concurrent initialize() calls share one in-flight bootstrap task; every
caller observes the same Context. Once ready, initialize() returns the
existing Context and ignores its arguments.

Usage:
    from portal_context import bootstrap

    ctx = await bootstrap.initialize(platform, {"component_name": "Dashboard"})
    ...
    bootstrap.current().logger.info("dashboard_loaded")
"""

from __future__ import annotations

import asyncio
import inspect
import random
import string
import time
from types import MappingProxyType
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Union

import httpx

from portal_context.api_client import ApiClient
from portal_context.cache import CacheStrategyFactory
from portal_context.config import ContextConfig, coerce_context_config
from portal_context.config.constants import CORRELATION_ID_PREFIX
from portal_context.context import Context, build_client_tiers
from portal_context.environment import default_log_level, detect_platform_environment
from portal_context.errors import ContextError, NotInitialized
from portal_context.http import HttpTransport
from portal_context.logging import ContextLogger, configure_logging, create_logger
from portal_context.performance import PerformanceTracker
from portal_context.protocols import ContextModule, EnvironmentName, PlatformHandle
from portal_context.sites import SiteConnectionRegistry

_BASE36 = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_correlation_id(rng: Optional[random.Random] = None) -> str:
    """`ctx-<base36 ms timestamp>-<6 random chars>`. For log correlation only."""
    rng = rng or random
    suffix = "".join(rng.choice(_BASE36) for _ in range(6))
    return f"{CORRELATION_ID_PREFIX}-{_base36(int(time.time() * 1000))}-{suffix}"


class ContextManager:
    """Owns the Context singleton, its registered modules and their teardown.

    Args:
        http_client: httpx client handed to the transport (tests inject one
            built on httpx.MockTransport); the transport owns a new one if None
    """

    def __init__(self, *, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client = http_client
        self._context: Optional[Context] = None
        self._pending: Optional["asyncio.Task[Context]"] = None
        self._modules: List[Any] = []
        self._extensions: Dict[str, Any] = {}
        self._background: set = set()

    # ─── Lifecycle ───

    async def initialize(
        self,
        platform: PlatformHandle,
        config: Union[ContextConfig, Mapping[str, Any], None] = None,
    ) -> Context:
        """Bootstrap once. Failures propagate; a later call starts over."""
        if self._context is not None:
            self._context.logger.debug("Context already initialized, returning existing instance")
            return self._context

        if self._pending is None:
            task = asyncio.ensure_future(self._bootstrap(platform, config))
            self._pending = task
            task.add_done_callback(self._clear_pending)

        return await asyncio.shield(self._pending)

    def current(self) -> Context:
        if self._context is None:
            raise NotInitialized("Context not initialized. Call initialize() first.")
        return self._context

    def is_ready(self) -> bool:
        return self._context is not None

    def reset(self) -> None:
        """Tear down modules and clear all singleton state.

        Module cleanup failures are logged and suppressed. Async cleanups
        and the connection-pool close are scheduled on the running loop;
        use shutdown() to await them.
        """
        pending = self._teardown()
        if not pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        for awaitable in pending:
            if loop is None:
                if inspect.iscoroutine(awaitable):
                    awaitable.close()
                continue
            task = asyncio.ensure_future(awaitable)
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    async def shutdown(self) -> None:
        """reset() that also awaits async cleanups and closes the HTTP pool."""
        context = self._context
        for awaitable in self._teardown():
            try:
                await awaitable
            except Exception as e:
                if context is not None:
                    context.logger.error("Async cleanup failed during shutdown", error=e)

    async def add_module(
        self,
        module: ContextModule,
        config: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Initialize `module` against the current Context.

        The result (if any) is exposed as `context.extension(module.name)`.
        Initialization failures are logged and re-raised.
        """
        context = self.current()
        name = module.name
        if name in self._extensions or any(m.name == name for m in self._modules):
            raise ContextError(
                f"Module already registered: {name}",
                code="MODULE_ALREADY_REGISTERED",
            )

        logger = context.logger
        try:
            result = module.initialize(context, dict(config or {}))
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Failed to initialize module: {name}", error=e)
            raise

        self._modules.append(module)
        if result is not None:
            self._extensions[name] = result
        logger.info(f"Module added: {name}")
        return result

    # ─── Internals ───

    async def _bootstrap(
        self,
        platform: PlatformHandle,
        config: Union[ContextConfig, Mapping[str, Any], None],
    ) -> Context:
        started = time.perf_counter()
        cfg = coerce_context_config(config)
        environment = detect_platform_environment(platform)
        correlation_id = generate_correlation_id()
        level = cfg.logging.level if cfg.logging.level is not None else default_log_level(environment)

        configure_logging(level, json_output=environment != EnvironmentName.DEV)
        logger = create_logger(
            cfg.component_name,
            correlation_id=correlation_id,
            environment=environment,
            level=level,
            enable_console=cfg.logging.enable_console,
        )

        transport = HttpTransport(
            platform,
            logger.bind(module="http"),
            timeout_ms=cfg.http.timeout,
            retries=cfg.http.retries,
            enable_auth=cfg.http.enable_auth,
            client=self._http_client,
            correlation_id=correlation_id,
        )
        try:
            tracker = PerformanceTracker(
                logger.bind(module="performance"),
                enabled=cfg.logging.enable_performance,
            )
            client = ApiClient(platform.site_url, transport)
            cache = CacheStrategyFactory(logger.bind(module="cache"), default_ttl_ms=cfg.cache.ttl)
            tiers = build_client_tiers(client, cfg.cache, cache)
            sites = SiteConnectionRegistry(transport, logger.bind(module="sites"), cfg.cache)
        except Exception as e:
            logger.error("Context initialization failed", error=e)
            await transport.aclose()
            raise

        self._extensions = {}
        context = Context(
            platform_handle=platform,
            correlation_id=correlation_id,
            environment=environment,
            api_client=tiers.plain,
            api_client_cached=tiers.cached,
            api_client_pessimistic=tiers.pessimistic,
            logger=logger,
            http_transport=transport,
            performance_tracker=tracker,
            cache=cache,
            config=cfg,
            sites=sites,
            extensions=MappingProxyType(self._extensions),
        )
        self._context = context

        logger.success(
            "Context initialized",
            environment=environment.value,
            cache_strategy=cfg.cache.strategy.value,
            duration_ms=round((time.perf_counter() - started) * 1000),
        )
        return context

    def _clear_pending(self, task: "asyncio.Task[Context]") -> None:
        if self._pending is task:
            self._pending = None
        if not task.cancelled():
            # Mark retrieved; awaiters receive it through shield()
            task.exception()

    def _teardown(self) -> List[Awaitable[Any]]:
        """Synchronous part of reset(); returns async work still to run."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

        context = self._context
        logger: Optional[ContextLogger] = context.logger if context else None
        pending: List[Awaitable[Any]] = []

        for module in reversed(self._modules):
            cleanup = getattr(module, "cleanup", None)
            if not callable(cleanup):
                continue
            try:
                result = cleanup()
            except Exception as e:
                if logger:
                    logger.error(f"Module cleanup failed: {module.name}", error=e)
                continue
            if inspect.isawaitable(result):
                pending.append(self._guarded(result, module.name, logger))

        if context is not None:
            context.sites.cleanup()
            context.cache.cleanup()
            context.http_transport.close()
            pending.append(context.http_transport.aclose())
            context.logger.info("Context reset")

        self._context = None
        self._modules = []
        self._extensions = {}
        return pending

    @staticmethod
    async def _guarded(
        awaitable: Awaitable[Any],
        name: str,
        logger: Optional[ContextLogger],
    ) -> None:
        try:
            await awaitable
        except Exception as e:
            if logger:
                logger.error(f"Module cleanup failed: {name}", error=e)

    def __repr__(self) -> str:
        state = "ready" if self._context else ("initializing" if self._pending else "uninitialized")
        return f"ContextManager(state={state}, modules={len(self._modules)})"


# =============================================================================
# Process-wide holder
# =============================================================================

_manager: Optional[ContextManager] = None


def get_context_manager() -> ContextManager:
    """Process-wide manager, created on first use."""
    global _manager
    if _manager is None:
        _manager = ContextManager()
    return _manager


def set_context_manager(manager: ContextManager) -> None:
    """Override the process-wide manager (useful for testing)."""
    global _manager
    _manager = manager


def reset_context_manager() -> None:
    """Reset and drop the process-wide manager."""
    global _manager
    if _manager is not None:
        _manager.reset()
    _manager = None


async def initialize(
    platform: PlatformHandle,
    config: Union[ContextConfig, Mapping[str, Any], None] = None,
) -> Context:
    return await get_context_manager().initialize(platform, config)


def current() -> Context:
    return get_context_manager().current()


def is_ready() -> bool:
    return _manager is not None and _manager.is_ready()


def reset() -> None:
    get_context_manager().reset()


async def add_module(module: ContextModule, config: Optional[Mapping[str, Any]] = None) -> Any:
    return await get_context_manager().add_module(module, config)


__all__ = [
    "ContextManager",
    "generate_correlation_id",
    "get_context_manager",
    "set_context_manager",
    "reset_context_manager",
    "initialize",
    "current",
    "is_ready",
    "reset",
    "add_module",
]
