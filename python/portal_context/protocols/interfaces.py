"""Protocol definitions - interfaces for dependency injection.

These are typing.Protocol classes for static type checking. Concrete
implementations live in the sibling packages (logging, cache, http) or
are supplied by the embedding application (PlatformHandle, modules).
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable


# =============================================================================
# LOGGING
# =============================================================================

@runtime_checkable
class LoggerProtocol(Protocol):
    """Structured logging interface."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def bind(self, **kwargs: Any) -> "LoggerProtocol": ...


# =============================================================================
# HOST PLATFORM
# =============================================================================

@runtime_checkable
class PlatformHandle(Protocol):
    """Host-provided platform/session object.

    Owned by the embedding application. The runtime only reads from it:
    the base site URL, the headers that authenticate platform-native API
    calls, and access tokens for token-authenticated endpoints.
    """

    @property
    def site_url(self) -> str: ...

    def platform_headers(self) -> Mapping[str, str]: ...

    async def get_access_token(self, resource: str) -> str: ...


# =============================================================================
# CACHE
# =============================================================================

@runtime_checkable
class CacheStoreProtocol(Protocol):
    """Key/value persistence tier used by cache behaviors.

    Values are JSON-serializable dicts carrying their own expiry.
    """

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...
    def set(self, key: str, value: Dict[str, Any]) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> List[str]: ...


# =============================================================================
# MODULES
# =============================================================================

@runtime_checkable
class ContextModule(Protocol):
    """Opt-in extension registered after bootstrap.

    `initialize` may be sync or async and may return a value that is
    exposed on the context under the module name. `cleanup` is optional.
    """

    name: str

    def initialize(self, context: Any, config: Mapping[str, Any]) -> Any: ...


__all__ = [
    "LoggerProtocol",
    "PlatformHandle",
    "CacheStoreProtocol",
    "ContextModule",
]
