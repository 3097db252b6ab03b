"""Error taxonomy for context bootstrap, site registration and transport.

Every error carries a stable ``code`` so callers and log pipelines can
branch on it without string matching the message.
"""

from __future__ import annotations

from typing import Any, Optional


class ContextError(Exception):
    """Base class for all portal_context errors."""

    code: str = "CONTEXT_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


# =============================================================================
# BOOTSTRAP
# =============================================================================


class NotInitialized(ContextError):
    """Context accessed before the first successful initialize()."""

    code = "NOT_INITIALIZED"


# =============================================================================
# SITE REGISTRY
# =============================================================================


class SiteError(ContextError):
    """Base for secondary-site registration errors."""

    code = "SITE_ERROR"

    def __init__(self, message: str, *, site_url: str, code: Optional[str] = None):
        self.site_url = site_url
        super().__init__(message, code=code)


class AlreadyConnected(SiteError):
    code = "ALREADY_CONNECTED"


class AliasInUse(SiteError):
    code = "ALIAS_IN_USE"

    def __init__(self, alias: str, bound_url: str):
        self.alias = alias
        super().__init__(
            f"Alias '{alias}' is already in use for site: {bound_url}",
            site_url=bound_url,
        )


class AccessDenied(SiteError):
    code = "ACCESS_DENIED"


class SiteNotFound(SiteError):
    code = "SITE_NOT_FOUND"


class ConnectionFailed(SiteError):
    code = "CONNECTION_FAILED"


class NotConnected(SiteError):
    code = "NOT_CONNECTED"


# =============================================================================
# TRANSPORT
# =============================================================================


class NetworkError(ContextError):
    """Network-level failure (DNS, connect, read, reset)."""

    code = "NETWORK_ERROR"

    def __init__(self, message: str, *, url: str = "", code: Optional[str] = None):
        self.url = url
        super().__init__(message, code=code)


class RequestTimeout(NetworkError):
    """An attempt did not complete within its timeout."""

    code = "REQUEST_TIMEOUT"

    def __init__(self, url: str, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"Request timeout after {int(timeout_ms)}ms", url=url)


class HttpError(ContextError):
    """Non-2xx HTTP response."""

    code = "HTTP_ERROR"

    def __init__(
        self,
        status: int,
        url: str,
        *,
        body: Any = None,
        headers: Optional[dict] = None,
    ):
        self.status = status
        self.url = url
        self.body = body
        self.headers = headers or {}
        super().__init__(f"HTTP {status} from {url}")


class TransientHttpError(HttpError):
    """5xx or 429: retried by the transport until the budget is exhausted."""

    code = "TRANSIENT_HTTP_ERROR"


class TerminalHttpError(HttpError):
    """4xx other than 429: surfaced immediately, never retried."""

    code = "TERMINAL_HTTP_ERROR"


def is_transient(error: BaseException) -> bool:
    """Classify an attempt failure as retryable."""
    return isinstance(error, (NetworkError, TransientHttpError))


__all__ = [
    "ContextError",
    "NotInitialized",
    "SiteError",
    "AlreadyConnected",
    "AliasInUse",
    "AccessDenied",
    "SiteNotFound",
    "ConnectionFailed",
    "NotConnected",
    "NetworkError",
    "RequestTimeout",
    "HttpError",
    "TransientHttpError",
    "TerminalHttpError",
    "is_transient",
]
