"""Request/response value types for HttpTransport."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit


class TransportPath(str, Enum):
    """Execution path chosen once per request, before the first attempt."""

    TOKEN = "token"
    PLATFORM = "platform"
    GENERIC = "generic"


@dataclass(frozen=True)
class RequestOptions:
    """Per-request options.

    Attributes:
        headers: Extra headers (override defaults)
        params: Query parameters
        timeout_ms: Per-attempt timeout; transport default when None
        use_auth: Opt into the token-authenticated path
        resource: Target resource identifier the token is requested for
        function_key: Function-key header for remote function endpoints
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    timeout_ms: Optional[int] = None
    use_auth: bool = False
    resource: Optional[str] = None
    function_key: Optional[str] = None


@dataclass(frozen=True)
class HttpResponse:
    """Parsed response.

    `duration_ms` covers the whole call including retries and backoff,
    not just the final attempt.
    """

    data: Any
    status: int
    ok: bool
    headers: Dict[str, str]
    duration_ms: float = 0.0
    attempts: int = 1
    url: str = ""


def sanitize_url(url: str) -> str:
    """scheme://host/path only: query strings may carry secrets."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "[invalid-url]"
    if not parts.scheme or not parts.netloc:
        return "[invalid-url]"
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


__all__ = [
    "TransportPath",
    "RequestOptions",
    "HttpResponse",
    "sanitize_url",
]
