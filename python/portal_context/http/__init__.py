"""Resilient HTTP transport: path selection, retry/backoff, timeouts."""

from portal_context.http.transport import HttpTransport, backoff_delay_ms, parse_body
from portal_context.http.types import (
    HttpResponse,
    RequestOptions,
    TransportPath,
    sanitize_url,
)

__all__ = [
    "HttpTransport",
    "backoff_delay_ms",
    "parse_body",
    "HttpResponse",
    "RequestOptions",
    "TransportPath",
    "sanitize_url",
]
