"""Concrete PlatformHandle for scripts and tests.

Embedding applications normally pass their own session object; anything
exposing ``site_url``, ``platform_headers()`` and ``get_access_token()``
satisfies the protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


@dataclass
class StaticPlatformHandle:
    """PlatformHandle backed by fixed values.

    Attributes:
        site_url: Absolute URL of the primary site
        headers: Headers sent on platform-native calls (cookies, digest...)
        tokens: Access tokens by resource identifier
        default_token: Token returned for resources missing from `tokens`
    """

    site_url: str
    headers: Dict[str, str] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    default_token: Optional[str] = None

    def platform_headers(self) -> Mapping[str, str]:
        return dict(self.headers)

    async def get_access_token(self, resource: str) -> str:
        token = self.tokens.get(resource, self.default_token)
        if token is None:
            raise LookupError(f"No access token configured for resource: {resource}")
        return token


__all__ = ["StaticPlatformHandle"]
