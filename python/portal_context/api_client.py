"""ApiClient - site-scoped handle onto the remote REST API.

All handles share one HttpTransport. A handle may carry a CacheBehavior;
`using()` derives a sibling handle with a different behavior, which is
how the cached and pessimistic tiers of a context are produced.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from portal_context.cache import CacheBehavior
from portal_context.http import HttpTransport, RequestOptions

API_SEGMENT = "_api"


def request_url(url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """`url` with `params` merged into any query string it already carries."""
    if not params:
        return url
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((str(k), str(v)) for k, v in params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


class ApiClient:
    """Remote API client for one site.

    Args:
        base_url: Absolute URL of the site (web) this client addresses
        transport: Shared transport
        cache: Optional cache behavior applied to GET requests
    """

    def __init__(
        self,
        base_url: str,
        transport: HttpTransport,
        *,
        cache: Optional[CacheBehavior] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._cache = cache

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def cache(self) -> Optional[CacheBehavior]:
        return self._cache

    def using(self, behavior: Optional[CacheBehavior]) -> "ApiClient":
        """New handle on the same site and transport with `behavior` attached."""
        return ApiClient(self._base_url, self._transport, cache=behavior)

    def api_url(self, path: str) -> str:
        """Resolve `path` against the site's API root. Absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{API_SEGMENT}/{path.lstrip('/')}"

    async def get_json(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Any:
        url = self.api_url(path)
        opts = RequestOptions(params=params, **options)

        async def load() -> Any:
            response = await self._transport.request("GET", url, options=opts)
            return response.data

        if self._cache is None:
            return await load()
        return await self._cache.fetch(request_url(url, params), load)

    async def post_json(self, path: str, data: Any = None, **options: Any) -> Any:
        url = self.api_url(path)
        response = await self._transport.request(
            "POST", url, data=data, options=RequestOptions(**options)
        )
        return response.data

    async def web(self, *fields: str) -> Any:
        """Read the site's web resource, optionally selecting `fields`."""
        params = {"$select": ",".join(fields)} if fields else None
        return await self.get_json("web", params=params)

    def __repr__(self) -> str:
        strategy = self._cache.strategy.value if self._cache else "none"
        return f"ApiClient(base_url={self._base_url!r}, cache={strategy})"


__all__ = ["ApiClient", "request_url"]
