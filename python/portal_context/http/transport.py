"""HttpTransport - resilient request execution over httpx.

Per request:
1. Select the execution path once (token / platform-native / generic).
2. Run up to ``retries + 1`` strictly sequential attempts, each raced
   against its timeout.
3. Retry only transient failures (network errors, timeouts, 5xx, 429)
   with capped exponential backoff plus jitter; any other 4xx aborts.
4. Return the parsed response tagged with the overall duration, or
   re-raise the last error after logging it.

Usage:
    transport = HttpTransport(platform, logger, timeout_ms=30_000, retries=2)
    response = await transport.get("https://api.example.com/items")
    await transport.aclose()
"""

from __future__ import annotations

import asyncio
import json
import random
import time
import uuid
from dataclasses import replace
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from portal_context.config.constants import (
    BACKOFF_BASE_MS,
    BACKOFF_CAP_MS,
    BACKOFF_JITTER_MS,
    CORRELATION_HEADER,
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT_MS,
    FUNCTION_KEY_HEADER,
    IDEMPOTENCY_HEADER,
    PLATFORM_API_SEGMENT,
)
from portal_context.errors import (
    NetworkError,
    RequestTimeout,
    TerminalHttpError,
    TransientHttpError,
    is_transient,
)
from portal_context.http.types import HttpResponse, RequestOptions, TransportPath, sanitize_url
from portal_context.protocols import LoggerProtocol, PlatformHandle


def backoff_delay_ms(attempt: int, rng: Optional[random.Random] = None) -> float:
    """Delay after failed attempt `attempt` (1-based).

    min(200 * 2^(attempt-1) + jitter[0, 100], 2000)
    """
    jitter = (rng or random).uniform(0, BACKOFF_JITTER_MS)
    return min(BACKOFF_BASE_MS * (2 ** (attempt - 1)) + jitter, BACKOFF_CAP_MS)


def parse_body(text: str) -> Any:
    """JSON when possible, raw text otherwise, None for an empty body."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class HttpTransport:
    """Retrying HTTP executor shared by every API client handle.

    Args:
        platform: Host platform handle (auth material, primary site URL)
        logger: Logger for attempt/outcome entries
        timeout_ms: Default per-attempt timeout
        retries: Retries after the first attempt for transient failures
        enable_auth: Allow the token-authenticated path
        client: httpx.AsyncClient to use; one is created (and owned) if None
        correlation_id: Value of the correlation header; random if None
        rng: Random source for backoff jitter
    """

    def __init__(
        self,
        platform: PlatformHandle,
        logger: LoggerProtocol,
        *,
        timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS,
        retries: int = DEFAULT_HTTP_RETRIES,
        enable_auth: bool = True,
        client: Optional[httpx.AsyncClient] = None,
        correlation_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self._platform = platform
        self._logger = logger
        self._timeout_ms = timeout_ms
        self._retries = retries
        self._enable_auth = enable_auth
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_ms / 1000)
        self._correlation_id = correlation_id or str(uuid.uuid4())
        self._rng = rng or random.Random()
        self._closing = asyncio.Event()
        self._platform_host = self._host_of(getattr(platform, "site_url", ""))

    # ─── Properties ───

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def retries(self) -> int:
        return self._retries

    @property
    def closed(self) -> bool:
        return self._closing.is_set()

    # ─── Public API ───

    async def get(self, url: str, **options: Any) -> HttpResponse:
        return await self.request("GET", url, options=RequestOptions(**options))

    async def post(self, url: str, data: Any = None, **options: Any) -> HttpResponse:
        return await self.request("POST", url, data=data, options=RequestOptions(**options))

    async def call_function(
        self,
        url: str,
        *,
        method: str = "POST",
        data: Any = None,
        **options: Any,
    ) -> HttpResponse:
        """Invoke a remote function endpoint (function key and/or token auth)."""
        opts = RequestOptions(**options)
        self._logger.info(
            "Calling remote function",
            method=method,
            url=sanitize_url(url),
            has_auth=opts.use_auth,
        )
        return await self.request(method, url, data=data, options=opts)

    async def trigger_flow(
        self,
        url: str,
        *,
        data: Any = None,
        idempotency_key: Optional[str] = None,
        **options: Any,
    ) -> HttpResponse:
        """POST to a webhook-style flow endpoint.

        When `idempotency_key` is given it is sent as a request-id header
        so the receiver can deduplicate retried triggers.
        """
        headers: Dict[str, str] = dict(options.pop("headers", None) or {})
        if idempotency_key:
            headers[IDEMPOTENCY_HEADER] = idempotency_key
        opts = RequestOptions(headers=headers, **options)
        self._logger.info(
            "Triggering flow",
            url=sanitize_url(url),
            has_idempotency=bool(idempotency_key),
            has_auth=opts.use_auth,
        )
        return await self.request("POST", url, data=data, options=opts)

    async def request(
        self,
        method: str,
        url: str,
        *,
        data: Any = None,
        options: Optional[RequestOptions] = None,
    ) -> HttpResponse:
        """Execute with retry. Raises the last error once the budget is spent."""
        options = options or RequestOptions()
        safe_url = sanitize_url(url)
        if self.closed:
            raise NetworkError("Transport is closed", url=safe_url, code="TRANSPORT_CLOSED")

        path = self.select_path(url, options)
        max_attempts = self._retries + 1
        started = time.perf_counter()
        attempt = 0
        last_error: Optional[BaseException] = None

        while attempt < max_attempts:
            attempt += 1
            try:
                response = await self._attempt(method, url, data, options, path)
            except Exception as e:
                last_error = e
                if not is_transient(e):
                    break
                if attempt < max_attempts:
                    delay = backoff_delay_ms(attempt, self._rng)
                    self._logger.warning(
                        f"HTTP {method} failed, retrying",
                        url=safe_url,
                        path=path.value,
                        attempt=attempt,
                        delay_ms=round(delay),
                        error=str(e),
                    )
                    if not await self._backoff(delay):
                        self._logger.warning(
                            "Transport closed during backoff",
                            url=safe_url,
                            attempt=attempt,
                        )
                        break
                continue

            duration_ms = (time.perf_counter() - started) * 1000
            self._logger.info(
                f"HTTP {method} completed",
                url=safe_url,
                path=path.value,
                status=response.status,
                duration_ms=round(duration_ms),
                attempt=attempt,
            )
            return replace(response, duration_ms=duration_ms, attempts=attempt)

        duration_ms = (time.perf_counter() - started) * 1000
        self._logger.error(
            f"HTTP {method} failed after {attempt} attempts",
            error=last_error,
            url=safe_url,
            path=path.value,
            duration_ms=round(duration_ms),
        )
        if last_error is None:
            raise RuntimeError(f"HTTP {method} made no attempts: {safe_url}")
        raise last_error

    def select_path(self, url: str, options: RequestOptions) -> TransportPath:
        if self._enable_auth and options.use_auth and options.resource:
            return TransportPath.TOKEN
        if self.is_platform_url(url):
            return TransportPath.PLATFORM
        return TransportPath.GENERIC

    def is_platform_url(self, url: str) -> bool:
        lowered = url.lower()
        if PLATFORM_API_SEGMENT in lowered:
            return True
        host = self._host_of(url)
        return bool(host) and host == self._platform_host

    # ─── Lifecycle ───

    def close(self) -> None:
        """Refuse new requests and wake any retry sleeping in backoff."""
        self._closing.set()

    async def aclose(self) -> None:
        self.close()
        if self._owns_client:
            await self._client.aclose()

    # ─── Internals ───

    async def _attempt(
        self,
        method: str,
        url: str,
        data: Any,
        options: RequestOptions,
        path: TransportPath,
    ) -> HttpResponse:
        headers = await self._build_headers(options, path)
        timeout_ms = options.timeout_ms or self._timeout_ms
        safe_url = sanitize_url(url)

        try:
            raw = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    json=data,
                    params=options.params,
                    headers=headers,
                    timeout=timeout_ms / 1000,
                ),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeout(safe_url, timeout_ms) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Network error: {e}", url=safe_url) from e

        body = parse_body(raw.text)
        response_headers = {k.lower(): v for k, v in raw.headers.items()}
        status = raw.status_code

        if status >= 500 or status == 429:
            raise TransientHttpError(status, safe_url, body=body, headers=response_headers)
        if status >= 400:
            raise TerminalHttpError(status, safe_url, body=body, headers=response_headers)

        return HttpResponse(
            data=body,
            status=status,
            ok=200 <= status < 300,
            headers=response_headers,
            url=safe_url,
        )

    async def _build_headers(
        self,
        options: RequestOptions,
        path: TransportPath,
    ) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            CORRELATION_HEADER: self._correlation_id,
        }
        if path == TransportPath.TOKEN:
            token = await self._platform.get_access_token(options.resource)
            headers["Authorization"] = f"Bearer {token}"
        elif path == TransportPath.PLATFORM:
            headers.update(self._platform.platform_headers())

        headers.update(options.headers)
        if options.function_key:
            headers[FUNCTION_KEY_HEADER] = options.function_key
        return headers

    async def _backoff(self, delay_ms: float) -> bool:
        """Sleep unless the transport closes first. False means closed."""
        try:
            await asyncio.wait_for(self._closing.wait(), timeout=delay_ms / 1000)
        except asyncio.TimeoutError:
            return True
        return False

    @staticmethod
    def _host_of(url: str) -> str:
        try:
            return (urlsplit(url).hostname or "").lower()
        except (ValueError, AttributeError):
            return ""

    def __repr__(self) -> str:
        return (
            f"HttpTransport(timeout_ms={self._timeout_ms}, retries={self._retries}, "
            f"closed={self.closed})"
        )


__all__ = [
    "HttpTransport",
    "backoff_delay_ms",
    "parse_body",
]
