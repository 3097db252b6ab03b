"""SiteConnectionRegistry - connections to secondary sites.

A site is registered only after a validating round-trip succeeds:

    normalize -> check+reserve (sync) -> probe (await) -> tiers -> insert

The presence check and the reservation happen in the same synchronous
turn, so a concurrent add() of the same URL or alias sees the reservation
and fails instead of racing the probe.

Usage:
    await ctx.sites.add("https://tenant.example.com/sites/hr", {"alias": "hr"})
    hr = ctx.sites.get("hr")
    items = await hr.api_client_cached.get_json("web/lists")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set, Union
from urllib.parse import urlsplit

from portal_context.api_client import ApiClient
from portal_context.cache import CacheStrategyFactory
from portal_context.config import (
    CacheConfig,
    SiteConfig,
    coerce_site_config,
    resolve_cache_config,
)
from portal_context.config.constants import SITE_PROBE_FIELDS
from portal_context.context import build_client_tiers
from portal_context.errors import (
    AccessDenied,
    AlreadyConnected,
    AliasInUse,
    ConnectionFailed,
    HttpError,
    NetworkError,
    NotConnected,
    SiteNotFound,
)
from portal_context.http import HttpTransport
from portal_context.logging import ContextLogger


def normalize_site_url(url: str) -> str:
    """Registry key for a site: trailing slash stripped, lowercased."""
    return url.strip().rstrip("/").lower()


def normalize_alias(alias: str) -> str:
    return alias.strip().lower()


def site_name_from_url(url: str) -> str:
    """Last path segment of `url`, used as the default logger component."""
    try:
        segments = [s for s in urlsplit(url).path.split("/") if s]
    except ValueError:
        return "Site"
    return segments[-1] if segments else "Site"


@dataclass(frozen=True)
class SiteContext:
    """Client handles and identity metadata for one connected site."""

    site_url: str
    alias: Optional[str]
    api_client: ApiClient
    api_client_cached: ApiClient
    api_client_pessimistic: ApiClient
    web_title: str
    web_id: str
    web_server_relative_url: str
    web_absolute_url: str
    config: SiteConfig
    cache_config: CacheConfig
    logger: ContextLogger
    cache: CacheStrategyFactory


class SiteConnectionRegistry:
    """Registry of secondary sites keyed by normalized URL and alias.

    Args:
        transport: Shared transport (and authentication) of the primary context
        logger: Primary logger; site loggers are children of it
        primary_cache_config: Cache config inherited by sites without an override
    """

    def __init__(
        self,
        transport: HttpTransport,
        logger: ContextLogger,
        primary_cache_config: Optional[CacheConfig] = None,
    ):
        self._transport = transport
        self._logger = logger
        self._primary_cache_config = primary_cache_config
        self._sites: Dict[str, SiteContext] = {}
        self._aliases: Dict[str, str] = {}
        self._reserved_urls: Set[str] = set()
        self._reserved_aliases: Dict[str, str] = {}

    async def add(
        self,
        url: str,
        config: Union[SiteConfig, Mapping[str, Any], None] = None,
    ) -> SiteContext:
        """Probe and register a site.

        Raises:
            AlreadyConnected: URL already registered or being registered
            AliasInUse: alias bound to another site
            AccessDenied / SiteNotFound / NetworkError / ConnectionFailed:
                the probe failed; nothing is registered
        """
        site_config = coerce_site_config(config)
        normalized = normalize_site_url(url)
        alias_key = normalize_alias(site_config.alias) if site_config.alias else None

        self._reserve(url, normalized, alias_key)
        try:
            self._logger.info(
                f"Connecting to site: {normalized}",
                alias=alias_key,
                cache_strategy=site_config.cache.strategy,
            )
            try:
                site = await self._connect(normalized, alias_key, site_config)
            except Exception as e:
                self._logger.error(f"Failed to connect to site: {normalized}", error=e)
                raise

            self._sites[normalized] = site
            if alias_key:
                self._aliases[alias_key] = normalized
        finally:
            self._release(normalized, alias_key)

        self._logger.success(
            f"Connected to site: {site.web_title}",
            url=normalized,
            alias=alias_key,
            cache_strategy=site.cache_config.strategy.value,
        )
        return site

    def get(self, url_or_alias: str) -> SiteContext:
        """Resolve alias first, then normalized URL.

        Raises:
            NotConnected: nothing registered under that alias or URL
        """
        site = self._sites.get(self._resolve(url_or_alias))
        if site is None:
            raise NotConnected(
                f"Site not connected: {url_or_alias}. Call sites.add() first.",
                site_url=url_or_alias,
            )
        return site

    def remove(self, url_or_alias: str) -> None:
        """Drop a site and its alias. Unknown sites only log a warning."""
        normalized = self._resolve(url_or_alias)
        site = self._sites.pop(normalized, None)
        if site is None:
            self._logger.warning(
                f"Site not connected: {url_or_alias}. Nothing to remove.",
            )
            return

        if site.alias:
            self._aliases.pop(site.alias, None)
        site.cache.cleanup()
        self._logger.info(f"Disconnected from site: {normalized}", alias=site.alias)

    def list(self) -> List[str]:
        """Registered URLs (never aliases)."""
        return list(self._sites)

    def has(self, url_or_alias: str) -> bool:
        return self._resolve(url_or_alias) in self._sites

    def cleanup(self) -> None:
        for site in self._sites.values():
            site.cache.cleanup()
        self._sites.clear()
        self._aliases.clear()

    def __len__(self) -> int:
        return len(self._sites)

    # ─── Internals ───

    def _resolve(self, url_or_alias: str) -> str:
        alias_key = normalize_alias(url_or_alias)
        if alias_key in self._aliases:
            return self._aliases[alias_key]
        return normalize_site_url(url_or_alias)

    def _reserve(self, url: str, normalized: str, alias_key: Optional[str]) -> None:
        if normalized in self._sites or normalized in self._reserved_urls:
            raise AlreadyConnected(
                f"Site already connected: {url}. Use sites.get() to access it.",
                site_url=normalized,
            )
        if alias_key:
            bound = self._aliases.get(alias_key) or self._reserved_aliases.get(alias_key)
            if bound is not None and bound != normalized:
                raise AliasInUse(alias_key, bound)

        self._reserved_urls.add(normalized)
        if alias_key:
            self._reserved_aliases[alias_key] = normalized

    def _release(self, normalized: str, alias_key: Optional[str]) -> None:
        self._reserved_urls.discard(normalized)
        if alias_key and self._reserved_aliases.get(alias_key) == normalized:
            del self._reserved_aliases[alias_key]

    async def _connect(
        self,
        normalized: str,
        alias_key: Optional[str],
        config: SiteConfig,
    ) -> SiteContext:
        client = ApiClient(normalized, self._transport)
        web = await self._probe(client, normalized)

        cache_config = resolve_cache_config(config.cache, self._primary_cache_config)
        site_logger = self._logger.child(
            config.logger.prefix or site_name_from_url(normalized),
            enable_console=config.logger.enabled,
        )
        cache = CacheStrategyFactory(site_logger, default_ttl_ms=cache_config.ttl)
        tiers = build_client_tiers(client, cache_config, cache)

        return SiteContext(
            site_url=normalized,
            alias=alias_key,
            api_client=tiers.plain,
            api_client_cached=tiers.cached,
            api_client_pessimistic=tiers.pessimistic,
            web_title=str(web.get("Title") or ""),
            web_id=str(web.get("Id") or ""),
            web_server_relative_url=str(web.get("ServerRelativeUrl") or ""),
            web_absolute_url=str(web.get("Url") or normalized),
            config=config,
            cache_config=cache_config,
            logger=site_logger,
            cache=cache,
        )

    async def _probe(self, client: ApiClient, normalized: str) -> Dict[str, Any]:
        """Minimal identity read; classifies failures by kind."""
        try:
            data = await client.web(*SITE_PROBE_FIELDS)
        except HttpError as e:
            if e.status == 403:
                raise AccessDenied(
                    f"Access denied to site: {normalized}. "
                    "You may not have permission to access this site.",
                    site_url=normalized,
                ) from e
            if e.status == 404:
                raise SiteNotFound(
                    f"Site not found: {normalized}. Please check the URL and try again.",
                    site_url=normalized,
                ) from e
            raise ConnectionFailed(
                f"Failed to connect to site: {normalized}. Error: {e.message}",
                site_url=normalized,
            ) from e
        except NetworkError as e:
            raise NetworkError(
                f"Network error while connecting to site: {normalized}. {e.message}",
                url=normalized,
                code=e.code,
            ) from e
        except Exception as e:
            raise ConnectionFailed(
                f"Failed to connect to site: {normalized}. Error: {e}",
                site_url=normalized,
            ) from e

        if isinstance(data, dict):
            # Verbose OData responses wrap the payload in "d"
            return data.get("d", data) if isinstance(data.get("d"), dict) else data
        return {}


__all__ = [
    "SiteContext",
    "SiteConnectionRegistry",
    "normalize_site_url",
    "normalize_alias",
    "site_name_from_url",
]
