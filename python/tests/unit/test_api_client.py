"""Unit tests for ApiClient.

Tests:
- URL resolution against the site API root
- GET/POST through the shared transport
- Cached handles serve repeat reads; POSTs and plain handles never cache
- using() derives sibling handles
"""

import pytest

from fixtures.http import WEB_PAYLOAD, ScriptedHandler
from portal_context.api_client import ApiClient, request_url
from portal_context.cache import CacheStrategyFactory
from portal_context.http import HttpTransport
from portal_context.protocols import CacheStrategy

SITE = "https://tenant.example.com/sites/portal"


@pytest.fixture
def handler():
    return ScriptedHandler(default=(200, WEB_PAYLOAD))


@pytest.fixture
async def transport(platform, mock_logger, handler):
    transport = HttpTransport(platform, mock_logger, retries=0, client=handler.client())
    yield transport
    await transport.aclose()


class TestUrls:
    def test_trailing_slash_stripped(self, transport):
        assert ApiClient(SITE + "/", transport).base_url == SITE

    def test_api_url(self, transport):
        client = ApiClient(SITE, transport)

        assert client.api_url("web/lists") == f"{SITE}/_api/web/lists"
        assert client.api_url("/web") == f"{SITE}/_api/web"

    def test_absolute_url_passthrough(self, transport):
        client = ApiClient(SITE, transport)
        assert client.api_url("https://other.example.com/x") == "https://other.example.com/x"


class TestRequests:
    async def test_get_json_returns_body(self, transport, handler):
        client = ApiClient(SITE, transport)

        data = await client.get_json("web")

        assert data == WEB_PAYLOAD
        assert handler.last_request.method == "GET"
        assert str(handler.last_request.url) == f"{SITE}/_api/web"

    async def test_web_selects_fields(self, transport, handler):
        client = ApiClient(SITE, transport)

        await client.web("Title", "Id")

        assert handler.last_request.url.params["$select"] == "Title,Id"

    async def test_post_json(self, transport, handler):
        handler.push((201, {"Id": 7}))
        client = ApiClient(SITE, transport)

        data = await client.post_json("web/lists/items", {"Title": "New"})

        assert data == {"Id": 7}
        assert handler.last_request.method == "POST"


class TestCaching:
    def _cached(self, transport):
        behavior = CacheStrategyFactory().create_behavior(CacheStrategy.MEMORY, 60_000)
        return ApiClient(SITE, transport).using(behavior)

    async def test_cached_get_served_once(self, transport, handler):
        client = self._cached(transport)

        first = await client.get_json("web/lists")
        second = await client.get_json("web/lists")

        assert first == second
        assert handler.count == 1

    async def test_params_merge_with_existing_query(self, transport, handler):
        client = self._cached(transport)

        await client.get_json("web/lists?b=2", params={"a": "1"})
        await client.get_json("web/lists?a=1", params={"b": "2"})

        assert handler.count == 1

    def test_request_url_merges_query(self):
        assert request_url(f"{SITE}/_api/web?b=2", {"a": 1}) == f"{SITE}/_api/web?b=2&a=1"
        assert request_url(f"{SITE}/_api/web", None) == f"{SITE}/_api/web"

    async def test_params_part_of_key(self, transport, handler):
        client = self._cached(transport)

        await client.get_json("web/lists", params={"$top": 1})
        await client.get_json("web/lists", params={"$top": 2})
        await client.get_json("web/lists", params={"$top": 1})

        assert handler.count == 2

    async def test_post_never_cached(self, transport, handler):
        client = self._cached(transport)

        await client.post_json("web/lists", {})
        await client.post_json("web/lists", {})

        assert handler.count == 2

    async def test_plain_handle_not_cached(self, transport, handler):
        client = ApiClient(SITE, transport)

        await client.get_json("web")
        await client.get_json("web")

        assert handler.count == 2

    def test_using_shares_transport(self, transport):
        plain = ApiClient(SITE, transport)
        behavior = CacheStrategyFactory().create_behavior(CacheStrategy.PESSIMISTIC)

        derived = plain.using(behavior)

        assert derived is not plain
        assert derived.transport is transport
        assert derived.base_url == plain.base_url
        assert derived.cache is behavior
        assert plain.cache is None
