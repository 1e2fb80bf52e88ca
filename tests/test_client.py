"""Tests for the HTTP client and endpoint bindings (httpx.MockTransport)."""

import json

import httpx
import pytest

from app.connectors.gsc.client import SearchConsoleAPIError, SearchConsoleClient
from app.connectors.gsc.endpoints import SearchConsoleEndpoints, site_path


def _endpoints(handler) -> SearchConsoleEndpoints:
    client = SearchConsoleClient(access_token="tok", transport=httpx.MockTransport(handler))
    return SearchConsoleEndpoints(client)


def test_site_path_preserves_both_property_forms():
    assert site_path("https://example.com/") == "https%3A%2F%2Fexample.com%2F"
    assert site_path("sc-domain:example.com") == "sc-domain%3Aexample.com"


class TestListSites:
    @pytest.mark.asyncio
    async def test_returns_site_entries(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/webmasters/v3/sites"
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(
                200,
                json={
                    "siteEntry": [
                        {"siteUrl": "https://example.com/", "permissionLevel": "siteOwner"},
                        {"siteUrl": "sc-domain:example.org", "permissionLevel": "siteFullUser"},
                    ]
                },
            )

        sites = await _endpoints(handler).list_sites()
        assert [s.siteUrl for s in sites] == ["https://example.com/", "sc-domain:example.org"]

    @pytest.mark.asyncio
    async def test_missing_site_entry_is_an_error(self):
        endpoints = _endpoints(lambda request: httpx.Response(200, json={}))
        with pytest.raises(SearchConsoleAPIError, match="siteEntry"):
            await endpoints.list_sites()


class TestQueryRows:
    @pytest.mark.asyncio
    async def test_posts_body_to_encoded_site(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.raw_path.decode()
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "rows": [
                        {"keys": ["/a"], "clicks": 3, "impressions": 40, "ctr": 0.075, "position": 2.2}
                    ],
                    "responseAggregationType": "byPage",
                },
            )

        body = {"startDate": "2024-03-01", "endDate": "2024-03-10", "rowLimit": 100, "startRow": 0}
        rows = await _endpoints(handler).query_rows("sc-domain:example.com", body)

        assert seen["path"] == "/webmasters/v3/sites/sc-domain%3Aexample.com/searchAnalytics/query"
        assert seen["body"] == body
        assert rows[0].keys == ("/a",)
        assert rows[0].clicks == 3

    @pytest.mark.asyncio
    async def test_missing_rows_means_no_data(self):
        endpoints = _endpoints(
            lambda request: httpx.Response(200, json={"responseAggregationType": "auto"})
        )
        assert await endpoints.query_rows("https://example.com/", {}) == []

    @pytest.mark.asyncio
    async def test_http_error_carries_api_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403,
                json={"error": {"code": 403, "message": "User does not have sufficient permission"}},
            )

        with pytest.raises(SearchConsoleAPIError) as exc:
            await _endpoints(handler).query_rows("https://example.com/", {})
        assert exc.value.status_code == 403
        assert "sufficient permission" in str(exc.value)

    @pytest.mark.asyncio
    async def test_oauth_style_string_error_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_token"})

        with pytest.raises(SearchConsoleAPIError, match="invalid_token") as exc:
            await _endpoints(handler).query_rows("https://example.com/", {})
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_json_content_type_with_html_body_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                500,
                headers={"content-type": "application/json; charset=UTF-8"},
                content=b"<html><body>Internal Server Error</body></html>",
            )

        with pytest.raises(SearchConsoleAPIError) as exc:
            await _endpoints(handler).query_rows("https://example.com/", {})
        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(SearchConsoleAPIError, match="Connection failed"):
            await _endpoints(handler).query_rows("https://example.com/", {})

    @pytest.mark.asyncio
    async def test_malformed_row_is_an_error(self):
        endpoints = _endpoints(
            lambda request: httpx.Response(200, json={"rows": [{"keys": ["/a"], "clicks": -1}]})
        )
        with pytest.raises(SearchConsoleAPIError, match="malformed row"):
            await endpoints.query_rows("https://example.com/", {})


class TestInspectUrl:
    @pytest.mark.asyncio
    async def test_sends_language_code_when_given(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"inspectionResult": {"inspectionResultLink": "x"}})

        result = await _endpoints(handler).inspect_url(
            "sc-domain:example.com", "https://example.com/a", "en-US"
        )

        assert seen["url"].endswith("/v1/urlInspection/index:inspect")
        assert seen["body"] == {
            "inspectionUrl": "https://example.com/a",
            "siteUrl": "sc-domain:example.com",
            "languageCode": "en-US",
        }
        assert result == {"inspectionResultLink": "x"}

    @pytest.mark.asyncio
    async def test_missing_inspection_result(self):
        endpoints = _endpoints(lambda request: httpx.Response(200, json={}))
        with pytest.raises(SearchConsoleAPIError, match="inspectionResult"):
            await endpoints.inspect_url("https://example.com/", "https://example.com/a")
