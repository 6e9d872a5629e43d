"""Integration tests for the /v1/unfurl endpoint."""

import asyncio
import math
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from unfurl.core.exceptions import FetchError, UnexpectedContentTypeError
from unfurl.schemas.unfurl import UnfurlOptions


class TestUnfurlEndpoint:
    @pytest.mark.asyncio
    async def test_success(self, client: AsyncClient):
        """POST /v1/unfurl returns the nested metadata record."""
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.return_value = {
                "title": "Example",
                "open_graph": {"images": [{"url": "https://example.com/a.png", "width": 10}]},
            }

            resp = await client.post("/v1/unfurl", json={"url": "https://example.com"})

            assert resp.status_code == 200
            data = resp.json()
            assert data["success"] is True
            assert data["data"]["title"] == "Example"
            assert data["data"]["open_graph"]["images"][0]["width"] == 10
            assert "error" not in data
            assert data["request_id"] == resp.headers["X-Request-ID"]
            mock_unfurl.assert_awaited_once_with("https://example.com", UnfurlOptions())

    @pytest.mark.asyncio
    async def test_url_without_scheme_gets_https(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.return_value = {}
            await client.post("/v1/unfurl", json={"url": "example.com/page"})
            assert mock_unfurl.await_args.args[0] == "https://example.com/page"

    @pytest.mark.asyncio
    async def test_options_forwarded(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.return_value = {}
            await client.post(
                "/v1/unfurl",
                json={"url": "https://example.com", "options": {"oembed": False, "timeout": 500}},
            )
            options = mock_unfurl.await_args.args[1]
            assert isinstance(options, UnfurlOptions)
            assert options.oembed is False
            assert options.timeout == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options", [{"bogus": 1}, {"timeout": -1}, {"oembed": "no"}, {"timeout": "5000"}]
    )
    async def test_bad_options_rejected_with_envelope(self, client: AsyncClient, options):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            resp = await client.post(
                "/v1/unfurl",
                json={"url": "https://example.com", "options": options},
                headers={"X-Request-ID": "req-42"},
            )

            assert resp.status_code == 400
            data = resp.json()
            assert data["success"] is False
            assert data["error_code"] == "BAD_OPTIONS"
            assert data["request_id"] == "req-42"
            mock_unfurl.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nan_numbers_serialized_as_null(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.return_value = {
                "open_graph": {"images": [{"url": "https://example.com/a.png", "width": math.nan}]}
            }
            resp = await client.post("/v1/unfurl", json={"url": "https://example.com"})
            assert resp.status_code == 200
            assert resp.json()["data"]["open_graph"]["images"][0]["width"] is None


class TestUnfurlEndpointErrors:
    @pytest.mark.asyncio
    async def test_unexpected_content_type(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.side_effect = UnexpectedContentTypeError("application/pdf", "1024")
            resp = await client.post("/v1/unfurl", json={"url": "https://example.com/a.pdf"})

            assert resp.status_code == 422
            data = resp.json()
            assert data["success"] is False
            assert data["error_code"] == "EXPECTED_HTML"
            assert data["error_info"] == {
                "content_type": "application/pdf",
                "content_length": "1024",
            }

    @pytest.mark.asyncio
    async def test_fetch_error(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.side_effect = FetchError("https://example.com", "refused")
            resp = await client.post("/v1/unfurl", json={"url": "https://example.com"})

            assert resp.status_code == 502
            assert resp.json()["error_code"] == "NETWORK_ERROR"

    @pytest.mark.asyncio
    async def test_fetch_timeout(self, client: AsyncClient):
        with patch("unfurl.api.v1.unfurl.unfurl", new_callable=AsyncMock) as mock_unfurl:
            mock_unfurl.side_effect = FetchError(
                "https://example.com", "timed out", FetchError.TIMEOUT
            )
            resp = await client.post("/v1/unfurl", json={"url": "https://example.com"})
            assert resp.status_code == 504

    @pytest.mark.asyncio
    async def test_overall_budget_exceeded(self, client: AsyncClient):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        with (
            patch("unfurl.api.v1.unfurl.unfurl", side_effect=slow),
            patch("unfurl.api.v1.unfurl.settings.UNFURL_API_TIMEOUT", 0.01),
        ):
            resp = await client.post("/v1/unfurl", json={"url": "https://example.com"})
            assert resp.status_code == 504
            assert resp.json()["error_code"] == "TIMEOUT"
