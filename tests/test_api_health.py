"""Integration tests for /, /health and /metrics endpoints."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from unfurl.middleware.request_id import accept_request_id


class TestLivenessEndpoint:
    @pytest.mark.asyncio
    async def test_liveness_returns_healthy(self, client: AsyncClient):
        """GET /health returns 200 with status healthy."""
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_unsafe_request_id_replaced(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "a b\"c"})
        rid = resp.headers["X-Request-ID"]
        assert rid != "a b\"c"
        assert len(rid) == 32

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        resp = await client.get("/")
        assert resp.json()["status"] == "running"
        assert resp.json()["unfurl"] == "/v1/unfurl"


class TestMetricsEndpoint:
    @pytest.mark.asyncio
    async def test_metrics_exposed(self, client: AsyncClient):
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        assert "unfurl_duration_seconds" in resp.text

    @pytest.mark.asyncio
    async def test_metrics_disabled(self, client: AsyncClient):
        with patch("unfurl.api.v1.health.settings.METRICS_ENABLED", False):
            resp = await client.get("/metrics")
        assert resp.status_code == 404


class TestAcceptRequestId:
    def test_safe_id_kept(self):
        assert accept_request_id("trace-01:abc.DEF_2") == "trace-01:abc.DEF_2"

    @pytest.mark.parametrize("value", [None, "", "x" * 129, "line\nbreak", "{json}"])
    def test_unsafe_or_missing_id_regenerated(self, value):
        rid = accept_request_id(value)
        assert rid != value
        assert len(rid) == 32
