"""Shared fixtures: an ASGI test client and a fake website for httpx.MockTransport."""

from collections.abc import Callable

import httpx
import pytest_asyncio

from unfurl.main import app

PAGE_URL = "https://example.com/blog/post"

HTML_HEADERS = {"content-type": "text/html; charset=utf-8"}

Route = Callable[[httpx.Request], httpx.Response]


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class FakeSite:
    """URL -> route table behind an httpx.MockTransport.

    Every requested URL is recorded so tests can assert what was (not) fetched.
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, Route]):
        self.routes = routes
        self.requested: list[str] = []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        self.requests.append(request)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, headers=HTML_HEADERS, content=b"<html></html>")
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def html_page(html: str, status_code: int = 200, headers: dict | None = None) -> Route:
    """Route answering with a fresh HTML response on every request."""
    body = html.encode("utf-8")

    def route(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, headers=headers or HTML_HEADERS, content=body)

    return route


def json_page(data, content_type: str = "application/json") -> Route:
    def route(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": content_type}, json=data)

    return route
