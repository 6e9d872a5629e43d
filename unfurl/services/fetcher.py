import logging
from dataclasses import dataclass, field

import httpx

from unfurl.core.exceptions import FetchError
from unfurl.schemas.unfurl import UnfurlOptions

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html, application/xhtml+xml"


@dataclass
class FetchedPage:
    url: str  # final URL after redirects
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> str | None:
        return self.headers.get("content-length")


def build_client(
    options: UnfurlOptions,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client shared by the page and oEmbed fetches of one unfurl."""
    headers = {"User-Agent": options.agent}
    if not options.compress:
        headers["Accept-Encoding"] = "identity"

    kwargs = {}
    if transport is not None:
        kwargs["transport"] = transport

    return httpx.AsyncClient(
        headers=headers,
        follow_redirects=True,
        max_redirects=options.follow,
        timeout=options.timeout_seconds,
        **kwargs,
    )


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    options: UnfurlOptions,
    accept: str = HTML_ACCEPT,
) -> FetchedPage:
    """GET ``url`` and buffer the body, enforcing the size cap.

    Raises FetchError for timeouts, redirect overflow, oversize bodies and
    any other transport failure.
    """
    try:
        async with client.stream("GET", url, headers={"Accept": accept}) as response:
            chunks = []
            received = 0
            # with compression disabled the body is read as sent on the wire
            stream = response.aiter_bytes() if options.compress else response.aiter_raw()
            async for chunk in stream:
                received += len(chunk)
                if options.size and received > options.size:
                    raise FetchError(
                        url,
                        f"Content size at {url} over limit: {options.size}",
                        FetchError.MAX_SIZE_EXCEEDED,
                    )
                chunks.append(chunk)

            resp_headers = {k.lower(): v for k, v in response.headers.items()}
            return FetchedPage(
                url=str(response.url),
                status_code=response.status_code,
                headers=resp_headers,
                body=b"".join(chunks),
            )
    except httpx.TimeoutException as e:
        raise FetchError(url, f"Timed out fetching {url}: {e}", FetchError.TIMEOUT) from e
    except httpx.TooManyRedirects as e:
        raise FetchError(
            url,
            f"Maximum redirect reached at {url} (follow={options.follow})",
            FetchError.TOO_MANY_REDIRECTS,
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, f"Failed to fetch {url}: {e}", FetchError.NETWORK_ERROR) from e
