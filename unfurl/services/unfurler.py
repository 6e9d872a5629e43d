import logging
import re
import time
from typing import Any

import httpx

from unfurl.core.exceptions import UnexpectedContentTypeError, UnfurlError
from unfurl.core.metrics import unfurl_duration_seconds, unfurl_requests_total
from unfurl.schemas.unfurl import UnfurlOptions, resolve_options
from unfurl.services.charset import decode_body
from unfurl.services.fetcher import build_client, fetch_page
from unfurl.services.head_scanner import scan_head
from unfurl.services.mapper import map_metadata
from unfurl.services.oembed import fetch_oembed

logger = logging.getLogger(__name__)

_HTML_CONTENT_RE = re.compile(r"text/html|application/xhtml\+xml", re.I)


async def unfurl(
    url: str,
    options: UnfurlOptions | dict[str, Any] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Fetch ``url`` and return its structured page metadata.

    Pipeline: fetch -> decode -> scan head -> (optional) oEmbed -> map.

    Options are validated before any network activity; a malformed options
    argument raises ConfigurationError. Failures fetching the page itself
    propagate as FetchError / UnexpectedContentTypeError, while oEmbed
    failures only drop the ``oEmbed`` section.
    """
    opts = resolve_options(options)
    start_time = time.time()

    try:
        async with build_client(opts, transport) as client:
            page = await fetch_page(client, url, opts)

            if not _HTML_CONTENT_RE.search(page.content_type or ""):
                raise UnexpectedContentTypeError(page.content_type, page.content_length)

            html = decode_body(page.body, page.content_type)
            scan = scan_head(
                html, url, oembed=opts.oembed, first_title_only=opts.first_title_only
            )

            pairs = list(scan.pairs)
            if opts.oembed and scan.oembed is not None:
                pairs.extend(await fetch_oembed(client, scan.oembed, url, opts))
    except UnfurlError as e:
        unfurl_requests_total.labels(status=e.code).inc()
        logger.info(f"Unfurl of {url} failed: {e.code} {e.message}")
        raise

    result = map_metadata(pairs, url)

    unfurl_requests_total.labels(status="success").inc()
    unfurl_duration_seconds.observe(time.time() - start_time)
    logger.debug(f"Unfurled {url} in {time.time() - start_time:.2f}s: {sorted(result)}")
    return result
