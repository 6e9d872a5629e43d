"""oEmbed discovery follow-up: fetch the linked endpoint and flatten its payload.

Providers answer with either JSON or a small XML document. Both are turned
into a flat mapping, namespaced with ``oEmbed:`` and filtered to the keys the
schema knows about. Any failure here is logged and swallowed; the page's own
metadata is always enough to build a result.
"""

import json
import logging
import re
from html.parser import HTMLParser

import httpx

from unfurl.core.exceptions import UnfurlError
from unfurl.core.metrics import oembed_fetches_total
from unfurl.schemas.unfurl import UnfurlOptions
from unfurl.services.fetcher import fetch_page
from unfurl.services.head_scanner import OEMBED_JSON, OEMBED_XML, MetadataPair, OEmbedLink
from unfurl.services.metadata_schema import KEYS, OEMBED_PREFIX
from unfurl.utils.urls import resolve_url

logger = logging.getLogger(__name__)

_JSON_CONTENT_RE = re.compile(r"application/json", re.I)
_XML_CONTENT_RE = re.compile(r"(text|application)/xml", re.I)


class _OEmbedXMLParser(HTMLParser):
    """Single pass over an oEmbed XML document.

    Top-level children of ``<oembed>`` become ``{tag: trimmed text}``. Whatever
    sits inside ``<html>`` is reassembled as markup under the ``html`` key.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.result: dict[str, str] = {}
        self._in_html = False
        self._markup: list[str] = []
        self._text: list[str] = []

    def handle_starttag(self, tag, attrs):
        if self._in_html:
            self._markup.append("".join(self._text))
            self._text = []
            rendered = " ".join(f'{k}="{v}"' if v else k for k, v in attrs)
            self._markup.append(f"<{tag} {rendered}>" if rendered else f"<{tag}>")
            return

        if tag == "html":
            self._in_html = True
            self._markup = []
        self._text = []

    def handle_endtag(self, tag):
        if tag == "oembed":
            return

        if tag == "html" and self._in_html:
            self._markup.append("".join(self._text))
            self.result["html"] = "".join(self._markup).strip()
            self._in_html = False
            self._text = []
            return

        if self._in_html:
            self._markup.append("".join(self._text))
            self._markup.append(f"</{tag}>")
            self._text = []
            return

        self.result[tag] = "".join(self._text).strip()
        self._text = []

    def handle_data(self, data):
        self._text.append(data)


def parse_oembed_xml(data: str) -> dict[str, str]:
    parser = _OEmbedXMLParser()
    parser.feed(data)
    parser.close()
    return parser.result


def normalize_payload(link: OEmbedLink, content_type: str, body: str) -> dict | None:
    """Flatten an oEmbed response body, or return None if it doesn't match the link type."""
    if link.type == OEMBED_JSON and _JSON_CONTENT_RE.search(content_type):
        data = json.loads(body)
        return data if isinstance(data, dict) else None
    if link.type == OEMBED_XML and _XML_CONTENT_RE.search(content_type):
        return parse_oembed_xml(body)
    return None


def to_metadata_pairs(data: dict) -> list[MetadataPair]:
    """Namespace payload keys with ``oEmbed:``; keep only schema keys with a value."""
    pairs = []
    for key, value in data.items():
        namespaced = f"{OEMBED_PREFIX}{key}"
        if value is not None and namespaced in KEYS:
            pairs.append((namespaced, value))
    return pairs


async def fetch_oembed(
    client: httpx.AsyncClient,
    link: OEmbedLink,
    base_url: str,
    options: UnfurlOptions,
) -> list[MetadataPair]:
    """Fetch the discovered oEmbed endpoint; returns [] on any failure."""
    target = resolve_url(base_url, link.href)
    accept = "application/json" if link.is_json else "text/xml"

    try:
        page = await fetch_page(client, target, options, accept=accept)
        if not 200 <= page.status_code < 300:
            logger.warning(f"oEmbed endpoint {target} returned status {page.status_code}")
            oembed_fetches_total.labels(status="http_error").inc()
            return []

        data = normalize_payload(
            link, page.content_type or "", page.body.decode("utf-8", errors="replace")
        )
    except UnfurlError as e:
        logger.warning(f"oEmbed fetch failed for {target}: {e.code} {e.message}")
        oembed_fetches_total.labels(status="fetch_error").inc()
        return []
    except ValueError as e:
        logger.warning(f"oEmbed payload from {target} could not be parsed: {e}")
        oembed_fetches_total.labels(status="parse_error").inc()
        return []

    if not data:
        logger.debug(f"oEmbed endpoint {target} returned no usable data ({page.content_type})")
        oembed_fetches_total.labels(status="empty").inc()
        return []

    oembed_fetches_total.labels(status="success").inc()
    return to_metadata_pairs(data)
