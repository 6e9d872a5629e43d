"""Single-pass streaming scanner over the document head.

The scanner walks tag/text events from ``html.parser`` and emits an ordered
list of ``(key, value)`` metadata pairs. Per-document state lives in an
explicit ``ScanState`` record; the parser subclass only forwards events to
the step functions ``open_tag``, ``text`` and ``close_tag``, which mutate the
state and return the pairs they emit.

Scanning stops at ``</head>``: nothing in the body is looked at.
"""

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser

from unfurl.services.metadata_schema import KEYS
from unfurl.utils.urls import resolve_url

logger = logging.getLogger(__name__)

MetadataPair = tuple[str, object]

FEED_CHUNK_SIZE = 8192

TITLE_PENDING = "pending"
TITLE_ACCUMULATING = "accumulating"
TITLE_FINALIZED = "finalized"

OEMBED_JSON = "application/json+oembed"
OEMBED_XML = "text/xml+oembed"
OEMBED_TYPES = (OEMBED_JSON, OEMBED_XML)

FAVICON_RELS = ("shortcut icon", "icon")
DEFAULT_FAVICON = "/favicon.ico"

# emitted even when absent from the schema
ALWAYS_EMITTED = ("description", "keywords")


@dataclass(frozen=True)
class OEmbedLink:
    href: str
    type: str

    @property
    def is_json(self) -> bool:
        return self.type == OEMBED_JSON


@dataclass
class ScanState:
    base_url: str
    oembed: bool = True
    first_title_only: bool = True
    tag: str = ""
    title: str = TITLE_PENDING
    title_parts: list[str] = field(default_factory=list)
    favicon: str | None = None
    oembed_link: OEmbedLink | None = None
    done: bool = False


@dataclass
class ScanResult:
    pairs: list[MetadataPair]
    favicon: str | None
    oembed: OEmbedLink | None


def open_tag(state: ScanState, tag: str, attrs: dict[str, str]) -> list[MetadataPair]:
    if state.done:
        return []

    state.tag = tag
    pairs: list[MetadataPair] = []

    if tag == "title" and state.title != TITLE_FINALIZED:
        state.title = TITLE_ACCUMULATING
        state.title_parts = []

    href = attrs.get("href")
    rel = attrs.get("rel")

    if state.oembed and href and attrs.get("type") in OEMBED_TYPES:
        # JSON wins over XML; the first JSON link is kept
        if state.oembed_link is None or not state.oembed_link.is_json:
            state.oembed_link = OEmbedLink(href=href, type=attrs["type"])

    if state.favicon is None and href is not None and rel in FAVICON_RELS:
        state.favicon = resolve_url(state.base_url, href)
        pairs.append(("favicon", state.favicon))

    prop = attrs.get("name") or attrs.get("property") or rel
    val = attrs.get("content") or attrs.get("value")

    if prop in ALWAYS_EMITTED:
        pairs.append((prop, val or ""))
    elif prop and val and prop in KEYS:
        pairs.append((prop, val))

    return pairs


def in_title(state: ScanState) -> bool:
    return not state.done and state.tag == "title" and state.title == TITLE_ACCUMULATING


def text(state: ScanState, data: str) -> None:
    if in_title(state):
        state.title_parts.append(data)


def close_tag(state: ScanState, tag: str) -> list[MetadataPair]:
    if state.done:
        return []

    state.tag = ""
    pairs: list[MetadataPair] = []

    if tag == "title" and state.title == TITLE_ACCUMULATING:
        pairs.append(("title", "".join(state.title_parts)))
        state.title_parts = []
        state.title = TITLE_FINALIZED if state.first_title_only else TITLE_PENDING

    if tag == "head":
        state.done = True

    return pairs


def finish(state: ScanState) -> list[MetadataPair]:
    """Terminal step: fall back to /favicon.ico when no icon link was seen."""
    if state.favicon is not None:
        return []
    state.favicon = resolve_url(state.base_url, DEFAULT_FAVICON)
    return [("favicon", state.favicon)]


def _attr_dict(attrs: list[tuple[str, str | None]]) -> dict[str, str]:
    """First occurrence of an attribute wins; valueless attributes map to ''."""
    result: dict[str, str] = {}
    for name, value in attrs:
        if name not in result:
            result[name] = value if value is not None else ""
    return result


class _HeadParser(HTMLParser):
    def __init__(self, state: ScanState) -> None:
        super().__init__(convert_charrefs=True)
        self.state = state
        self.pairs: list[MetadataPair] = []

    # <title> content is text: tags inside it are kept verbatim, not parsed
    def handle_starttag(self, tag, attrs):
        if in_title(self.state) and tag != "title":
            text(self.state, self.get_starttag_text())
            return
        self.pairs.extend(open_tag(self.state, tag, _attr_dict(attrs)))

    def handle_startendtag(self, tag, attrs):
        if in_title(self.state):
            text(self.state, self.get_starttag_text())
            return
        super().handle_startendtag(tag, attrs)

    def handle_endtag(self, tag):
        if in_title(self.state) and tag != "title":
            text(self.state, f"</{tag}>")
            return
        self.pairs.extend(close_tag(self.state, tag))

    def handle_data(self, data):
        text(self.state, data)


def scan_head(
    html: str,
    base_url: str,
    oembed: bool = True,
    first_title_only: bool = True,
) -> ScanResult:
    """Scan the head of ``html`` and return the ordered metadata pairs.

    Args:
        html: decoded document text
        base_url: page URL, used to resolve favicon links
        oembed: record oEmbed discovery links
        first_title_only: keep only the first ``<title>`` element
    """
    state = ScanState(base_url=base_url, oembed=oembed, first_title_only=first_title_only)
    parser = _HeadParser(state)

    for start in range(0, len(html), FEED_CHUNK_SIZE):
        parser.feed(html[start:start + FEED_CHUNK_SIZE])
        if state.done:
            break
    else:
        parser.close()

    pairs = parser.pairs + finish(state)
    logger.debug(
        f"Scanned head of {base_url}: {len(pairs)} pairs, "
        f"oembed={state.oembed_link.type if state.oembed_link else None}"
    )
    return ScanResult(pairs=pairs, favicon=state.favicon, oembed=state.oembed_link)
