"""Known metadata keys and where each one lands in the unfurled output.

Every recognized key maps to a SchemaEntry:

* ``entry``    top-level output section (``open_graph``, ``twitter_card``, ``oEmbed``)
* ``name``     field name inside the destination object
* ``parent``   grouping key: an array of group elements, or, together with
  ``category``, a nested object per category
* ``type``     value coercion applied by the mapper: ``string``, ``number``, ``url``

Several keys may share a destination field (``og:image`` and ``og:image:url``),
in which case the mapper keeps the first value written.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

ValueType = Literal["string", "number", "url"]

OPEN_GRAPH = "open_graph"
TWITTER_CARD = "twitter_card"
OEMBED = "oEmbed"

OEMBED_PREFIX = "oEmbed:"
VIDEO_TAG_KEY = "og:video:tag"


@dataclass(frozen=True)
class SchemaEntry:
    key: str
    entry: str
    name: str
    parent: str | None = None
    category: str | None = None
    type: ValueType = "string"


def _og(key, name, type="string", parent=None):
    return SchemaEntry(key, OPEN_GRAPH, name, parent=parent, type=type)


def _tw(key, name, type="string", parent=None, category=None):
    return SchemaEntry(key, TWITTER_CARD, name, parent=parent, category=category, type=type)


def _oe(key, name, type="string", parent=None):
    return SchemaEntry(OEMBED_PREFIX + key, OEMBED, name, parent=parent, type=type)


_ENTRIES = [
    # Open Graph
    _og("og:title", "title"),
    _og("og:type", "type"),
    _og("og:url", "url", "url"),
    _og("og:description", "description"),
    _og("og:determiner", "determiner"),
    _og("og:locale", "locale"),
    _og("og:locale:alternate", "locale_alt"),
    _og("og:site_name", "site_name"),
    _og("og:image", "url", "url", parent="images"),
    _og("og:image:url", "url", "url", parent="images"),
    _og("og:image:secure_url", "secure_url", "url", parent="images"),
    _og("og:image:type", "type", parent="images"),
    _og("og:image:width", "width", "number", parent="images"),
    _og("og:image:height", "height", "number", parent="images"),
    _og("og:image:alt", "alt", parent="images"),
    _og("og:video", "url", "url", parent="videos"),
    _og("og:video:url", "url", "url", parent="videos"),
    _og("og:video:secure_url", "secure_url", "url", parent="videos"),
    _og("og:video:stream", "stream", "url", parent="videos"),
    _og("og:video:type", "type", parent="videos"),
    _og("og:video:width", "width", "number", parent="videos"),
    _og("og:video:height", "height", "number", parent="videos"),
    _og(VIDEO_TAG_KEY, "tag", parent="videos"),
    _og("og:audio", "url", "url", parent="audio"),
    _og("og:audio:url", "url", "url", parent="audio"),
    _og("og:audio:secure_url", "secure_url", "url", parent="audio"),
    _og("og:audio:type", "type", parent="audio"),
    # Twitter Card
    _tw("twitter:card", "card"),
    _tw("twitter:url", "url", "url"),
    _tw("twitter:site", "site"),
    _tw("twitter:site:id", "site_id"),
    _tw("twitter:creator", "creator"),
    _tw("twitter:creator:id", "creator_id"),
    _tw("twitter:title", "title"),
    _tw("twitter:description", "description"),
    _tw("twitter:image", "url", "url", parent="images"),
    _tw("twitter:image:src", "url", "url", parent="images"),
    _tw("twitter:image:alt", "alt", parent="images"),
    _tw("twitter:image:width", "width", "number", parent="images"),
    _tw("twitter:image:height", "height", "number", parent="images"),
    _tw("twitter:player", "url", "url", parent="players"),
    _tw("twitter:player:stream", "stream", "url", parent="players"),
    _tw("twitter:player:width", "width", "number", parent="players"),
    _tw("twitter:player:height", "height", "number", parent="players"),
    # oEmbed (keys arrive namespaced with "oEmbed:")
    _oe("type", "type"),
    _oe("version", "version"),
    _oe("title", "title"),
    _oe("author_name", "author_name"),
    _oe("author_url", "author_url", "url"),
    _oe("provider_name", "provider_name"),
    _oe("provider_url", "provider_url", "url"),
    _oe("cache_age", "cache_age", "number"),
    _oe("html", "html"),
    _oe("url", "url", "url"),
    _oe("width", "width", "number"),
    _oe("height", "height", "number"),
    _oe("thumbnail_url", "url", "url", parent="thumbnails"),
    _oe("thumbnail_width", "width", "number", parent="thumbnails"),
    _oe("thumbnail_height", "height", "number", parent="thumbnails"),
]

# Twitter app-install cards: one nested object per store
for _store in ("iphone", "ipad", "googleplay"):
    _ENTRIES += [
        _tw(f"twitter:app:name:{_store}", "name", parent="apps", category=_store),
        _tw(f"twitter:app:id:{_store}", "id", parent="apps", category=_store),
        _tw(f"twitter:app:url:{_store}", "url", "url", parent="apps", category=_store),
    ]

SCHEMA: MappingProxyType = MappingProxyType({e.key: e for e in _ENTRIES})
KEYS: frozenset[str] = frozenset(SCHEMA)
