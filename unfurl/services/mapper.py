"""Fold the flat metadata pair sequence into the nested unfurl output.

The input has no closing delimiters: a repeated block such as

    og:image, og:image:width, og:image, og:image:width

must become two elements of ``open_graph.images``. Group boundaries are
inferred from ordering alone (see ``starts_new_group``), values are coerced
per schema entry, and within any destination object the first value written
to a field wins.
"""

import math
import re
from collections.abc import Iterable, Mapping

from unfurl.services.head_scanner import MetadataPair
from unfurl.services.metadata_schema import (
    OPEN_GRAPH,
    SCHEMA,
    VIDEO_TAG_KEY,
    SchemaEntry,
)
from unfurl.utils.urls import resolve_url

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value) -> int | float:
    """Parse a leading base-10 integer; NaN when there is none."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else math.nan
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else math.nan


def coerce(entry: SchemaEntry, value, base_url: str):
    if value is None:
        return None
    if entry.type == "number":
        return parse_int(value)
    if entry.type == "url":
        return resolve_url(base_url, str(value))
    return str(value)


def is_populated(value) -> bool:
    """Whether a field slot already holds a value worth keeping.

    Missing, None, empty string, zero and NaN all count as empty, so a later
    value may still fill the slot.
    """
    if value is None or value == "" or value == 0:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


def starts_new_group(group: list[dict], entry: SchemaEntry, last_parent: str | None) -> bool:
    """Decide whether ``entry`` opens a new element in its group array.

    A new element starts when the array is empty, or when the current (last)
    element already has this field populated and the previous grouped write
    went to the same parent (or there was none). Interleaving a different
    parent suppresses the split, so the value is dropped into the current
    element instead (where first-write-wins discards it).
    """
    if not group:
        return True
    if last_parent is not None and last_parent != entry.parent:
        return False
    return is_populated(group[-1].get(entry.name))


def map_metadata(
    pairs: Iterable[MetadataPair],
    base_url: str,
    schema: Mapping[str, SchemaEntry] = SCHEMA,
) -> dict:
    """Build the nested metadata record from an ordered pair sequence.

    Args:
        pairs: ``(key, value)`` pairs in emission order
        base_url: page URL; every ``url`` field is resolved against it
        schema: key table, defaults to the built-in SCHEMA
    """
    parsed: dict = {}
    tags: list = []
    last_parent: str | None = None

    for key, value in pairs:
        entry = schema.get(key)

        if entry is None:
            parsed[key] = value
            continue

        # video tags are shared by every video element, applied after the pass
        if key == VIDEO_TAG_KEY:
            tags.append(value)
            continue

        value = coerce(entry, value, base_url)
        if value is None:
            continue

        target = parsed.get(entry.entry)
        if not isinstance(target, dict):
            target = parsed[entry.entry] = {}

        if entry.parent and entry.category:
            target = target.setdefault(entry.parent, {}).setdefault(entry.category, {})
        elif entry.parent:
            group = target.get(entry.parent)
            if not isinstance(group, list):
                group = target[entry.parent] = []
            if starts_new_group(group, entry, last_parent):
                group.append({})
            last_parent = entry.parent
            target = group[-1]

        if not is_populated(target.get(entry.name)):
            target[entry.name] = value

    open_graph = parsed.get(OPEN_GRAPH)
    videos = open_graph.get("videos") if isinstance(open_graph, dict) else None
    if tags and videos:
        parsed[OPEN_GRAPH]["videos"] = [{**video, "tags": list(tags)} for video in videos]

    return parsed
