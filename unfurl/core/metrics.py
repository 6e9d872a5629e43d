from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# Unfurl pipeline
# ---------------------------------------------------------------------------
unfurl_requests_total = Counter(
    "unfurl_requests_total",
    "Total number of unfurl calls",
    ["status"],
)
unfurl_duration_seconds = Histogram(
    "unfurl_duration_seconds",
    "Time spent unfurling a single URL",
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10, 30],
)
oembed_fetches_total = Counter(
    "oembed_fetches_total",
    "Total oEmbed fetches by outcome",
    ["status"],
)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
