from urllib.parse import urljoin


def resolve_url(base_url: str, value: str) -> str:
    """Resolve ``value`` against the page URL; return it unchanged if it can't be parsed."""
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value
