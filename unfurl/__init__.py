"""unfurl -- extract title, description, Open Graph, Twitter Card and oEmbed metadata from a URL."""

__version__ = "0.1.0"

from unfurl.core.exceptions import (
    ConfigurationError,
    FetchError,
    UnexpectedContentTypeError,
    UnfurlError,
)
from unfurl.schemas.unfurl import UnfurlOptions
from unfurl.services.unfurler import unfurl

__all__ = [
    "__version__",
    "unfurl",
    "UnfurlOptions",
    # Exceptions
    "UnfurlError",
    "ConfigurationError",
    "FetchError",
    "UnexpectedContentTypeError",
]
