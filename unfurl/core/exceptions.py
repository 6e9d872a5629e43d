"""Typed errors raised by the unfurl pipeline.

Every error carries a machine-readable ``code`` so the API and CLI can
report failures without string matching.
"""


class UnfurlError(Exception):
    """Base class for all unfurl failures."""

    code = "UNFURL_ERROR"
    message = "Unfurl failed"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.message
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ConfigurationError(UnfurlError):
    """Options were not a key/value configuration, or failed validation."""

    code = "BAD_OPTIONS"
    message = "Parameter `opts` must be a mapping of unfurl options"


class UnexpectedContentTypeError(UnfurlError):
    """The primary response was not an HTML/XHTML document."""

    code = "EXPECTED_HTML"
    message = "Wrong content type header - text/html or application/xhtml+xml was expected"

    def __init__(self, content_type: str | None, content_length: str | None):
        super().__init__()
        self.content_type = content_type
        self.content_length = content_length

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["info"] = {
            "content_type": self.content_type,
            "content_length": self.content_length,
        }
        return data


class FetchError(UnfurlError):
    """Transport failure on a fetch: network, timeout, redirect or size limit."""

    code = "NETWORK_ERROR"
    message = "Failed to fetch url"

    TIMEOUT = "TIMEOUT"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    MAX_SIZE_EXCEEDED = "MAX_SIZE_EXCEEDED"
    NETWORK_ERROR = "NETWORK_ERROR"

    def __init__(self, url: str, message: str | None = None, code: str | None = None):
        super().__init__(message or f"Failed to fetch {url}", code)
        self.url = url
