from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from unfurl.config import settings
from unfurl.core.exceptions import ConfigurationError


def _normalize_url(url: str) -> str:
    """Prepend https:// if no protocol is present."""
    url = url.strip()
    if url and not url.startswith(("http://", "https://", "//")):
        url = f"https://{url}"
    return url


class UnfurlOptions(BaseModel):
    model_config = {"extra": "forbid", "frozen": True, "strict": True}

    oembed: bool = True  # discover and fetch oEmbed metadata
    timeout: int = Field(default=0, ge=0)  # ms per fetch, 0 = unbounded
    follow: int = Field(default_factory=lambda: settings.DEFAULT_FOLLOW, ge=0)  # max redirects, 0 = none
    compress: bool = True  # accept gzip/deflate content encoding
    size: int = Field(default=0, ge=0)  # max body bytes, 0 = unbounded
    agent: str = Field(default_factory=lambda: settings.DEFAULT_USER_AGENT)  # User-Agent header
    first_title_only: bool = True  # keep the first <title>, ignore later ones

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout / 1000 if self.timeout else None


def resolve_options(opts: Any = None) -> UnfurlOptions:
    """Turn caller-supplied options into a validated UnfurlOptions.

    Accepts None, an UnfurlOptions, or any mapping of option names. Anything
    else, unknown keys, or invalid values raise ConfigurationError.
    """
    if opts is None:
        return UnfurlOptions()
    if isinstance(opts, UnfurlOptions):
        return opts
    if not isinstance(opts, Mapping):
        raise ConfigurationError()
    try:
        return UnfurlOptions.model_validate(dict(opts))
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid unfurl options: {errors}") from e


class UnfurlRequest(BaseModel):
    url: str
    options: dict[str, Any] | None = None  # validated by resolve_options in the endpoint

    @field_validator("url", mode="before")
    @classmethod
    def _add_protocol(cls, v: str) -> str:
        return _normalize_url(v)


class UnfurlResponse(BaseModel):
    success: bool
    data: dict[str, Any] | None = None  # ParsedMetadata
    error: str | None = None
    error_code: str | None = None
    error_info: dict[str, Any] | None = None
    request_id: str | None = None
