import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from unfurl.config import settings
from unfurl.core.exceptions import (
    ConfigurationError,
    FetchError,
    UnexpectedContentTypeError,
    UnfurlError,
)
from unfurl.middleware.request_id import get_request_id
from unfurl.schemas.unfurl import UnfurlRequest, UnfurlResponse, resolve_options
from unfurl.services.unfurler import unfurl
from unfurl.utils.json_sanitize import json_sanitize

router = APIRouter()
logger = logging.getLogger(__name__)

# Requests beyond this limit wait in queue instead of all running at once.
_unfurl_semaphore: asyncio.Semaphore | None = None

_STATUS_BY_ERROR = {
    ConfigurationError: 400,
    UnexpectedContentTypeError: 422,
    FetchError: 502,
}


def _get_unfurl_semaphore() -> asyncio.Semaphore:
    global _unfurl_semaphore
    if _unfurl_semaphore is None:
        _unfurl_semaphore = asyncio.Semaphore(settings.MAX_CONCURRENT_UNFURLS)
    return _unfurl_semaphore


def _error_response(error: UnfurlError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(type(error), 500)
    if isinstance(error, FetchError) and error.code == FetchError.TIMEOUT:
        status_code = 504
    info = error.to_dict().get("info")
    body = UnfurlResponse(
        success=False,
        error=error.message,
        error_code=error.code,
        error_info=info,
        request_id=get_request_id(),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "",
    response_model=UnfurlResponse,
    response_model_exclude_none=True,
    summary="Unfurl a URL",
    description="Fetch a page and return its title, description, keywords, favicon, Open Graph, Twitter Card and oEmbed metadata as a nested record.",
)
async def unfurl_url(request: UnfurlRequest):
    try:
        options = resolve_options(request.options)
        async with _get_unfurl_semaphore():
            data = await asyncio.wait_for(
                unfurl(request.url, options),
                timeout=settings.UNFURL_API_TIMEOUT,
            )
    except asyncio.TimeoutError:
        logger.warning(f"Unfurl of {request.url} exceeded {settings.UNFURL_API_TIMEOUT}s")
        return _error_response(
            FetchError(
                request.url,
                f"Unfurl timed out after {settings.UNFURL_API_TIMEOUT}s",
                FetchError.TIMEOUT,
            )
        )
    except UnfurlError as e:
        logger.info(f"Unfurl of {request.url} rejected: {e.code}")
        return _error_response(e)

    return UnfurlResponse(success=True, data=json_sanitize(data), request_id=get_request_id())
