"""ASGI entry point: ``uvicorn unfurl.main:app``."""

import logging

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from unfurl.api.v1.health import router as health_router
from unfurl.api.v1.router import api_router
from unfurl.config import Settings, settings
from unfurl.core.logging_config import configure_logging
from unfurl.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware

logger = logging.getLogger(__name__)


def _init_sentry(config: Settings) -> None:
    if not config.SENTRY_DSN:
        return
    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        traces_sample_rate=config.SENTRY_TRACES_SAMPLE_RATE,
        environment=config.SENTRY_ENVIRONMENT,
        release=f"{config.APP_NAME}@{config.APP_VERSION}",
    )
    sentry_sdk.set_tag("user_agent", config.DEFAULT_USER_AGENT)


def create_app(config: Settings = settings) -> FastAPI:
    configure_logging(log_format=config.LOG_FORMAT, log_level=config.LOG_LEVEL)
    _init_sentry(config)

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Extract title, description, favicon, Open Graph, "
        "Twitter Card and oEmbed metadata from any web page.",
        debug=config.DEBUG,
    )

    # outermost, so the id is bound before CORS and gzip run
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.BACKEND_CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {
            "app": config.APP_NAME,
            "version": config.APP_VERSION,
            "unfurl": "/v1/unfurl",
            "user_agent": config.DEFAULT_USER_AGENT,
            "max_redirects": config.DEFAULT_FOLLOW,
            "status": "running",
        }

    logger.info(
        f"{config.APP_NAME} v{config.APP_VERSION} ready "
        f"(concurrency={config.MAX_CONCURRENT_UNFURLS}, timeout={config.UNFURL_API_TIMEOUT}s)"
    )
    return app


app = create_app()
