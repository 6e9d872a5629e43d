from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "unfurl"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Unfurling
    DEFAULT_USER_AGENT: str = "facebookexternalhit"
    DEFAULT_FOLLOW: int = 50  # max redirects when the caller doesn't say
    MAX_CONCURRENT_UNFURLS: int = 10  # Per-worker API concurrency
    UNFURL_API_TIMEOUT: int = 30  # Max seconds for a single unfurl API call

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_ENVIRONMENT: str = "development"

    # Logging
    LOG_FORMAT: str = "json"  # "json" for production, "text" for development
    LOG_LEVEL: str = "INFO"

    # Metrics
    METRICS_ENABLED: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
