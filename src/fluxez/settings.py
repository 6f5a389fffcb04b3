"""Settings for the Fluxez client."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import FLUXEZ_BASE_URL


class FluxezSettings(BaseSettings):
    """Fluxez configuration settings."""

    # Connection
    FLUXEZ_API_KEY: Optional[str] = None
    FLUXEZ_BASE_URL: str = FLUXEZ_BASE_URL
    FLUXEZ_TIMEOUT: float = 30.0
    FLUXEZ_MAX_RETRIES: int = 3
    FLUXEZ_RETRY_DELAY: float = 1.0
    FLUXEZ_MAX_RETRY_DELAY: float = 30.0

    # Context headers
    FLUXEZ_ORGANIZATION_ID: Optional[str] = None
    FLUXEZ_PROJECT_ID: Optional[str] = None
    FLUXEZ_APP_ID: Optional[str] = None

    # Analytics
    ANALYTICS_BATCH_SIZE: int = 100
    ANALYTICS_FLUSH_INTERVAL: Optional[float] = None  # seconds; None disables time-based flushing

    # Cache
    CACHE_PREFIX: str = ""
    CACHE_TTL: int = 3600

    # Storage
    STORAGE_SIGNED_URL_EXPIRY: int = 3600

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = FluxezSettings()
