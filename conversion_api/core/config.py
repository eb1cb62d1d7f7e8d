from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_RATE_PROVIDERS = {"static", "external-http"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, PORT,
    EXCHANGE_RATE_PROVIDER, RATES_CACHE_TTL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Unit Conversion API"
    debug: bool = False
    version: str = "1.0.0"

    # Server bind (PORT kept compatible with the previous deployment)
    host: str = "0.0.0.0"
    port: int = 5000
    cors_allow_origins: List[str] = ["*"]

    # Exchange rates / caching
    # Allowed: 'external-http' (live USD-based endpoint), 'static' (fixed rates, offline use)
    exchange_rate_provider: str = "external-http"
    exchange_api_url: AnyHttpUrl = "https://api.exchangerate-api.com/v4/latest/USD"
    http_timeout_seconds: float = 5.0
    http_retries: int = 0
    rates_cache_ttl_seconds: int = 3600  # 1 hour
    rates_fallback_ttl_seconds: int = 3600

    def init_post_load(self) -> None:
        """Validate derived constraints not expressible as field types."""
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.rates_cache_ttl_seconds <= 0 or self.rates_fallback_ttl_seconds <= 0:
            raise ValueError("rate cache TTLs must be positive seconds")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
