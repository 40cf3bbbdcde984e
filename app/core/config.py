"""Application configuration."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    environment: Literal["development", "production", "test"] = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # Order service
    order_api_base_url: str
    order_api_key: str
    order_api_timeout: float = 30.0  # seconds

    # Retry policy for read operations
    retry_max_attempts: int = 3
    retry_initial_delay_ms: int = 1000

    # Driver-facing messages
    timezone: str = "America/Sao_Paulo"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def retry_initial_delay(self) -> float:
        """Initial backoff delay in seconds."""
        return self.retry_initial_delay_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()
