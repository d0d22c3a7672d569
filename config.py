"""Application configuration."""

from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``SIGNAL_STREAM_*`` environment variables.

    Instances are frozen: the connection policy is read-only process-wide
    configuration handed to the websocket endpoint, never mutated at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGNAL_STREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Connection acceptance ("*" accepts every Origin)
    allowed_origins: List[str] = ["*"]

    # Market data provider
    provider: Literal["yahoo", "synthetic"] = "yahoo"
    provider_base_url: str = "https://query1.finance.yahoo.com"
    history_range: str = "2y"
    history_interval: str = "1d"
    request_timeout: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; signal-stream/0.1)"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
