"""
Configuration settings for the Stock Signal Tracker.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Yahoo Finance
    yahoo_base_url: str = Field("https://query1.finance.yahoo.com", env="YAHOO_BASE_URL")
    user_agent: str = Field("Mozilla/5.0 (compatible; StockSignalTracker/1.0)", env="USER_AGENT")
    request_timeout: float = Field(30.0, env="REQUEST_TIMEOUT")
    max_retries: int = Field(3, env="MAX_RETRIES")

    # Scan defaults
    default_symbols: str = Field("AAPL,MSFT,UBER,GOOG", env="DEFAULT_SYMBOLS")
    sma_window: int = Field(30, env="SMA_WINDOW")
    max_concurrent: int = Field(1, env="MAX_CONCURRENT")

    # Logging
    log_level: str = Field("INFO", env="LOG_LEVEL")
    log_file: Optional[str] = Field(None, env="LOG_FILE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
