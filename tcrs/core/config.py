"""
Configuration settings for the credit-monitoring alert client.
Loads settings from environment variables (prefixed TCRS_) with sane defaults.
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TCRS_",
        case_sensitive=True,
        extra="ignore",
    )

    # API Settings
    API_BASE_URL: str = "http://localhost:8080"
    # Seconds; 0 disables the client-side timeout entirely
    API_REQUEST_TIMEOUT: float = 30.0

    # Auth token storage (written at login/refresh only)
    TOKEN_STORE_PATH: Path = Path.home() / ".tcrs" / "tokens.json"

    # Alert Settings
    STATISTICS_POLL_INTERVAL: int = 300  # 5 minutes
    DEFAULT_PAGE_SIZE: int = 10
    DETAIL_SCAN_SIZE: int = 100
    BELL_PREVIEW_SIZE: int = 5
    MONITORING_PAGE_SIZE: int = 10

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = True

    @field_validator("API_BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Paths are joined with a leading slash, so drop any trailing one."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def request_timeout(self) -> Optional[float]:
        """Timeout handed to httpx (None means no limit)."""
        if self.API_REQUEST_TIMEOUT <= 0:
            return None
        return self.API_REQUEST_TIMEOUT


# Create global settings instance
settings = Settings()
