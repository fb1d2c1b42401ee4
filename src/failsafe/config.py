"""
Configuration settings for failsafe.

All settings are loaded from environment variables (prefixed with
``FAILSAFE_``) with sensible defaults. A local ``.env`` file is honoured
for development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FAILSAFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "failsafe"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON

    # === Retry ===
    DEFAULT_RETRY_ATTEMPTS: int = Field(default=3, ge=0)  # used by retry() without a count

    # === Monitoring ===
    METRICS_ENABLED: bool = True


# Global settings instance
settings = Settings()
