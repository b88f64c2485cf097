"""Settings for the lancer gatekeeper."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from ``LANCER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LANCER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "lancer"
    DEBUG: bool = False

    # === Webhook signing ===
    SIGNING_SECRET: str = ""
    SIGNATURE_HEADER: str = "x-signature"
    TIMESTAMP_HEADER: str = "x-timestamp"
    SIGNATURE_TOLERANCE_SECONDS: Optional[int] = Field(default=None, ge=0)

    # === Caller handlers ===
    HANDLER_TIMEOUT_SECONDS: Optional[float] = Field(default=None, gt=0)

    # === Logging ===
    LOG_DIR: Optional[str] = None
    LOG_FILE_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 3


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


settings = get_settings()
