"""
Configuration settings for the application.
"""
import logging
import os
from pydantic_settings import BaseSettings
from typing import List, Optional

logger = logging.getLogger(__name__)

# Values shipped in sample env files; treated the same as a missing value
PLACEHOLDER_VALUES = {"", "undefined", "null", "none", "changeme", "change-me"}


class Settings(BaseSettings):
    """
    Application settings with default values.
    Values can be overridden by environment variables.
    """
    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Container Pickup Manager"

    # CORS settings
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Remote document store. Leaving either value unset keeps the
    # application in local-only mode.
    MONGODB_URL: Optional[str] = os.environ.get("MONGODB_URL")
    MONGODB_DB: Optional[str] = os.environ.get("MONGODB_DB")
    MONGODB_TIMEOUT_MS: int = 5000

    # Local durable storage
    LOCAL_STORE_PATH: str = os.environ.get("LOCAL_STORE_PATH", "data/local_store.json")

    # Exports and attachments
    PDF_PAGE_SIZE: str = "letter"
    MAX_ATTACHMENT_BYTES: int = 10 * 1024 * 1024

    # Logging settings
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def remote_configured(self) -> bool:
        """True when both remote credentials hold real values."""
        return not (is_placeholder(self.MONGODB_URL) or is_placeholder(self.MONGODB_DB))


def is_placeholder(value: Optional[str]) -> bool:
    if value is None:
        return True
    cleaned = value.strip().lower()
    return cleaned in PLACEHOLDER_VALUES or cleaned.startswith("your-")


# Create settings instance
settings = Settings()


def print_config_info():
    """Log configuration information at startup."""
    logger.info(f"API Version: {settings.API_V1_STR}")
    logger.info(f"Project Name: {settings.PROJECT_NAME}")
    logger.info(f"Remote store configured: {settings.remote_configured}")
    if settings.remote_configured:
        logger.info(f"MongoDB Database: {settings.MONGODB_DB}")
    logger.info(f"Local store: {settings.LOCAL_STORE_PATH}")
    logger.info(f"CORS Origins: {settings.BACKEND_CORS_ORIGINS}")
    logger.info(f"Log Level: {settings.LOG_LEVEL}")
