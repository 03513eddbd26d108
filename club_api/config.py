"""
Configuration management for the club backend.
Uses Pydantic Settings for environment variable management.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "BIS Club Backend"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the club website: events, gallery, team and images"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    # Database Configuration
    # Empty DATABASE_URL falls back to an in-memory SQLite database
    DATABASE_URL: str = ""
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False
    # Create tables from the ORM metadata on startup instead of running migrations
    DB_CREATE_TABLES: bool = False

    # Uploads
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


@lru_cache
def get_settings() -> Settings:
    """Return the process settings, loaded once."""
    return Settings()
