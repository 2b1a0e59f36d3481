"""
Configuration settings for the bank account service.
Loads environment variables and provides application settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables or a .env file.
    """

    # Database
    DATABASE_URL: str = "sqlite:///./bank.db"
    DATABASE_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Transient failure handling for units of work
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_BACKOFF_SECONDS: float = 0.1

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Bank Account Service"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "REST API for customer accounts and deposit, withdrawal and transfer processing"
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Create global settings instance
settings = Settings()
