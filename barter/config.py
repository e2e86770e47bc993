from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./barter.db"

    # JWT Authentication (tokens are issued elsewhere, only verified here)
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ]

    # Messaging
    MESSAGE_PAGE_DEFAULT: int = 100
    MESSAGE_PAGE_MAX: int = 500
    MESSAGE_MAX_LENGTH: int = 4000

    # Client polling cadence
    CONVERSATION_POLL_SECONDS: int = 5
    MESSAGE_POLL_SECONDS: int = 2
    # Feed cursors are handed back this far in the past so writes stamped
    # before a poll but committed after it are still picked up next time
    SYNC_CURSOR_GRACE_SECONDS: int = 2

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
