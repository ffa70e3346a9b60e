"""Application configuration from environment variables."""

import logging
import sys

from pydantic import EmailStr, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("tms")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Fields without a default are required; the process refuses to start
    when any of them is missing or malformed.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    APP_NAME: str = "Training Management System"
    DEBUG: bool = False
    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False

    # Auth
    PASSWORD_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(gt=0)
    REFRESH_TOKEN_SECRET: str
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(gt=0)
    RESET_PASSWORD_SECRET: str
    RESET_PASSWORD_EXPIRE_MINUTES: int = Field(gt=0)
    LOGIN_RATE_LIMIT: str = "10/minute"

    # MinIO
    MINIO_ENDPOINT: str
    MINIO_ACCESS_KEY: str
    MINIO_SECRET_KEY: str
    MINIO_BUCKET: str
    MINIO_SECURE: bool = False
    MINIO_REGION: str | None = None
    MEDIA_IMAGE_URL_EXPIRES: int = 30  # seconds
    MEDIA_DOC_URL_EXPIRES: int = 60  # seconds

    # Mail
    SMTP_HOST: str
    SMTP_PORT: int = 587
    SMTP_USER: str
    SMTP_PASSWORD: str
    SMTP_FROM_EMAIL: EmailStr
    SMTP_FROM_NAME: str = "Training Management System"
    SMTP_USE_TLS: bool = True

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    ROLE_CACHE_BACKEND: str = "memory"  # memory | redis
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    TIMEZONE: str = "Asia/Ho_Chi_Minh"

    # Seed administrator
    ADMIN_EMAIL: EmailStr
    ADMIN_PASSWORD: str
    ADMIN_FIRST_NAME: str
    ADMIN_LAST_NAME: str
    ADMIN_MIDDLE_NAME: str | None = None


def load_settings() -> Settings:
    """Build the settings object or stop the process."""
    try:
        return Settings()
    except ValidationError as e:
        logger.error("Config env validation failed:\n%s", e)
        sys.exit(1)


settings = load_settings()
