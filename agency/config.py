"""
Configuration and settings for the agency backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Database (any SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # Bearer tokens
    jwt_secret: Optional[str] = Field(default=None, alias="JWT_SECRET")
    jwt_expires_seconds: int = Field(default=3600, alias="JWT_EXPIRES_SECONDS")

    # CORS
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")

    # S3-compatible image host
    image_bucket: Optional[str] = Field(default=None, alias="IMAGE_BUCKET")
    image_endpoint: Optional[str] = Field(default=None, alias="IMAGE_ENDPOINT")
    image_region: Optional[str] = Field(default=None, alias="IMAGE_REGION")
    image_public_base_url: Optional[str] = Field(
        default=None, alias="IMAGE_PUBLIC_BASE_URL"
    )
    aws_access_key_id: Optional[str] = Field(
        default=None, alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )

    # Outbound mail for application notifications
    mail_host: Optional[str] = Field(default=None, alias="MAIL_HOST")
    mail_port: int = Field(default=587, alias="MAIL_PORT")
    mail_username: Optional[str] = Field(default=None, alias="MAIL_USERNAME")
    mail_password: Optional[str] = Field(default=None, alias="MAIL_PASSWORD")
    mail_admin_address: Optional[str] = Field(
        default=None, alias="MAIL_ADMIN_ADDRESS"
    )

    # Intake limits
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    duplicate_window_hours: int = Field(default=24, alias="DUPLICATE_WINDOW_HOURS")
    dedupe_bookings: bool = Field(default=False, alias="DEDUPE_BOOKINGS")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="AGENCY_USE_IN_MEMORY_BACKENDS"
    )

    @property
    def mail_configured(self) -> bool:
        return bool(
            self.mail_host
            and self.mail_username
            and self.mail_password
            and self.mail_admin_address
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
