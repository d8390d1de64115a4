"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: str = "development"  # "production" switches storage to Redis
    log_level: str = "INFO"

    # Storage configuration
    storage_backend: Literal["auto", "file", "redis"] = "auto"
    storage_fallback: bool = True  # Mirror Redis writes to local files, degrade-read from them
    data_dir: str = "data"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = ""

    # Registration settings
    otp_ttl_seconds: int = 600  # Verification window duration (10 minutes)

    # Admin settings
    admin_password: str = "admin123"
    admin_password_hash: str | None = None  # bcrypt hash, takes precedence when set

    # Email configuration
    email_backend: Literal["console", "smtp"] = "console"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_sender: str = ""
    smtp_use_tls: bool = True
    smtp_timeout: float = 15.0
    otp_subject: str = "Your OTP for Registration"
    welcome_subject: str = "Welcome to Our Platform"
    admin_message_subject: str = "Message from Admin"
    notify_max_workers: int = 8

    @property
    def uses_redis(self) -> bool:
        """Whether the resolved storage backend is Redis."""
        if self.storage_backend == "auto":
            return self.environment.lower() == "production"
        return self.storage_backend == "redis"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
