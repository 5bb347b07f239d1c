"""Configuration management for stamplink.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once and is
immutable during runtime.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_PROTECTION_KEY = "change-me-in-production-use-openssl-rand-hex-32"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STAMPLINK_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    environment: Literal["development", "production", "testing"] = "development"

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Data Protection Settings
    data_protection_key: str = Field(
        default=DEFAULT_DATA_PROTECTION_KEY,
        description="Master secret used to derive per-purpose encryption keys",
    )

    # Token Provider Settings
    token_provider_name: str = Field(
        default="ValidationTokenProvider",
        description="Protection context the token provider encrypts under",
    )
    token_lifespan: timedelta = Field(
        default=timedelta(days=1),
        description="How long a generated token stays valid",
    )

    @field_validator("data_protection_key", "token_provider_name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty secrets and provider names."""
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("token_lifespan")
    @classmethod
    def validate_token_lifespan(cls, v: timedelta) -> timedelta:
        """Validate the token lifespan is strictly positive."""
        if v <= timedelta(0):
            raise ValueError("token_lifespan must be positive")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def uses_default_data_protection_key(self) -> bool:
        """Check if the placeholder data protection key is still configured."""
        return self.data_protection_key == DEFAULT_DATA_PROTECTION_KEY


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
