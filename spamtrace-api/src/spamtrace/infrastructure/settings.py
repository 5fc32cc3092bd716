"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Spamtrace"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # IMAP
    imap_host: str = "imap.gmail.com"
    imap_port: int = 993
    imap_timeout_seconds: float = 30.0
    spam_folder: str = "[Gmail]/Spam"
    default_max_emails: int = Field(default=50, gt=0)

    # ip-api.com free tier: HTTP only, 45 req/min
    geo_api_base_url: str = "http://ip-api.com/json"
    geo_min_interval_seconds: float = Field(default=1.5, ge=0)
    geo_timeout_seconds: float = 10.0

    # One-shot CLI credentials
    spamtrace_email: str | None = None
    spamtrace_app_password: SecretStr | None = None

    @computed_field
    @property
    def imap_address(self) -> str:
        """Host:port of the IMAPS endpoint, for logging."""
        return f"{self.imap_host}:{self.imap_port}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
