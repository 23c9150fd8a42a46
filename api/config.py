"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    # API Server
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Remote functions (crawler + citation checker)
    functions_base_url: str | None = None
    functions_api_key: str | None = None
    crawl_function_name: str = "crawl-website"
    citation_function_name: str = "check-citations"
    function_timeout_seconds: float = 60.0

    # Usage tracking
    redis_url: RedisDsn | None = None  # Unset: in-process usage store
    usage_key_prefix: str = "discoverability:usage"
    rate_limit_window_seconds: float = 60.0

    # Privileged identities bypass usage and rate limits
    admin_emails: list[str] = Field(default_factory=list)
    demo_emails: list[str] = Field(default_factory=lambda: ["demo@example.com"])

    # Analysis
    default_model_key: str = "gpt-4"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def privileged_emails(self) -> frozenset[str]:
        """Lower-cased e-mails that are treated as administrative identities."""
        return frozenset(e.lower() for e in [*self.admin_emails, *self.demo_emails])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
