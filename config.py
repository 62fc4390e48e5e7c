"""Application-wide configuration (pydantic-settings singleton)."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import List, Literal

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from butterfly_survey.domain.errors import ConfigurationError

FALLBACK_SECRET_KEY = "fallback-session-secret-change-in-production"


class Settings(BaseSettings):
    """Typed, validated settings loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────
    app_name: str = "dKin Butterfly Club"
    app_version: str = "1.0.0"
    app_description: str = "Informative web page on Butterflies from around the world"
    environment: Literal["development", "test", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ── Server ───────────────────────────────────
    host: str = "localhost"
    port: int = 3000
    max_content_length: int = 10 * 1024 * 1024

    # ── Database ─────────────────────────────────
    database_url: str = "sqlite:///mySurveyDB.db"

    # ── Security ─────────────────────────────────
    secret_key: str = FALLBACK_SECRET_KEY
    expose_error_details: bool = False

    # ── CORS ─────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # ── Rate limiting ────────────────────────────
    rate_limit_enabled: bool = True
    rate_limit_window_ms: int = 15 * 60 * 1000
    rate_limit_max_requests: int = 100
    submit_rate_limit_max: int = 5
    rate_limit_storage_uri: str = "memory://"

    # ── Features ─────────────────────────────────
    maintenance_mode: bool = False
    enable_analytics: bool = False
    google_analytics_id: str = ""

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper().strip()

    @field_validator("port")
    @classmethod
    def port_in_range(cls, value: int) -> int:
        if not 1 <= value <= 65535:
            raise ValueError(f"Invalid port number: {value}. Must be between 1-65535")
        return value

    @field_validator("rate_limit_window_ms", "rate_limit_max_requests", "submit_rate_limit_max")
    @classmethod
    def rate_limit_positive(cls, value: int, info: ValidationInfo) -> int:
        if value < 1:
            raise ValueError(f"{info.field_name.upper()} must be greater than 0")
        return value

    # ── Derived helpers ──────────────────────────

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def rate_limit_window_seconds(self) -> int:
        return max(1, self.rate_limit_window_ms // 1000)

    @property
    def rate_limit(self) -> str:
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_seconds} seconds"

    @property
    def submit_rate_limit(self) -> str:
        return f"{self.submit_rate_limit_max} per {self.rate_limit_window_seconds} seconds"

    @property
    def rate_limit_retry_after(self) -> str:
        return f"{math.ceil(self.rate_limit_window_ms / 60000)} minutes"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def check(self) -> None:
        """Reject configurations that must not reach production."""
        if self.is_production and (
            self.secret_key == FALLBACK_SECRET_KEY
            or "fallback" in self.secret_key
            or "change" in self.secret_key
        ):
            raise ConfigurationError("SECRET_KEY must be changed in production environment")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide singleton settings."""
    settings = Settings()
    settings.check()
    return settings


def reset_settings() -> None:
    """Clear the singleton (for testing)."""
    get_settings.cache_clear()
