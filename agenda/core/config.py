"""Application configuration using pydantic-settings."""

from __future__ import annotations

import re
from datetime import timedelta, timezone, tzinfo
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):(\d{2})$")


def parse_utc_offset(value: str) -> timezone:
    """Convert a "+HH:MM" / "-HH:MM" string into a fixed-offset timezone."""
    match = _OFFSET_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid UTC offset {value!r}, expected +HH:MM or -HH:MM")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        raise ValueError(f"UTC offset {value!r} is out of range")
    return timezone(-delta if sign == "-" else delta)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend base URL (used to construct the OAuth redirect URI)
    backend_url: str = "http://localhost:8000"

    # Language model configuration (LangChain "provider:model" identifier)
    google_api_key: str | None = None
    llm_model: str = "google_genai:gemini-2.0-flash"
    llm_temperature: float = 0.2

    # Google OAuth configuration
    google_client_id: str | None = None
    google_client_secret: str | None = None
    # Full redirect URI override (if set, takes precedence over constructed URI)
    google_oauth_redirect_uri: str | None = None
    google_oauth_redirect_path: str = "/auth/google/callback"
    google_oauth_scopes: list[str] = [
        "openid",
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/userinfo.profile",
        "https://www.googleapis.com/auth/calendar",
    ]

    # Session cookie
    session_secret: str = "agenda-assistant-dev-secret"
    session_max_age: int = 24 * 60 * 60

    # Calendar interpretation
    utc_offset: str = "-03:00"
    calendar_id: str = "primary"
    interpretation_languages: list[str] = ["en"]
    calendar_timeout: float = 15.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("utc_offset")
    @classmethod
    def _validate_utc_offset(cls, value: str) -> str:
        parse_utc_offset(value)
        return value.strip()

    @property
    def timezone(self) -> tzinfo:
        """Fixed-offset timezone every instant is interpreted in."""
        return parse_utc_offset(self.utc_offset)

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def google_oauth_redirect_uri_resolved(self) -> str:
        """Get the Google OAuth redirect URI.

        Priority:
        1. If google_oauth_redirect_uri is set, use it (full override)
        2. Otherwise, construct from backend_url + google_oauth_redirect_path
        """
        if self.google_oauth_redirect_uri:
            return self.google_oauth_redirect_uri
        base = self.backend_url.rstrip("/")
        path = self.google_oauth_redirect_path.lstrip("/")
        return f"{base}/{path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
