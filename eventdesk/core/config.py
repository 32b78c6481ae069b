"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_CORS_ORIGINS = ["*"]

GOOGLE_REQUIRED_SETTINGS = (
    "google_oauth_client_id",
    "google_oauth_client_secret",
    "google_redirect_uri",
    "oauth_state_secret",
)

DOCUSIGN_REQUIRED_SETTINGS = (
    "docusign_client_id",
    "docusign_client_secret",
    "docusign_account_id",
    "docusign_redirect_uri",
    "oauth_state_secret",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./eventdesk.db"
    """Database connection URL (asyncpg driver against Supabase Postgres)."""

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    """Redis connection URL for OAuth state nonces."""

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    timezone: str = "America/New_York"
    """Local timezone used for calendar event start/end times."""

    # NoDecode prevents pydantic-settings from forcing JSON parsing at the
    # env-source layer, so we can accept either JSON arrays or CSV strings.
    cors_origins: Annotated[list[str], NoDecode] = DEFAULT_CORS_ORIGINS
    """Origins allowed to call the API."""

    # Caller identity (Supabase auth JWT)
    supabase_jwt_secret: str | None = None
    """HS256 secret used to verify Supabase access tokens."""

    supabase_jwt_audience: str = "authenticated"
    """Expected `aud` claim on Supabase access tokens."""

    # OAuth state
    oauth_state_secret: str | None = None
    """HMAC key for signed OAuth state tokens (shared by all providers)."""

    oauth_state_ttl_seconds: int = 900
    """Lifetime of an OAuth state token."""

    provider_timeout_seconds: float = 30.0
    """Timeout for calls to Google and DocuSign."""

    # Google Calendar
    google_oauth_client_id: str | None = None
    google_oauth_client_secret: str | None = None
    google_redirect_uri: str | None = None
    """Public URL of GET /google-calendar/callback."""

    google_auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_calendar_api_url: str = (
        "https://www.googleapis.com/calendar/v3/calendars/primary/events"
    )

    event_duration_hours: int = 2
    """Fixed duration of calendar entries created for events."""

    # DocuSign
    docusign_client_id: str | None = None
    docusign_client_secret: str | None = None
    docusign_account_id: str | None = None
    docusign_redirect_uri: str | None = None
    """Public URL of GET /docusign/callback."""

    docusign_auth_url: str = "https://account-d.docusign.com/oauth/auth"
    docusign_token_url: str = "https://account-d.docusign.com/oauth/token"
    docusign_api_base_url: str = "https://demo.docusign.net/restapi/v2.1"

    docusign_template_id: str = "b2a9dca2-bb0e-429c-96f3-f28e6889e6c8"
    """Contract template used by the send-contract action."""

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Parse CORS origins from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_CORS_ORIGINS.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_origins(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None:
                raise ValueError(
                    "CORS_ORIGINS must be a JSON array or comma-separated string."
                )

            # Fallback: comma-separated values
            return _normalize_origins(text.split(","))

        if isinstance(value, (list, tuple, set)):
            return _normalize_origins(value)

        raise ValueError("CORS_ORIGINS must be a string, list, tuple, or set.")

    def missing_google_settings(self) -> list[str]:
        """Names of unset settings the Google integration needs."""
        return [name.upper() for name in GOOGLE_REQUIRED_SETTINGS if not getattr(self, name)]

    def missing_docusign_settings(self) -> list[str]:
        """Names of unset settings the DocuSign integration needs."""
        return [
            name.upper() for name in DOCUSIGN_REQUIRED_SETTINGS if not getattr(self, name)
        ]


def _normalize_origins(values: Iterable[object]) -> list[str]:
    """Normalize and dedupe origins while preserving declaration order."""
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"').rstrip("/")
        if not item or item in seen:
            continue
        normalized.append(item)
        seen.add(item)

    if not normalized:
        return DEFAULT_CORS_ORIGINS.copy()
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Check DATABASE_URL and the provider settings.",
        "Allowed values for CORS_ORIGINS are:",
        '  1) ["https://app.example.com","http://localhost:5173"]',
        "  2) https://app.example.com,http://localhost:5173",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
