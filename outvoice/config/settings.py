"""
Configuration Management for Outvoice

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The Supabase credentials are optional: without them the app runs
against the in-memory preview backend instead of failing at startup.
"""

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Hosted backend (auth + tables) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="",
        description="Supabase project URL"
    )
    key: str = Field(
        default="",
        description="Supabase anon (public) API key"
    )

    # Table names
    invoices_table: str = Field(
        default="invoices",
        description="Table holding invoice rows"
    )
    profiles_table: str = Field(
        default="profiles",
        description="Table holding user profile rows"
    )

    redirect_url: str = Field(
        default="outvoice://login-callback",
        description="OAuth redirect (deep link) target"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """An empty URL is allowed (preview mode); anything else must be http(s)."""
        v = v.strip()
        if v and urlparse(v).scheme not in ("http", "https"):
            raise ValueError(f"Supabase URL must be http(s): {v}")
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """True when both URL and key are present."""
        return bool(self.url and self.key)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the stdlib logger behind structlog"
    )

    # Force fabricated data even when Supabase is configured
    use_preview_data: bool = Field(
        default=False,
        description="Run against the in-memory preview backend"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def use_live_backend(self) -> bool:
        """Live backend only when configured and preview data is not forced."""
        return self.supabase.is_configured and not self.app.use_preview_data


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus "<name>_error"
    entries for the ones that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    try:
        supabase = settings.supabase
        results["supabase"] = supabase.is_configured
        if not supabase.is_configured:
            results["supabase_error"] = "SUPABASE_URL / SUPABASE_KEY not set"
    except Exception as e:
        results["supabase"] = False
        results["supabase_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
