"""
Configuration Management for the Expense Tracker engine

Every knob is read from environment variables (and a .env file) through
pydantic-settings, so a bad value fails at startup instead of mid-session.

The engine talks to exactly two collaborators (the remote expense
collection and the report history slot), so each gets its own settings group.
"""

from datetime import date
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteSettings(BaseSettings):
    """Remote expense collection (REST endpoint) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_API_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3000/expenses",
        description="URL of the expense collection resource"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Item URLs are built as {base_url}/{id}."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


class StorageSettings(BaseSettings):
    """Report history storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_STORAGE_",
        extra="ignore"
    )

    directory: str = Field(
        default="./data",
        description="Directory holding the key-value slot files"
    )
    history_key: str = Field(
        default="savedReports",
        min_length=1,
        description="Name of the slot holding the saved report history"
    )


class AppSettings(BaseSettings):
    """Session defaults, read from the environment and the .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Initial year shown by the expense list filter
    default_filter_year: int = Field(
        default_factory=lambda: date.today().year,
        ge=1900,
        le=9999,
        description="Year selected in the filter when a session starts"
    )


class Settings(BaseSettings):
    """
    Entry point for all settings groups.

    Each property builds its group on access, so environment changes are
    picked up without clearing the cache.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def remote(self) -> RemoteSettings:
        return RemoteSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Return the shared Settings instance."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to build every settings group.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the groups that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("remote", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
