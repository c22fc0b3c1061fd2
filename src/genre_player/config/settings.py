"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..domain.shared.enums import ProviderKind
from ..domain.shared.messages import ErrorMessages


class ProviderSettings(BaseModel):
    """Remote track provider configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    kind: ProviderKind = ProviderKind.FREESOUND
    base_url: str = Field(
        default="https://freesound.org/apiv2",
        validation_alias=AliasChoices("base_url", "freesound_url", "url"),
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("api_key", "freesound_api_key", "token"),
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        validation_alias=AliasChoices("timeout_seconds", "timeout"),
    )
    search_path: str = "/search/text/"
    page_size: int = Field(default=10, ge=1, le=150)
    search_fields: str = "id,name,previews,duration"
    duration_filter: str = "duration:[100 TO 180]"
    sort: str = "rating_desc"
    tempo_lookup: bool = True

    musicgen_url: str = Field(
        default="",
        validation_alias=AliasChoices("musicgen_url", "musicgen_api_url"),
    )
    musicgen_temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    musicgen_seed: int = -1
    musicgen_duration_seconds: float = Field(default=47.0, gt=0.0, le=600.0)

    @field_validator("base_url", "musicgen_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate provider URL format."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(ErrorMessages.INVALID_PROVIDER_URL.format(url=v))
        return v.rstrip("/")


class RetrySettings(BaseModel):
    """Retry policy for provider calls."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    max_attempts: int = Field(
        default=3, ge=1, le=10, validation_alias=AliasChoices("max_attempts", "attempts")
    )
    backoff_base_seconds: float = Field(
        default=0.6,
        ge=0.0,
        le=30.0,
        validation_alias=AliasChoices("backoff_base_seconds", "backoff_base"),
    )
    retryable_statuses: Annotated[tuple[int, ...], NoDecode] = (408, 429, 500, 502, 503, 504)

    @field_validator("retryable_statuses", mode="before")
    @classmethod
    def validate_statuses(cls, v: tuple[int, ...] | list[int] | str) -> tuple[int, ...]:
        """Accept a list, a tuple or a comma-separated string of HTTP status codes."""
        if isinstance(v, str):
            v = [int(part) for part in v.split(",") if part.strip()]
        statuses = tuple(int(code) for code in v)
        for code in statuses:
            if not 100 <= code <= 599:
                raise ValueError(ErrorMessages.INVALID_HTTP_STATUS.format(status=code))
        return statuses


class PrefetchSettings(BaseModel):
    """Background prefetch configuration."""

    model_config = SettingsConfigDict(frozen=True)

    enabled: bool = True
    threshold_seconds: float = Field(default=10.0, gt=0.0, le=600.0)


class PlaybackSettings(BaseModel):
    """Playback synchronization configuration."""

    model_config = SettingsConfigDict(frozen=True)

    seek_tolerance_seconds: float = Field(default=0.25, ge=0.0, le=5.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - PROVIDER__KIND, PROVIDER__API_KEY, PROVIDER__TIMEOUT_SECONDS, ...
    - RETRY__MAX_ATTEMPTS, RETRY__BACKOFF_BASE_SECONDS, RETRY__RETRYABLE_STATUSES
    - PREFETCH__ENABLED, PREFETCH__THRESHOLD_SECONDS
    - PLAYBACK__SEEK_TOLERANCE_SECONDS
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    prefetch: PrefetchSettings = Field(default_factory=PrefetchSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
