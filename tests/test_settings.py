"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values for every settings group
- Loading nested settings from environment variables
- Custom validators (provider URLs, HTTP statuses, log level)
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from genre_player.config.settings import (
    PlaybackSettings,
    PrefetchSettings,
    ProviderSettings,
    RetrySettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from genre_player.domain.shared.enums import ProviderKind


@pytest.fixture(autouse=True)
def _no_env_file(monkeypatch, tmp_path):
    """Run from an empty directory so a developer's .env never leaks in."""
    monkeypatch.chdir(tmp_path)


class TestProviderSettings:
    def test_defaults(self):
        provider = ProviderSettings()

        assert provider.kind == ProviderKind.FREESOUND
        assert provider.base_url == "https://freesound.org/apiv2"
        assert provider.api_key.get_secret_value() == ""
        assert provider.timeout_seconds == 30.0
        assert provider.page_size == 10
        assert provider.duration_filter == "duration:[100 TO 180]"
        assert provider.musicgen_url == ""

    def test_url_trailing_slash_is_stripped(self):
        provider = ProviderSettings(base_url="https://freesound.test/apiv2/")

        assert provider.base_url == "https://freesound.test/apiv2"

    def test_invalid_url_scheme(self):
        with pytest.raises(ValidationError, match="must start with"):
            ProviderSettings(musicgen_url="ftp://musicgen.test")

    def test_aliases(self):
        provider = ProviderSettings(token="abc", timeout=5)

        assert provider.api_key == SecretStr("abc")
        assert provider.timeout_seconds == 5

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProviderSettings(timeout_seconds=0)

    def test_api_key_is_masked(self):
        provider = ProviderSettings(api_key="secret-key")

        assert "secret-key" not in repr(provider)


class TestRetrySettings:
    def test_defaults(self):
        retry = RetrySettings()

        assert retry.max_attempts == 3
        assert retry.backoff_base_seconds == 0.6
        assert retry.retryable_statuses == (408, 429, 500, 502, 503, 504)

    def test_statuses_from_string(self):
        retry = RetrySettings(retryable_statuses="429, 503")

        assert retry.retryable_statuses == (429, 503)

    def test_invalid_status(self):
        with pytest.raises(ValidationError, match="HTTP status"):
            RetrySettings(retryable_statuses=[999])

    def test_attempt_bounds(self):
        with pytest.raises(ValidationError):
            RetrySettings(max_attempts=0)


class TestSmallGroups:
    def test_prefetch_defaults(self):
        prefetch = PrefetchSettings()

        assert prefetch.enabled is True
        assert prefetch.threshold_seconds == 10.0

    def test_playback_defaults(self):
        assert PlaybackSettings().seek_tolerance_seconds == 0.25

    def test_frozen(self):
        prefetch = PrefetchSettings()

        with pytest.raises(ValidationError):
            prefetch.enabled = False


class TestSettingsFromEnvironment:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.provider.kind == ProviderKind.FREESOUND

    def test_nested_variables(self, monkeypatch):
        monkeypatch.setenv("PROVIDER__KIND", "musicgen")
        monkeypatch.setenv("PROVIDER__MUSICGEN_URL", "https://musicgen.test/generate")
        monkeypatch.setenv("PROVIDER__API_KEY", "env-key")
        monkeypatch.setenv("RETRY__MAX_ATTEMPTS", "5")
        monkeypatch.setenv("PREFETCH__THRESHOLD_SECONDS", "15")
        monkeypatch.setenv("PLAYBACK__SEEK_TOLERANCE_SECONDS", "0.5")

        settings = Settings()

        assert settings.provider.kind == ProviderKind.MUSICGEN
        assert settings.provider.musicgen_url == "https://musicgen.test/generate"
        assert settings.provider.api_key.get_secret_value() == "env-key"
        assert settings.retry.max_attempts == 5
        assert settings.prefetch.threshold_seconds == 15.0
        assert settings.playback.seek_tolerance_seconds == 0.5

    def test_retryable_statuses_from_comma_list(self, monkeypatch):
        monkeypatch.setenv("RETRY__RETRYABLE_STATUSES", "429,503")

        assert Settings().retry.retryable_statuses == (429, 503)

    def test_type_coercion_from_strings(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        monkeypatch.setenv("PREFETCH__ENABLED", "no")

        settings = Settings()

        assert settings.debug is True
        assert settings.prefetch.enabled is False

    def test_log_level_validation_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_log_level_validation_invalid(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings()

    def test_environment_validation(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")

        with pytest.raises(ValidationError):
            Settings()

    def test_nested_validation_propagates(self, monkeypatch):
        monkeypatch.setenv("PROVIDER__BASE_URL", "freesound.org")

        with pytest.raises(ValidationError):
            Settings()

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("PREFETCH__THRESHOLD_SECONDS=20\n", encoding="utf-8")

        assert Settings().prefetch.threshold_seconds == 20.0


class TestSettingsCache:
    def test_get_settings_returns_cached_instance(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "test")
        first = get_settings()
        monkeypatch.setenv("ENVIRONMENT", "production")

        assert get_settings() is first

        clear_settings_cache()

        assert get_settings().environment == "production"
