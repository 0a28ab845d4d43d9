"""Unit tests for function configuration."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from src.core.config import (
    DEFAULT_GEMINI_API_URL,
    DEFAULT_MIME_TYPE,
    DEFAULT_STORAGE_BUCKET,
    Settings,
    get_settings,
)
from src.core.exceptions import ConfigurationError

REQUIRED_ENV = {
    "GEMINI_API_KEY": "gemini-key",
    "SUPABASE_URL": "https://project.supabase.co",
    "SUPABASE_SERVICE_KEY": "service-key",
}


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_required_values(self) -> None:
        """Test loading the required variables with defaults for the rest."""
        settings = Settings.from_env(REQUIRED_ENV)

        assert settings.gemini_api_key == "gemini-key"
        assert settings.supabase_url == "https://project.supabase.co"
        assert settings.supabase_key == "service-key"
        assert settings.gemini_api_url == DEFAULT_GEMINI_API_URL
        assert settings.storage_bucket == DEFAULT_STORAGE_BUCKET
        assert settings.default_mime_type == DEFAULT_MIME_TYPE

    def test_overrides(self) -> None:
        """Test optional variables."""
        settings = Settings.from_env(
            {
                **REQUIRED_ENV,
                "GEMINI_API_URL": "https://example.test/generate",
                "STORAGE_BUCKET": "tax-docs",
                "DEFAULT_MIME_TYPE": "image/png",
            }
        )

        assert settings.gemini_api_url == "https://example.test/generate"
        assert settings.storage_bucket == "tax-docs"
        assert settings.default_mime_type == "image/png"

    def test_anon_key_fallback(self) -> None:
        """Test that the anon key is used when no service key is set."""
        env = {k: v for k, v in REQUIRED_ENV.items() if k != "SUPABASE_SERVICE_KEY"}
        env["SUPABASE_ANON_KEY"] = "anon-key"

        settings = Settings.from_env(env)

        assert settings.supabase_key == "anon-key"

    def test_service_key_preferred(self) -> None:
        """Test that the service key wins over the anon key."""
        settings = Settings.from_env({**REQUIRED_ENV, "SUPABASE_ANON_KEY": "anon-key"})

        assert settings.supabase_key == "service-key"

    def test_missing_all_raises(self) -> None:
        """Test that every missing variable is reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env({})

        assert exc_info.value.missing == ["GEMINI_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_KEY"]
        assert exc_info.value.status_code == 500

    def test_empty_value_counts_as_missing(self) -> None:
        """Test that empty strings are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env({**REQUIRED_ENV, "GEMINI_API_KEY": ""})

        assert exc_info.value.missing == ["GEMINI_API_KEY"]

    def test_repr_hides_secrets(self) -> None:
        """Test that keys are excluded from repr."""
        settings = Settings.from_env(REQUIRED_ENV)

        assert "gemini-key" not in repr(settings)
        assert "service-key" not in repr(settings)
        assert "https://project.supabase.co" in repr(settings)


class TestGetSettings:
    """Tests for get_settings."""

    def setup_method(self) -> None:
        get_settings.cache_clear()

    def teardown_method(self) -> None:
        get_settings.cache_clear()

    def test_reads_os_environ_once(self) -> None:
        """Test that settings are cached."""
        with patch.dict("os.environ", REQUIRED_ENV, clear=True):
            first = get_settings()
            second = get_settings()

        assert first is second

    def test_missing_environment_raises(self) -> None:
        """Test fail-fast on missing configuration."""
        with patch.dict("os.environ", {}, clear=True), pytest.raises(ConfigurationError):
            get_settings()
