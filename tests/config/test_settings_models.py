"""
Tests for the configuration models.
"""

import pytest
from pydantic import ValidationError

from storefront_query.config import ApiSettings, LoggingSettings, QuerySettings, Settings


class TestApiSettings:
    def test_defaults(self):
        settings = ApiSettings()

        assert settings.base_url == "http://localhost:5002/api"
        assert settings.timeout == 10
        assert settings.auth_token == ""

    def test_trailing_slash_is_stripped(self):
        assert ApiSettings(base_url="https://shop.example.com/api/").base_url == (
            "https://shop.example.com/api"
        )

    @pytest.mark.parametrize("base_url", ["shop.example.com/api", "ftp://shop.example.com"])
    def test_relative_or_non_http_url_is_rejected(self, base_url):
        with pytest.raises(ValidationError):
            ApiSettings(base_url=base_url)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ApiSettings(timeout=0)

    def test_repr_masks_token(self):
        """The bearer token never shows up in repr output."""
        text = repr(ApiSettings(auth_token="super-secret"))

        assert "super-secret" not in text
        assert "auth_token=****" in text
        assert "auth_token=[empty]" in repr(ApiSettings())


class TestQuerySettings:
    def test_defaults(self):
        settings = QuerySettings()

        assert settings.stale_time == 5 * 60
        assert settings.gc_time == 10 * 60
        assert settings.retry_attempts == 3
        assert settings.retry_delay == 1
        assert settings.retry_delay_max == 30

    def test_negative_values_are_rejected(self):
        with pytest.raises(ValidationError):
            QuerySettings(retry_attempts=-1)

    def test_base_delay_above_cap_is_rejected(self):
        with pytest.raises(ValidationError):
            QuerySettings(retry_delay=60, retry_delay_max=30)


class TestLoggingSettings:
    def test_level_is_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level_is_rejected(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")


class TestSettingsEnvironment:
    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API__BASE_URL", "https://shop.example.com/api")
        monkeypatch.setenv("STOREFRONT_QUERY__RETRY_ATTEMPTS", "1")
        monkeypatch.setenv("STOREFRONT_LOGGING__LEVEL", "warning")

        settings = Settings()

        assert settings.api.base_url == "https://shop.example.com/api"
        assert settings.query.retry_attempts == 1
        assert settings.logging.level == "WARNING"

    def test_empty_variable_is_ignored(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API__BASE_URL", "")

        assert Settings().api.base_url == "http://localhost:5002/api"

    def test_toml_round_trip(self, tmp_path):
        path = tmp_path / "config" / "config.toml"
        settings = Settings(
            api={"base_url": "https://shop.example.com/api", "timeout": 4},
            query={"gc_time": 120},
        )

        settings.to_toml_file(path)
        loaded = Settings.from_toml_file(path)

        assert loaded.api.base_url == "https://shop.example.com/api"
        assert loaded.api.timeout == 4
        assert loaded.query.gc_time == 120

    def test_missing_toml_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_toml_file(tmp_path / "missing.toml")
