"""
Tests for settings loading and the global settings singleton.
"""

import logging
import threading

import pytest

from storefront_query.config import (
    configure_logging,
    get_config,
    load_settings,
    reload_config,
    reset_config,
)
from storefront_query.config.models import Settings
from storefront_query.shared.errors import ApplicationError, ErrorCode


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test from an empty directory (no config.toml, no .env)."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestLoadSettings:
    def test_defaults_without_sources(self, workdir):
        settings = load_settings()

        assert settings.api.base_url == "http://localhost:5002/api"

    def test_explicit_toml_file(self, workdir):
        path = workdir / "custom.toml"
        path.write_text('[api]\nbase_url = "https://shop.example.com/api"\n', encoding="utf-8")

        settings = load_settings(path)

        assert settings.api.base_url == "https://shop.example.com/api"

    def test_default_location_is_discovered(self, workdir):
        (workdir / "config").mkdir()
        (workdir / "config" / "config.toml").write_text(
            "[query]\ngc_time = 90\n", encoding="utf-8"
        )

        assert load_settings().query.gc_time == 90

    def test_environment_fills_sections_missing_from_file(self, workdir, monkeypatch):
        monkeypatch.setenv("STOREFRONT_QUERY__RETRY_ATTEMPTS", "0")
        path = workdir / "custom.toml"
        path.write_text('[api]\nbase_url = "https://shop.example.com/api"\n', encoding="utf-8")

        settings = load_settings(path)

        assert settings.query.retry_attempts == 0

    def test_dotenv_file_is_loaded(self, workdir, monkeypatch):
        # Registered first so teardown removes the value written by load_dotenv
        monkeypatch.setenv("STOREFRONT_API__TIMEOUT", "1")
        monkeypatch.delenv("STOREFRONT_API__TIMEOUT")
        (workdir / ".env").write_text("STOREFRONT_API__TIMEOUT=7\n", encoding="utf-8")

        assert load_settings().api.timeout == 7

    def test_environment_wins_over_dotenv(self, workdir, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API__TIMEOUT", "3")
        (workdir / ".env").write_text("STOREFRONT_API__TIMEOUT=7\n", encoding="utf-8")

        assert load_settings().api.timeout == 3

    def test_invalid_configuration(self, workdir, monkeypatch):
        monkeypatch.setenv("STOREFRONT_QUERY__RETRY_ATTEMPTS", "-1")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings()

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert exc_info.value.context.operation == "load_settings"

    def test_malformed_toml_file(self, workdir):
        (workdir / "config.toml").write_text("[api\nbase_url = \n", encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings()

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert exc_info.value.context.operation == "load_settings"
        assert exc_info.value.context.additional_data == {"config_key": "config.toml"}

    def test_missing_explicit_file(self, workdir):
        with pytest.raises(FileNotFoundError):
            load_settings(workdir / "missing.toml")


class TestGlobalSettings:
    def test_get_config_is_cached(self, workdir):
        assert get_config() is get_config()

    def test_reload_replaces_instance(self, workdir, monkeypatch):
        first = get_config()
        monkeypatch.setenv("STOREFRONT_API__TIMEOUT", "2")

        second = reload_config()

        assert second is not first
        assert second.api.timeout == 2
        assert get_config() is second

    def test_reset_forgets_instance(self, workdir):
        first = get_config()
        reset_config()

        assert get_config() is not first

    def test_concurrent_first_access(self, workdir):
        """All threads racing on first access observe one instance."""
        results: list[Settings] = []

        def worker() -> None:
            results.append(get_config())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(settings) for settings in results}) == 1


class TestConfigureLogging:
    @pytest.fixture
    def package_logger(self):
        logger = logging.getLogger("storefront_query")
        yield logger
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_applies_logging_section(self, package_logger, tmp_path):
        settings = Settings(
            logging={
                "level": "debug",
                "file": str(tmp_path / "query.log"),
                "console_output": False,
            }
        )

        logger = configure_logging(settings)

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert [type(handler) for handler in logger.handlers] == [logging.FileHandler]
