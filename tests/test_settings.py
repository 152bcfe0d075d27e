"""Тесты загрузки конфигурации из окружения."""

import pytest

from store_fetcher.config import ConfigValidationError, load_settings

ENV_KEYS = (
    "METADATA_HOST",
    "STOCK_HOST",
    "REQUEST_TIMEOUT",
    "STOCK_CONCURRENCY",
    "DB_PATH",
    "LOG_LEVEL",
    "LOG_FILE_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings()

        assert settings.upstream.metadata_host == "http://store.metadata.api.co.uk"
        assert settings.upstream.stock_host == "http://stock.api.co.uk"
        assert settings.upstream.stock_concurrency == 10
        assert settings.upstream.request_timeout == 30.0
        assert settings.database.db_path == "data/store_products.db"
        assert settings.log.level == "INFO"
        assert settings.log.file_path == ""

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("METADATA_HOST", "https://meta.example.com/")
        monkeypatch.setenv("STOCK_HOST", "http://localhost:8081")
        monkeypatch.setenv("REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("STOCK_CONCURRENCY", "4")
        monkeypatch.setenv("DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.upstream.metadata_host == "https://meta.example.com"
        assert settings.upstream.stock_host == "http://localhost:8081"
        assert settings.upstream.request_timeout == 2.5
        assert settings.upstream.stock_concurrency == 4
        assert settings.database.db_path == "/tmp/x.db"
        assert settings.log.level == "DEBUG"

    @pytest.mark.parametrize("key,value", [
        ("METADATA_HOST", "ftp://meta"),
        ("STOCK_HOST", "not a url"),
        ("REQUEST_TIMEOUT", "0"),
        ("REQUEST_TIMEOUT", "soon"),
        ("STOCK_CONCURRENCY", "0"),
        ("STOCK_CONCURRENCY", "ten"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, monkeypatch, key, value):
        monkeypatch.setenv(key, value)

        with pytest.raises(ConfigValidationError, match=key):
            load_settings()

    def test_all_errors_reported_together(self, monkeypatch):
        monkeypatch.setenv("STOCK_CONCURRENCY", "-1")
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings()

        message = str(exc_info.value)
        assert "STOCK_CONCURRENCY" in message
        assert "LOUD" in message
