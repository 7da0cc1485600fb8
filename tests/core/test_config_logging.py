"""Tests for settings and logging configuration.

Tests cover:
- Settings defaults and environment overrides
- Link budget setting rejects negative values
- setup_logging installs a JSON or text formatter on stdout
- CustomJsonFormatter adds timestamp, level and logger fields
- LinkInjectionLogger emits structured records
"""

import json
import logging
from collections.abc import Generator

import pytest
from pydantic import ValidationError

from article_linker.core import config as config_module
from article_linker.core.config import Settings, get_settings
from article_linker.core.logging import (
    CustomJsonFormatter,
    link_logger,
    setup_logging,
)


@pytest.fixture
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DEFAULT_LOCALE", raising=False)
        monkeypatch.delenv("MAX_LINKS_PER_ARTICLE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.default_locale == "pt-BR"
        assert settings.max_links_per_article == 1
        assert settings.log_format == "json"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_LOCALE", "en-US")
        monkeypatch.setenv("MAX_LINKS_PER_ARTICLE", "3")
        settings = Settings(_env_file=None)
        assert settings.default_locale == "en-US"
        assert settings.max_links_per_article == 3

    def test_negative_budget_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_links_per_article=-1)

    def test_get_settings_is_cached(self, clear_settings_cache: None) -> None:
        assert config_module.get_settings() is config_module.get_settings()


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self) -> Generator[None, None, None]:
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format(
        self, monkeypatch: pytest.MonkeyPatch, clear_settings_cache: None
    ) -> None:
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)

    def test_text_format(
        self, monkeypatch: pytest.MonkeyPatch, clear_settings_cache: None
    ) -> None:
        monkeypatch.setenv("LOG_FORMAT", "text")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, CustomJsonFormatter)


class TestCustomJsonFormatter:
    def test_adds_fields(self) -> None:
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = logging.LogRecord(
            name="link_injection",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Internal links injected",
            args=None,
            exc_info=None,
        )
        record.links_created = 2

        data = json.loads(formatter.format(record))

        assert data["message"] == "Internal links injected"
        assert data["level"] == "INFO"
        assert data["logger"] == "link_injection"
        assert data["links_created"] == 2
        assert "timestamp" in data


class TestLinkInjectionLogger:
    def test_injection_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="link_injection"):
            link_logger.injection_complete(
                candidates=2, links_created=1, content_length=40, locale="en-US"
            )

        (record,) = caplog.records
        assert record.getMessage() == "Internal links injected"
        assert record.links_created == 1
        assert record.locale == "en-US"

    def test_budget_exhausted_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="link_injection"):
            link_logger.budget_exhausted("a1", existing=1, budget=1)

        (record,) = caplog.records
        assert record.levelno == logging.DEBUG
        assert record.article_id == "a1"
