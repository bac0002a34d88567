"""
Unit tests for configuration module.

Tests settings loading, validation, nested configuration, and caching.
"""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from nlquery.config import (
    DirectQuerySettings,
    LLMSettings,
    LoggingSettings,
    ManagedSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestLLMSettings:
    """Test completion endpoint configuration."""

    def test_defaults(self):
        settings = LLMSettings()

        assert settings.api_key == "xai-test-key-1234567890"
        assert settings.base_url == "https://api.x.ai/v1"
        assert settings.model == "grok-2-1212"
        assert settings.temperature == 0.1
        assert settings.max_tokens is None
        assert settings.timeout is None

    def test_falls_back_to_mira_api_key(self, monkeypatch):
        """The Mira key doubles as the completion key when LLM_API_KEY is unset."""
        monkeypatch.delenv("LLM_API_KEY")
        monkeypatch.setenv("MIRA_API_KEY", "mira-shared-key")

        assert LLMSettings().api_key == "mira-shared-key"

    def test_llm_api_key_wins(self, monkeypatch):
        monkeypatch.setenv("MIRA_API_KEY", "mira-shared-key")

        assert LLMSettings().api_key == "xai-test-key-1234567890"

    def test_empty_api_key_is_missing(self, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "")

        assert LLMSettings().api_key is None

    def test_custom_settings(self, monkeypatch):
        monkeypatch.setenv("LLM_BASE_URL", "https://api.openai.com/v1")
        monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("LLM_TIMEOUT", "20")

        settings = LLMSettings()

        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.model == "gpt-4o-mini"
        assert settings.timeout == 20.0

    def test_temperature_validation(self, monkeypatch):
        monkeypatch.setenv("LLM_TEMPERATURE", "3.0")

        with pytest.raises(ValidationError, match="less than or equal to 2"):
            LLMSettings()


class TestManagedSettings:
    def test_defaults(self):
        settings = ManagedSettings()

        assert settings.api_key is None
        assert settings.base_url == "https://mira-gtsn.onrender.com/api/v1"
        assert settings.timeout is None

    def test_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("MIRA_BASE_URL", "https://mira.example.com/api/v1/")

        assert ManagedSettings().base_url == "https://mira.example.com/api/v1"


class TestDirectQuerySettings:
    def test_defaults(self):
        settings = DirectQuerySettings()

        assert settings.connect_timeout == 30.0
        assert settings.ssl_required is True
        assert settings.ssl_verify is False
        assert settings.statement_timeout is None
        assert settings.row_limit == 100
        assert settings.enforce_row_limit is True
        assert settings.schema_name == "public"

    def test_enable_certificate_verification(self, monkeypatch):
        monkeypatch.setenv("DIRECT_SSL_VERIFY", "true")

        assert DirectQuerySettings().ssl_verify is True

    def test_row_limit_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("DIRECT_ROW_LIMIT", "0")

        with pytest.raises(ValidationError):
            DirectQuerySettings()


class TestLoggingSettings:
    def test_invalid_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")

        with pytest.raises(ValidationError):
            LoggingSettings()

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "nlquery.log"

        LoggingSettings(level="DEBUG", file=log_file).configure()

        assert log_file.parent.exists()
        file_handlers = [
            handler
            for handler in logging.getLogger().handlers
            if isinstance(handler, logging.FileHandler)
        ]
        assert file_handlers
        for handler in file_handlers:
            handler.close()
            logging.getLogger().removeHandler(handler)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.app_name == "NLQuery"
        assert settings.environment == "development"
        assert settings.api_port == 3000
        assert settings.cors_origin_list == ["*"]
        assert settings.llm.model == "grok-2-1212"
        assert settings.direct.row_limit == 100

    @pytest.mark.parametrize("name", ["PORT", "API_PORT"])
    def test_port_from_environment(self, monkeypatch, name):
        monkeypatch.setenv(name, "8080")

        assert Settings().api_port == 8080

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "70000")

        with pytest.raises(ValidationError):
            Settings()

    def test_cors_origins_parsed(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, https://app.example.com,")

        assert Settings().cors_origin_list == [
            "http://localhost:5173",
            "https://app.example.com",
        ]

    def test_warns_when_certificate_verification_disabled(self, caplog):
        with patch.object(LoggingSettings, "configure"):
            Settings()

        assert "TLS certificate verification is disabled" in caplog.text


class TestSettingsCache:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("PORT", "4000")

        clear_settings_cache()
        second = get_settings()

        assert second is not first
        assert second.api_port == 4000
