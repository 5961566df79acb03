"""Tests for configuration management."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from llm_usage.config import Settings, default_cache_dir, default_config_dir, get_settings


def create_test_settings(**kwargs):
    """Helper to create Settings instance without loading .env file."""
    return Settings(_env_file=None, **kwargs)


class TestSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults when no environment overrides are set."""
        for key in (
            "LLM_USAGE_CONFIG_DIR",
            "LLM_USAGE_CACHE_DIR",
            "LLM_USAGE_CLAUDE_CLI_CREDENTIALS_PATH",
        ):
            monkeypatch.delenv(key, raising=False)

        settings = create_test_settings()
        assert settings.default_provider == "claude"
        assert settings.request_timeout == 30.0
        assert settings.subscription_cache_ttl == 1800
        assert settings.log_level == "WARNING"
        assert settings.api_host == "localhost"
        assert settings.api_port == 8080
        assert settings.config_dir.name == "llm-usage"
        assert settings.claude_cli_credentials_path.name == ".credentials.json"

    def test_xdg_directories(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test XDG base directories are honoured."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))

        assert default_config_dir() == tmp_path / "xdg-config" / "llm-usage"
        assert default_cache_dir() == tmp_path / "xdg-cache" / "llm-usage"

    def test_log_file_path(self) -> None:
        """Test log file path is derived from the log directory."""
        settings = create_test_settings(log_directory="/var/log/llm")
        assert settings.log_file_path == "/var/log/llm/llm_usage.log"


class TestSettingsFromEnv:
    """Tests for environment variable loading."""

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test prefixed environment variables override defaults."""
        monkeypatch.setenv("LLM_USAGE_CONFIG_DIR", str(tmp_path / "creds"))
        monkeypatch.setenv("LLM_USAGE_DEFAULT_PROVIDER", "Kimi")
        monkeypatch.setenv("LLM_USAGE_REQUEST_TIMEOUT", "5.5")
        monkeypatch.setenv("LLM_USAGE_LOG_LEVEL", "debug")
        monkeypatch.setenv("LLM_USAGE_API_PORT", "9000")

        settings = create_test_settings()
        assert settings.config_dir == tmp_path / "creds"
        assert settings.default_provider == "kimi"
        assert settings.request_timeout == 5.5
        assert settings.log_level == "DEBUG"
        assert settings.api_port == 9000

    def test_get_settings_is_cached(self) -> None:
        """Test get_settings returns the same instance until cleared."""
        first = get_settings()
        assert get_settings() is first

        get_settings.cache_clear()
        assert get_settings() is not first


class TestSettingsValidation:
    """Tests for field validators."""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            create_test_settings(log_level="LOUD")

    @pytest.mark.parametrize("field", ["request_timeout", "subscription_cache_ttl"])
    def test_non_positive_durations(self, field: str) -> None:
        with pytest.raises(ValidationError):
            create_test_settings(**{field: 0})

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_out_of_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            create_test_settings(api_port=port)

    def test_unknown_default_provider(self) -> None:
        with pytest.raises(ValidationError):
            create_test_settings(default_provider="openai")
