"""Configuration management for llm-usage."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "llm-usage"
KNOWN_PROVIDERS = ("claude", "kimi", "zai", "minimax")


def _xdg_dir(env_var: str, fallback: str) -> Path:
    base = os.environ.get(env_var) or str(Path.home() / fallback)
    return Path(base) / APP_DIR_NAME


def default_config_dir() -> Path:
    """Directory holding one credential document per provider."""
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def default_cache_dir() -> Path:
    """Directory holding one cache entry file per cache key."""
    return _xdg_dir("XDG_CACHE_HOME", ".cache")


def default_claude_cli_path() -> Path:
    """Credential file written by the Claude CLI."""
    return Path.home() / ".claude" / ".credentials.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_USAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    config_dir: Path = Field(
        default_factory=default_config_dir,
        description="Directory for provider credential documents",
    )
    cache_dir: Path = Field(
        default_factory=default_cache_dir,
        description="Directory for cached subscription lookups",
    )
    claude_cli_credentials_path: Path = Field(
        default_factory=default_claude_cli_path,
        description="Claude CLI credentials file (legacy single-account source)",
    )

    # Providers
    default_provider: str = Field(
        default="claude", description="Provider queried when nothing is configured"
    )
    request_timeout: float = Field(
        default=30.0, description="Timeout in seconds for each provider API request"
    )
    subscription_cache_ttl: int = Field(
        default=1800, description="Subscription lookup cache TTL in seconds (default 30 min)"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=3, description="Number of rotated log files to keep"
    )

    # HTTP API
    api_host: str = Field(default="localhost", description="HTTP API bind host")
    api_port: int = Field(default=8080, description="HTTP API port")

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/llm_usage.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is a known logging level name."""
        if not isinstance(logging.getLevelName(v.upper()), int):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    @field_validator("request_timeout", "subscription_cache_ttl")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate durations are strictly positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got: {v}")
        return v

    @field_validator("api_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate the port is in the TCP range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"api_port must be between 1 and 65535, got: {v}")
        return v

    @field_validator("default_provider")
    @classmethod
    def validate_default_provider(cls, v: str) -> str:
        """Validate the default provider is one we know how to query."""
        v = v.strip().lower()
        if v not in KNOWN_PROVIDERS:
            raise ValueError(f"default_provider must be one of {list(KNOWN_PROVIDERS)}, got: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
