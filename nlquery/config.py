"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from nlquery.config import get_settings

    settings = get_settings()
    print(settings.llm.model)
    print(settings.direct.connect_timeout)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Chat-completion endpoint used by the direct query path."""

    api_key: str | None = Field(
        None,
        description="Bearer token for the completion endpoint",
        validation_alias=AliasChoices("LLM_API_KEY", "MIRA_API_KEY"),
    )
    base_url: str = Field(
        default="https://api.x.ai/v1",
        description="OpenAI-compatible base URL",
    )
    model: str = Field(default="grok-2-1212", description="Model used for SQL generation")
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (SQL generation should stay near-deterministic)",
    )
    max_tokens: int | None = Field(
        default=None,
        gt=0,
        le=16000,
        description="Maximum tokens per response (None = provider default)",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds (None = client library default)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def normalize_api_key(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v


class ManagedSettings(BaseSettings):
    """Managed (Mira) query service configuration."""

    api_key: str | None = Field(None, description="Mira API key")
    base_url: str = Field(
        default="https://mira-gtsn.onrender.com/api/v1",
        description="Mira API base URL",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds (None = httpx default)",
    )

    model_config = SettingsConfigDict(
        env_prefix="MIRA_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class DirectQuerySettings(BaseSettings):
    """Direct (in-process) PostgreSQL query path configuration."""

    connect_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Connection establishment timeout in seconds",
    )
    ssl_required: bool = Field(
        default=True,
        description="Negotiate TLS with the target database",
    )
    ssl_verify: bool = Field(
        default=False,
        description=(
            "Verify the server certificate. Disabled by default: any certificate "
            "presented by the target database is accepted."
        ),
    )
    statement_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for the generated SQL in seconds (None = unbounded)",
    )
    row_limit: int = Field(
        default=100,
        gt=0,
        le=100000,
        description="Result cap requested from the model",
    )
    enforce_row_limit: bool = Field(
        default=True,
        description="Append LIMIT to generated SELECT statements that lack one",
    )
    schema_name: str = Field(default="public", description="Schema to introspect")

    model_config = SettingsConfigDict(
        env_prefix="DIRECT_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, managed, direct, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        API_HOST: API server host
        API_PORT / PORT: API server port
        CORS_ORIGINS: Comma-separated allowed origins ("*" = any)
        LLM_*: Completion endpoint configuration (see LLMSettings)
        MIRA_*: Managed query service configuration (see ManagedSettings)
        DIRECT_*: Direct query path configuration (see DirectQuerySettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.llm.model
        'grok-2-1212'
        >>> settings.direct.ssl_verify
        False
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(default="NLQuery", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(
        default=3000,
        gt=0,
        le=65535,
        description="API server port",
        validation_alias=AliasChoices("API_PORT", "PORT"),
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    managed: ManagedSettings = Field(default_factory=ManagedSettings)
    direct: DirectQuerySettings = Field(default_factory=DirectQuerySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parsed CORS origins."""
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return origins or ["*"]

    def model_post_init(self, __context) -> None:
        """Configure logging and log configuration on initialization."""
        self.logging.configure()
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "llm_model": self.llm.model,
                "ssl_verify": self.direct.ssl_verify,
            },
        )
        if not self.direct.ssl_verify:
            logger.warning(
                "TLS certificate verification is disabled for target databases "
                "(set DIRECT_SSL_VERIFY=true to enable)"
            )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("NLQUERY_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses functools.lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
