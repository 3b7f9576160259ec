"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Talks to the in-process sandbox backend (no server needed)
    - STAGING: Talks to a real API, usually a local or test deployment
    - PRODUCTION: Talks to the live API

The ENV_MODE variable controls which transport and realtime service are
instantiated, so the same storefront code runs against the sandbox during
local work and against the real backend once deployed.

Usage:
    from storefront.core.config import get_settings

    settings = get_settings()
    if settings.use_sandbox:
        # In-process sandbox backend
    else:
        # Real REST API at settings.api_base_url
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: In-process sandbox backend
        PRODUCTION: Live REST API
        STAGING: Real REST API with test data
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Storefront settings loaded from environment variables.

    All settings can be overridden via environment variables or a .env file.

    Attributes:
        env_mode: Current environment (development/staging/production)
        debug: Enable verbose logging

        # REST API
        api_base_url: Base URL of the REST backend
        api_prefix: Path prefix prepended to every endpoint (e.g. "/api")
        request_timeout: Seconds before an outbound request gives up

        # Realtime
        realtime_url: WebSocket endpoint for push notifications

        # Persisted client state
        data_directory: Directory holding the storage file
        storage_filename: JSON file standing in for browser storage
        token_storage_key: Key under which the access token is kept
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Storefront",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    currency_symbol: str = Field(
        default="R$",
        description="Prefix used when formatting prices"
    )

    # ==========================================================================
    # REST API
    # ==========================================================================

    api_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the REST API"
    )
    api_prefix: str = Field(
        default="",
        description="Path prefix for every endpoint, e.g. /api"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Outbound request timeout in seconds"
    )

    # ==========================================================================
    # REALTIME
    # ==========================================================================

    realtime_url: Optional[str] = Field(
        default=None,
        description="WebSocket URL for notifications (derived from api_base_url if unset)"
    )
    realtime_heartbeat: float = Field(
        default=30.0,
        description="Seconds between WebSocket heartbeats"
    )

    # ==========================================================================
    # PERSISTED CLIENT STATE
    # ==========================================================================

    data_directory: str = Field(
        default="data",
        description="Directory for client state files"
    )
    storage_filename: str = Field(
        default="storage.json",
        description="File standing in for browser local storage"
    )
    token_storage_key: str = Field(
        default="accessToken",
        description="Storage key of the access token"
    )
    storage_lock_timeout: int = Field(
        default=10,
        description="Seconds to wait for the storage file lock"
    )

    # ==========================================================================
    # SANDBOX BACKEND
    # ==========================================================================

    sandbox_base_url: str = Field(
        default="http://sandbox.test",
        description="Base URL used for the in-process sandbox transport"
    )
    sandbox_host: str = Field(
        default="0.0.0.0",
        description="Host the standalone sandbox server binds to"
    )
    sandbox_port: int = Field(
        default=8001,
        description="Port the standalone sandbox server binds to"
    )
    sandbox_access_token_ttl: int = Field(
        default=900,
        description="Lifetime of sandbox access tokens in seconds"
    )
    sandbox_admin_email: str = Field(
        default="admin@storefront.dev",
        description="Seeded sandbox administrator email"
    )
    sandbox_admin_password: str = Field(
        default="admin123",
        description="Seeded sandbox administrator password"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("api_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Keep the prefix as '' or '/segment' with no trailing slash."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_sandbox(self) -> bool:
        """Development mode runs against the in-process sandbox."""
        return self.is_development

    @property
    def base_url(self) -> str:
        """Base URL the HTTP client is built with."""
        return self.sandbox_base_url if self.use_sandbox else self.api_base_url.rstrip("/")

    @property
    def storage_path(self) -> Path:
        """Full path of the storage file."""
        return Path(self.data_directory) / self.storage_filename

    @property
    def resolved_realtime_url(self) -> str:
        """Realtime URL, derived from the API base URL when not configured."""
        if self.realtime_url:
            return self.realtime_url
        base = self.api_base_url.rstrip("/")
        if base.startswith("https://"):
            base = "wss://" + base[len("https://"):]
        elif base.startswith("http://"):
            base = "ws://" + base[len("http://"):]
        return f"{base}{self.api_prefix}/ws"

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that settings needed outside development are configured.

        Returns:
            List of problematic configuration keys (empty if all present)
        """
        problems = []

        if not self.use_sandbox:
            if not self.api_base_url.startswith(("http://", "https://")):
                problems.append("API_BASE_URL")
            if self.is_production and self.api_base_url.startswith("http://localhost"):
                problems.append("API_BASE_URL")

        return problems


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment (tests do this).

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logging.getLogger("storefront")

