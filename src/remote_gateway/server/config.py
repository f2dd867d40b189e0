# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Server configuration using pydantic-settings."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import SettingsConfigDict

from remote_gateway.core.config import CoreSettings

logger = logging.getLogger(__name__)


def get_package_version() -> str:
    """Get the package version from installed metadata.

    Returns the version from pyproject.toml when installed,
    or a dev fallback when running from source without install.
    """
    try:
        return version("remote-mcp-gateway")
    except PackageNotFoundError:
        return "0.0.0-dev"


class ServerSettings(CoreSettings):
    """Configuration for the SSE gateway.

    Inherits core settings (logging, upstreams) and adds the HTTP surface.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = Field(default="0.0.0.0", description="Host to bind to", validation_alias="HOST")  # nosec B104
    port: int = Field(default=8787, description="Port to bind to", validation_alias="PORT")

    # Shared secret; empty disables authentication
    api_key: str = Field(
        default="",
        description="Shared secret expected as Bearer token or X-API-Key",
        validation_alias=AliasChoices("MCP_GATEWAY_API_KEY", "API_KEY"),
    )

    sse_keepalive_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Seconds of idle stream before a keepalive comment is sent",
        validation_alias="GATEWAY_SSE_KEEPALIVE_SECONDS",
    )
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted POST body",
        validation_alias="GATEWAY_MAX_BODY_BYTES",
    )

    server_name: str = Field(default="remote-mcp-gateway", description="MCP server name")
    server_version: str = Field(default_factory=get_package_version, description="Server version")

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, value: str) -> str:
        return value.strip()

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)


# Global settings instance - lazy loaded
_settings: ServerSettings | None = None


def get_settings() -> ServerSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = ServerSettings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    global _settings
    _settings = None
