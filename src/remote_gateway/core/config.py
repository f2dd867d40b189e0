# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized config for the gateway package.

All environment-based configuration should flow through this module or
its server-level extension in ``remote_gateway.server.config``.

Usage:
    from remote_gateway.core.config import get_config
    config = get_config()

    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings for the gateway.

    Settings can be configured via environment variables or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="GATEWAY_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="GATEWAY_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="GATEWAY_LOG_FILE",
    )

    # ==========================================================================
    # UPSTREAM SETTINGS
    # ==========================================================================

    upstream_urls: str = Field(
        default="",
        description="Comma-separated list of upstream backend URLs",
        validation_alias="UPSTREAM_URLS",
    )
    upstreams_file: str = Field(
        default="upstreams.json",
        description='Optional JSON file of upstreams: {"servers": [{"label": ..., "url": ...}]}',
        validation_alias="UPSTREAMS_FILE",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
