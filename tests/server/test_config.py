"""Tests for remote_gateway.server.config module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from remote_gateway.server.config import ServerSettings, clear_settings_cache, get_settings


class TestServerSettings:
    def test_defaults(self):
        settings = ServerSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 8787
        assert settings.api_key == ""
        assert settings.auth_enabled is False
        assert settings.sse_keepalive_seconds == 15.0
        assert settings.server_name == "remote-mcp-gateway"
        assert settings.server_version

    def test_host_and_port_from_env(self, monkeypatch):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9000")

        settings = ServerSettings()
        assert settings.port == 9000
        assert settings.host == "127.0.0.1"

    def test_primary_api_key(self, monkeypatch):
        monkeypatch.setenv("MCP_GATEWAY_API_KEY", "primary")
        settings = ServerSettings()
        assert settings.api_key == "primary"
        assert settings.auth_enabled is True

    def test_fallback_api_key(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "fallback")
        assert ServerSettings().api_key == "fallback"

    def test_primary_key_wins(self, monkeypatch):
        monkeypatch.setenv("MCP_GATEWAY_API_KEY", "primary")
        monkeypatch.setenv("API_KEY", "fallback")
        assert ServerSettings().api_key == "primary"

    def test_api_key_stripped(self, monkeypatch):
        monkeypatch.setenv("MCP_GATEWAY_API_KEY", "  padded \n")
        assert ServerSettings().api_key == "padded"

    def test_whitespace_key_disables_auth(self, monkeypatch):
        monkeypatch.setenv("MCP_GATEWAY_API_KEY", "   ")
        assert ServerSettings().auth_enabled is False

    def test_keepalive_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_SSE_KEEPALIVE_SECONDS", "0")
        with pytest.raises(ValidationError):
            ServerSettings()

    def test_inherits_core_settings(self, monkeypatch):
        monkeypatch.setenv("UPSTREAM_URLS", "http://a")
        assert ServerSettings().upstream_urls == "http://a"


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        clear_settings_cache()
        monkeypatch.setenv("PORT", "9100")
        second = get_settings()
        assert second is not first
        assert second.port == 9100
