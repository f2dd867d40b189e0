"""Global test fixtures for the gateway test suite."""

from __future__ import annotations

import pytest

from remote_gateway.core.documents import DocumentStore
from remote_gateway.mcp.tools import build_registry
from remote_gateway.server.jsonrpc import McpProtocol, ServerInfo

# Environment variables the settings layer reads; cleared so the host
# environment never leaks into tests.
GATEWAY_ENV_VARS = (
    "HOST",
    "PORT",
    "MCP_GATEWAY_API_KEY",
    "API_KEY",
    "UPSTREAM_URLS",
    "UPSTREAMS_FILE",
    "GATEWAY_LOG_LEVEL",
    "GATEWAY_LOG_FORMAT",
    "GATEWAY_LOG_FILE",
    "GATEWAY_SSE_KEEPALIVE_SECONDS",
    "GATEWAY_MAX_BODY_BYTES",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Reset cached settings and isolate the environment between tests."""
    import remote_gateway.core.config as core_config
    import remote_gateway.server.config as server_config

    for var in GATEWAY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Point the upstream file somewhere that does not exist
    monkeypatch.setenv("UPSTREAMS_FILE", str(tmp_path / "upstreams.json"))

    core_config._config = None
    server_config._settings = None
    yield
    core_config._config = None
    server_config._settings = None


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def registry(store):
    return build_registry(store)


@pytest.fixture
def protocol(registry) -> McpProtocol:
    return McpProtocol(registry, ServerInfo(name="test-gateway", version="1.2.3"))
