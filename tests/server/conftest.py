"""Server-specific test fixtures."""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

API_KEY = "test-secret"


@pytest.fixture
def app_env(monkeypatch):
    """Environment for an app with authentication enabled."""
    monkeypatch.setenv("MCP_GATEWAY_API_KEY", API_KEY)
    monkeypatch.setenv("GATEWAY_SSE_KEEPALIVE_SECONDS", "60")


@pytest.fixture
def app(app_env):
    from remote_gateway.server.app import create_app

    return create_app()


@pytest.fixture
def open_app():
    """App with authentication disabled."""
    from remote_gateway.server.app import create_app

    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}"}
