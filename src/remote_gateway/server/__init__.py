"""Remote Gateway HTTP server.

Bridges an SSE stream (server -> client) with a POST channel
(client -> server) into one MCP session.

Usage:
    # Start the server
    remote-gateway

    # Or with uvicorn directly
    uvicorn remote_gateway.server.app:app --port 8787
"""

from .config import ServerSettings, get_settings
from .sessions import DispatchSession, SessionManager, SessionState

__all__ = [
    "DispatchSession",
    "ServerSettings",
    "SessionManager",
    "SessionState",
    "get_settings",
]
