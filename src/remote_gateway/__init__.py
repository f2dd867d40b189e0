# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Remote Gateway - MCP over SSE for a single remote client.

The gateway exposes a small set of document tools (search, fetch,
summarize, transcribe) over the Model Context Protocol. A client opens a
long-lived Server-Sent Events stream and posts JSON-RPC messages to a
separate endpoint; replies travel back over the stream.

Architecture:
  GET /sse        -> SessionManager.open_session -> DispatchSession (owns the stream)
  POST /messages  -> SessionManager.submit -> DispatchSession.handle_inbound
                  -> ToolRegistry.dispatch -> handler -> reply written to the stream

Only one stream session is active at a time; a new stream supersedes the old.

Server entry point: ``remote-gateway``  (or ``uvicorn remote_gateway.server.app:app``)
"""

__version__ = "0.1.0"

from . import (
    core as core,
)
