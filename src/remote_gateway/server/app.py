"""Starlette ASGI application for the SSE gateway.

Routes:
    GET  /sse       Open the event stream (shared-secret auth) and install the session
    POST /messages  Post a JSON-RPC message to the active session; reply arrives on the stream
    POST /ingest    Store a document (shared-secret auth)
    GET  /health    Liveness probe, no auth
    GET  /          Server info, no auth
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from remote_gateway.core.documents import DocumentStore
from remote_gateway.core.exceptions import NoActiveSessionError, ValidationException
from remote_gateway.core.logging import configure_logging
from remote_gateway.core.upstreams import load_upstreams
from remote_gateway.mcp.tools import build_registry

from .auth import authenticate
from .config import ServerSettings, get_settings
from .errors import (
    internal_error,
    invalid_json_error,
    missing_field_error,
    no_stream_error,
    payload_too_large_error,
    session_not_found_error,
    validation_error,
)
from .jsonrpc import PROTOCOL_VERSION, McpProtocol, ServerInfo
from .sessions import DispatchSession, SessionManager
from .sse import SSE_HEADERS, EventSink

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
MESSAGES_PATH = "/messages"


class BodyTooLarge(Exception):
    pass


async def _read_json(request: Request, limit: int) -> Any:
    """Read and decode a JSON body no larger than ``limit`` bytes.

    Raises:
        BodyTooLarge: If the declared or actual size exceeds ``limit``.
        json.JSONDecodeError: If the body is not valid JSON.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise BodyTooLarge()
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        # Chunked uploads carry no length; stop as soon as the limit is passed
        if len(body) > limit:
            raise BodyTooLarge()
    return json.loads(bytes(body))


async def health_endpoint(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"ok": True})


async def info_endpoint(request: Request) -> JSONResponse:
    """Server info endpoint (no auth required)."""
    state = request.app.state
    settings: ServerSettings = state.settings
    return JSONResponse(
        {
            "server": settings.server_name,
            "version": settings.server_version,
            "protocol": "mcp",
            "protocolVersion": PROTOCOL_VERSION,
            "transport": "sse",
            "endpoints": {
                "sse": SSE_PATH,
                "messages": MESSAGES_PATH,
                "ingest": "/ingest",
                "health": "/health",
            },
            "tools": state.registry.tool_names,
            "upstreams": state.upstreams.labels,
            "documents": len(state.store),
            "authentication": {"enabled": settings.auth_enabled, "methods": ["bearer", "x-api-key"]},
            "session": {"active": state.sessions.active is not None},
        }
    )


async def _event_stream(manager: SessionManager, session: DispatchSession) -> AsyncIterator[str]:
    try:
        async for frame in session.sink.stream():
            yield frame
    finally:
        manager.close_session(session.session_id)


class SessionStreamResponse(StreamingResponse):
    """Event stream bound to one session.

    The session is closed when the response ends for any reason, including a
    client that is gone before the first frame is written and the body
    generator never starts.
    """

    def __init__(self, manager: SessionManager, session: DispatchSession):
        super().__init__(_event_stream(manager, session), media_type="text/event-stream", headers=SSE_HEADERS)
        self.manager = manager
        self.session = session

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.manager.close_session(self.session.session_id)


async def sse_endpoint(request: Request) -> Response:
    """Open the event stream and make it the active session.

    The first event is ``endpoint``, telling the client where to post messages.
    """
    settings: ServerSettings = request.app.state.settings
    rejection = authenticate(request, settings.api_key)
    if rejection is not None:
        return rejection

    manager: SessionManager = request.app.state.sessions
    sink = EventSink(uuid.uuid4().hex, keepalive_seconds=settings.sse_keepalive_seconds)
    session = await manager.open_session(sink)
    await sink.send(f"{MESSAGES_PATH}?sessionId={session.session_id}", event="endpoint")

    return SessionStreamResponse(manager, session)


async def messages_endpoint(request: Request) -> Response:
    """Accept a JSON-RPC message for the active session.

    Returns 202 once the message is queued; the reply is written to the stream.
    """
    settings: ServerSettings = request.app.state.settings
    manager: SessionManager = request.app.state.sessions

    try:
        message = await _read_json(request, settings.max_body_bytes)
    except BodyTooLarge:
        return payload_too_large_error(settings.max_body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"MCP parse error: {e}")
        return invalid_json_error()

    session = manager.active
    if session is None:
        return no_stream_error()

    requested = request.query_params.get("sessionId")
    if requested and requested != session.session_id:
        return session_not_found_error(requested)

    try:
        manager.submit(message)
    except NoActiveSessionError as e:
        return no_stream_error(e.message)
    except Exception as e:  # Intentionally broad: top-level handler for the POST channel
        return internal_error("messages error", exc=e)

    return PlainTextResponse("Accepted", status_code=202)


async def ingest_endpoint(request: Request) -> JSONResponse:
    """Store a document: ``{id?, text, meta?}`` -> ``{id}``."""
    settings: ServerSettings = request.app.state.settings
    rejection = authenticate(request, settings.api_key, forbid_invalid=True)
    if rejection is not None:
        return rejection

    try:
        body = await _read_json(request, settings.max_body_bytes)
    except BodyTooLarge:
        return payload_too_large_error(settings.max_body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return invalid_json_error()

    if not isinstance(body, dict):
        body = {}

    text = body.get("text")
    if not text:
        return missing_field_error("text")
    if not isinstance(text, str):
        return validation_error("text must be a string")

    meta = body.get("meta") or {}
    if not isinstance(meta, dict):
        return validation_error("meta must be an object")

    doc_id = str(body.get("id") or uuid.uuid4())
    try:
        request.app.state.store.put(doc_id, text, meta)
    except ValidationException as e:
        return validation_error(e.message)

    logger.info(f"Ingested document {doc_id} ({len(text)} chars)")
    return JSONResponse({"id": doc_id})


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    # Background failures are logged; the listener keeps serving
    exc = context.get("exception")
    logger.error(f"Unhandled error in event loop: {context.get('message', 'unknown')}", exc_info=exc)


@asynccontextmanager
async def lifespan(app: Starlette):
    """Application lifespan handler."""
    settings: ServerSettings = app.state.settings
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)

    logger.info(f"Starting {settings.server_name} on {settings.host}:{settings.port} (SSE at {SSE_PATH})")
    if settings.auth_enabled:
        logger.info(f"Shared-secret authentication enabled (key length={len(settings.api_key)})")
    else:
        logger.warning("API key not configured; authentication is disabled")
    logger.info(f"{len(app.state.upstreams)} upstream(s) configured")

    yield

    await app.state.sessions.shutdown()
    logger.info("Gateway shutting down")


def create_app(settings: ServerSettings | None = None) -> Starlette:
    """Create the Starlette ASGI application with its own store, registry and sessions."""
    settings = settings or get_settings()

    store = DocumentStore()
    upstreams = load_upstreams(settings.upstream_urls, settings.upstreams_file)
    registry = build_registry(store)
    protocol = McpProtocol(registry, ServerInfo(name=settings.server_name, version=settings.server_version))

    routes = [
        Route("/", info_endpoint, methods=["GET"]),
        Route("/health", health_endpoint, methods=["GET"]),
        Route(SSE_PATH, sse_endpoint, methods=["GET"]),
        Route(MESSAGES_PATH, messages_endpoint, methods=["POST"]),
        Route("/ingest", ingest_endpoint, methods=["POST"]),
    ]

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.upstreams = upstreams
    app.state.registry = registry
    app.state.sessions = SessionManager(protocol)
    return app


# Global app instance for uvicorn
app = create_app()


def run() -> None:
    """Run the server using uvicorn."""
    import uvicorn

    configure_logging()
    settings = get_settings()

    logger.info(f"Starting remote MCP gateway on {settings.host}:{settings.port}")

    uvicorn.run(
        "remote_gateway.server.app:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    run()
