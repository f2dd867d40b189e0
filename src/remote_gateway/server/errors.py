# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Error bodies for the gateway's two channels.

Plain HTTP endpoints (``/messages``, ``/ingest``, ``/sse`` auth) answer with
``{"success": false, "error": {"code": ..., "message": ...}}``; each
``ErrorCode`` carries the status it is normally sent with.

Replies written to the event stream are JSON-RPC error objects built by
``jsonrpc_error``.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Any

from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable codes for HTTP error bodies."""

    MISSING_FIELD = "VALIDATION_MISSING_FIELD"
    INVALID_VALUE = "VALIDATION_INVALID_VALUE"
    INVALID_JSON = "VALIDATION_INVALID_JSON"
    MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    UNKNOWN_SESSION = "NOT_FOUND_SESSION"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    NO_STREAM = "SERVICE_UNAVAILABLE"
    INTERNAL = "INTERNAL_ERROR"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_CODE[self]


_STATUS_BY_CODE = {
    ErrorCode.MISSING_FIELD: 400,
    ErrorCode.INVALID_VALUE: 400,
    ErrorCode.INVALID_JSON: 400,
    ErrorCode.MISSING_TOKEN: 401,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.UNKNOWN_SESSION: 404,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.NO_STREAM: 503,
    ErrorCode.INTERNAL: 500,
}

# JSON-RPC 2.0 error codes sent over the stream
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_JSONRPC_ERROR = -32603


def error_response(code: ErrorCode, message: str, status_code: int | None = None, **extra: Any) -> JSONResponse:
    """Error body for ``code``, sent with its usual status unless ``status_code`` is given."""
    return JSONResponse(
        {"success": False, "error": {"code": code.value, "message": message, **extra}},
        status_code=status_code or code.status_code,
    )


def missing_field_error(field_name: str) -> JSONResponse:
    return error_response(ErrorCode.MISSING_FIELD, f"{field_name} required")


def validation_error(message: str) -> JSONResponse:
    return error_response(ErrorCode.INVALID_VALUE, message)


def invalid_json_error() -> JSONResponse:
    return error_response(ErrorCode.INVALID_JSON, "Invalid JSON body")


def payload_too_large_error(limit: int) -> JSONResponse:
    return error_response(ErrorCode.PAYLOAD_TOO_LARGE, f"Request body exceeds {limit} bytes")


def session_not_found_error(session_id: str) -> JSONResponse:
    """404 for a ``sessionId`` that is not the active stream (superseded or never opened)."""
    return error_response(ErrorCode.UNKNOWN_SESSION, f"Session {session_id} not found or expired")


def no_stream_error(message: str = "SSE not established") -> JSONResponse:
    """503 for a message posted while no stream is open to carry the reply."""
    return error_response(ErrorCode.NO_STREAM, message)


def internal_error(message: str, exc: BaseException) -> JSONResponse:
    """500 with a short id that also appears in the log line for ``exc``."""
    error_id = uuid.uuid4().hex[:12]
    logger.error(f"error_id={error_id} {type(exc).__name__}: {exc}", exc_info=exc)
    return error_response(ErrorCode.INTERNAL, message, error_id=error_id)


def jsonrpc_error(request_id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
    """JSON-RPC error reply correlated to ``request_id`` (None when it could not be read)."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "error": error, "id": request_id}
