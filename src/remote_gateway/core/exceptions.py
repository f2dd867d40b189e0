# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for the gateway.

Provides specific exception types for the boundary, session and dispatch
layers so each layer can turn failures into the right kind of reply.
"""

from __future__ import annotations

from typing import Any


class GatewayException(Exception):  # noqa: N818 - mirrors the *Exception naming below
    """Base exception for all gateway errors.

    All gateway-specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationException(GatewayException):
    """Exception for validation errors.

    Raised when:
    - A document is stored with an empty id
    - Required fields are missing
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(GatewayException):
    """Exception for configuration errors.

    Raised when:
    - The upstream file exists but is not valid JSON
    - Settings cannot be parsed
    """

    def __init__(self, message: str, path: str | None = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class AuthError(GatewayException):
    """Missing or invalid shared-secret credential.

    Only raised at the HTTP boundary; never reaches dispatch.
    """

    def __init__(self, message: str, missing: bool = False):
        super().__init__(message, {"missing": missing})
        self.missing = missing


class NoActiveSessionError(GatewayException):
    """A message arrived while no stream session is open."""

    def __init__(self, message: str = "SSE not established"):
        super().__init__(message)


class SinkClosedError(GatewayException):
    """Write attempted on an outbound stream that has already closed."""

    def __init__(self, session_id: str):
        super().__init__(f"Stream closed for session {session_id}", {"session_id": session_id})
        self.session_id = session_id


class DuplicateToolError(GatewayException):
    """A tool name was registered twice. Programming error at startup."""

    def __init__(self, tool_name: str):
        super().__init__(f"Tool already registered: {tool_name}", {"tool_name": tool_name})
        self.tool_name = tool_name


class UnknownToolError(GatewayException):
    """Dispatch requested a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", {"tool_name": tool_name})
        self.tool_name = tool_name


class ToolValidationError(GatewayException):
    """Tool input did not match the tool's input model.

    ``errors`` holds one entry per failure with the dotted field ``path``,
    the ``expected`` shape and the validator ``message``.
    """

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]):
        summary = "; ".join(f"{e['path'] or '<root>'}: {e['message']}" for e in errors)
        super().__init__(
            f"Invalid arguments for {tool_name}: {summary}",
            {"tool_name": tool_name, "errors": errors},
        )
        self.tool_name = tool_name
        self.errors = errors


class HandlerError(GatewayException):
    """A tool handler raised. Wraps the original exception as ``cause``."""

    def __init__(self, tool_name: str, cause: BaseException):
        super().__init__(
            str(cause) or cause.__class__.__name__,
            {"tool_name": tool_name, "cause": cause.__class__.__name__},
        )
        self.tool_name = tool_name
        self.cause = cause


class NotFoundError(GatewayException):
    """A requested resource does not exist.

    Raised when:
    - summarize is asked for a document id that is not stored
    """

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id
