# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""MCP JSON-RPC method handling.

Turns one inbound JSON-RPC message into the reply that goes back over the
stream. Every failure becomes a JSON-RPC error or an ``isError`` tool result
carrying the request id; nothing here raises to the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from remote_gateway.core.logging import tool_logger
from remote_gateway.core.response import HANDLER, UNKNOWN_TOOL, VALIDATION, Err
from remote_gateway.mcp.registry import ToolOutput, ToolRegistry

from .errors import (
    INTERNAL_JSONRPC_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    jsonrpc_error,
)

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")


class MethodNotFoundError(Exception):
    pass


class InvalidParamsError(Exception):
    def __init__(self, message: str, data: Any = None):
        super().__init__(message)
        self.data = data


@dataclass(frozen=True)
class ServerInfo:
    name: str
    version: str


class McpProtocol:
    """Dispatches MCP methods against a tool registry."""

    def __init__(self, registry: ToolRegistry, server_info: ServerInfo):
        self.registry = registry
        self.server_info = server_info

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Handle one JSON-RPC message.

        Returns:
            The JSON-RPC response, or None for notifications.
        """
        if not isinstance(message, dict):
            return jsonrpc_error(None, INVALID_REQUEST, "Invalid request: expected a JSON object")

        request_id = message.get("id")
        is_notification = request_id is None

        # The version tag is optional here, but a wrong one is rejected
        if message.get("jsonrpc", "2.0") != "2.0":
            return None if is_notification else jsonrpc_error(
                request_id, INVALID_REQUEST, "Invalid request: wrong jsonrpc version"
            )

        method = message.get("method")
        if not method or not isinstance(method, str):
            return None if is_notification else jsonrpc_error(
                request_id, INVALID_REQUEST, "Invalid request: missing or invalid method"
            )

        params = message.get("params")
        if params is None:
            params = {}

        try:
            result = await self._dispatch_method(method, params)
        except MethodNotFoundError as e:
            return None if is_notification else jsonrpc_error(request_id, METHOD_NOT_FOUND, str(e))
        except InvalidParamsError as e:
            return None if is_notification else jsonrpc_error(request_id, INVALID_PARAMS, str(e), e.data)
        except Exception:  # Intentionally broad: one bad message must not end the session
            logger.exception(f"Error in method {method}")
            return None if is_notification else jsonrpc_error(request_id, INTERNAL_JSONRPC_ERROR, "Internal error")

        if is_notification:
            return None
        return {"jsonrpc": "2.0", "result": result, "id": request_id}

    async def _dispatch_method(self, method: str, params: Any) -> Any:
        if method == "initialize":
            requested = params.get("protocolVersion") if isinstance(params, dict) else None
            return {
                "protocolVersion": requested if requested in SUPPORTED_PROTOCOL_VERSIONS else PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {
                    "name": self.server_info.name,
                    "version": self.server_info.version,
                },
            }

        elif method in ("notifications/initialized", "initialized"):
            return {}

        elif method == "ping":
            return {}

        elif method == "tools/list":
            return {
                "tools": [
                    tool.model_dump(mode="json", by_alias=True, exclude_none=True)
                    for tool in self.registry.list_tools()
                ]
            }

        elif method == "tools/call":
            if not isinstance(params, dict):
                raise InvalidParamsError("params must be an object")
            tool_name = params.get("name")
            if not tool_name or not isinstance(tool_name, str):
                raise InvalidParamsError("Missing tool name")
            return await self.call_tool(tool_name, params.get("arguments") or {})

        elif self.registry.has_tool(method):
            # Shorthand: the method is the tool name and params are its arguments
            return await self.call_tool(method, params)

        raise MethodNotFoundError(f"Method not found: {method}")

    async def call_tool(self, name: str, arguments: Any) -> dict[str, Any]:
        """Dispatch a tool and render the MCP ``tools/call`` result."""
        tool_logger.started(name, arguments)
        started = time.perf_counter()
        result = await self.registry.try_dispatch(name, arguments)
        duration_ms = (time.perf_counter() - started) * 1000

        if not isinstance(result, Err):
            tool_logger.finished(name, True, duration_ms)
            output: ToolOutput = result.value
            return output.to_mcp()

        tool_logger.finished(name, False, duration_ms)
        if result.kind == UNKNOWN_TOOL:
            raise MethodNotFoundError(result.message)
        if result.kind == VALIDATION:
            raise InvalidParamsError(result.message, {"errors": result.details.get("errors", [])})
        if result.kind == HANDLER:
            logger.warning(f"Tool {name} failed: {result.message}")
            return {
                "content": [{"type": "text", "text": f"Error: {result.message}"}],
                "isError": True,
            }
        raise RuntimeError(result.message)
