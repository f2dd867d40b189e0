# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tool registry: name -> handler plus typed input and output.

The registry is filled once at startup and is read-only afterwards.

Example:
    registry = ToolRegistry()
    registry.register(
        "search",
        SearchInput,
        SearchOutput,
        lambda params: store.search(params.query, params.top_k or 5),
        description="Search stored documents.",
    )

    output = await registry.dispatch("search", {"query": "alpha"})
    output.text        # JSON text form
    output.structured  # plain Python form, always a JSON object

MCP requires structured tool output to be an object. Output types that are
not objects (lists, scalars) are published and returned wrapped as
``{"result": ...}``; the text form keeps the bare value.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from mcp.types import Tool
from pydantic import TypeAdapter, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from ..core.exceptions import (
    DuplicateToolError,
    GatewayException,
    HandlerError,
    ToolValidationError,
    UnknownToolError,
)
from ..core.response import Ok, Result, err_from_exception

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Readable names for the pydantic error types clients are most likely to hit
_EXPECTED_BY_ERROR_TYPE = {
    "missing": "required field",
    "string_type": "string",
    "int_type": "integer",
    "int_parsing": "integer",
    "int_from_float": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "list_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
}


@dataclass(frozen=True)
class ToolOutput:
    """Result of a successful dispatch, in both text and structured form."""

    text: str
    structured: Any

    def to_mcp(self) -> dict[str, Any]:
        """Render as an MCP ``tools/call`` result."""
        return {
            "content": [{"type": "text", "text": self.text}],
            "structuredContent": self.structured,
            "isError": False,
        }


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool."""

    name: str
    handler: Callable[[Any], Any]
    input_adapter: TypeAdapter[Any]
    output_adapter: TypeAdapter[Any]
    description: str = ""
    title: str | None = None
    wrap_output: bool = False

    def to_tool(self) -> Tool:
        """MCP tool definition with JSON Schemas derived from the models."""
        return Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_adapter.json_schema(),
            outputSchema=self.output_adapter.json_schema(),
        )


WRAPPED_OUTPUT_KEY = "result"


def _output_adapter(name: str, output_type: Any) -> tuple[TypeAdapter[Any], bool]:
    """Adapter for the published output schema, and whether it wraps the value."""
    adapter = TypeAdapter(output_type)
    if adapter.json_schema().get("type") == "object":
        return adapter, False
    model_name = "".join(part.capitalize() for part in name.split("_")) + "Output"
    wrapper = create_model(model_name, **{WRAPPED_OUTPUT_KEY: (output_type, ...)})
    return TypeAdapter(wrapper), True


def _expected_shape(error: dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if "expected" in ctx:
        return str(ctx["expected"])
    return _EXPECTED_BY_ERROR_TYPE.get(error["type"], error["msg"])


def validate(adapter: TypeAdapter[T], data: Any, tool_name: str) -> T:
    """Validate ``data`` against ``adapter``; the single entry point for tool input.

    Raises:
        ToolValidationError: With the field path and expected shape of every failure.
    """
    try:
        return adapter.validate_python(data)
    except PydanticValidationError as e:
        errors = [
            {
                "path": ".".join(str(part) for part in err["loc"]),
                "expected": _expected_shape(err),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise ToolValidationError(tool_name, errors) from e


class ToolRegistry:
    """Append-only mapping of tool names to specs."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        input_type: Any,
        output_type: Any,
        handler: Callable[[Any], Any],
        *,
        description: str = "",
        title: str | None = None,
    ) -> ToolSpec:
        """Register a tool. Handlers may be plain functions or coroutines.

        Raises:
            DuplicateToolError: If ``name`` is already registered.
        """
        if name in self._tools:
            raise DuplicateToolError(name)
        output_adapter, wrap_output = _output_adapter(name, output_type)
        spec = ToolSpec(
            name=name,
            handler=handler,
            input_adapter=TypeAdapter(input_type),
            output_adapter=output_adapter,
            description=description,
            title=title,
            wrap_output=wrap_output,
        )
        self._tools[name] = spec
        logger.debug(f"Registered tool {name}")
        return spec

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec

    def list_tools(self) -> list[Tool]:
        return [spec.to_tool() for spec in self._tools.values()]

    async def dispatch(self, name: str, raw_input: Any) -> ToolOutput:
        """Validate input, run the handler and serialize its result.

        Raises:
            UnknownToolError: No tool named ``name``.
            ToolValidationError: ``raw_input`` does not match the input model.
            HandlerError: The handler raised; the original is ``cause``.
        """
        spec = self.get(name)
        params = validate(spec.input_adapter, {} if raw_input is None else raw_input, name)

        try:
            result = spec.handler(params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:  # Intentionally broad: any handler failure becomes HandlerError
            raise HandlerError(name, e) from e

        value = to_jsonable_python(result)
        structured = {WRAPPED_OUTPUT_KEY: value} if spec.wrap_output else value
        self._check_output(spec, structured)
        return ToolOutput(text=json.dumps(value, default=str), structured=structured)

    async def try_dispatch(self, name: str, raw_input: Any) -> Result:
        """Like ``dispatch`` but returns ``Ok(ToolOutput)`` or ``Err``."""
        try:
            return Ok(await self.dispatch(name, raw_input))
        except GatewayException as e:
            return err_from_exception(e)

    def _check_output(self, spec: ToolSpec, structured: Any) -> None:
        # Output models document the contract; a mismatch is logged, not raised
        try:
            spec.output_adapter.validate_python(structured)
        except PydanticValidationError as e:
            logger.warning(f"Tool {spec.name} returned output not matching its schema: {e.error_count()} error(s)")
