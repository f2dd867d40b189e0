# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tagged result type returned at the dispatch boundary.

Tool dispatch either produces a value or fails in one of a few known ways.
Rather than letting callers guess which exceptions to catch, the dispatch
boundary returns an ``Ok`` or an ``Err`` and the caller matches on it.

Usage::

    from remote_gateway.core.response import Ok, Err

    result = await registry.try_dispatch("search", {"query": "alpha"})
    if isinstance(result, Ok):
        reply(result.value)
    else:
        reply_error(result.kind, result.message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import GatewayException, HandlerError, ToolValidationError, UnknownToolError

# Error kinds
UNKNOWN_TOOL = "unknown_tool"
VALIDATION = "validation"
HANDLER = "handler"
INTERNAL = "internal"

_KINDS: dict[type[GatewayException], str] = {
    UnknownToolError: UNKNOWN_TOOL,
    ToolValidationError: VALIDATION,
    HandlerError: HANDLER,
}


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying ``value``."""

    value: Any


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        kind:    One of ``unknown_tool``, ``validation``, ``handler``, ``internal``.
        message: Human-readable error message.
        details: Extra structured context (field paths, tool name, cause).
    """

    kind: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


Result = Union[Ok, Err]


def err_from_exception(exc: GatewayException) -> Err:
    """Build an ``Err`` from a gateway exception."""
    return Err(kind=_KINDS.get(type(exc), INTERNAL), message=exc.message, details=exc.details)
