# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core building blocks: configuration, logging, errors and the document store."""

from .documents import Document, DocumentStore, SearchHit
from .exceptions import (
    AuthError,
    ConfigException,
    DuplicateToolError,
    GatewayException,
    HandlerError,
    NoActiveSessionError,
    NotFoundError,
    SinkClosedError,
    ToolValidationError,
    UnknownToolError,
    ValidationException,
)
from .response import Err, Ok, Result
from .upstreams import Upstream, UpstreamRegistry

__all__ = [
    "AuthError",
    "ConfigException",
    "Document",
    "DocumentStore",
    "DuplicateToolError",
    "Err",
    "GatewayException",
    "HandlerError",
    "NoActiveSessionError",
    "NotFoundError",
    "Ok",
    "Result",
    "SearchHit",
    "SinkClosedError",
    "ToolValidationError",
    "UnknownToolError",
    "Upstream",
    "UpstreamRegistry",
    "ValidationException",
]
