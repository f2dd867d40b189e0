# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Logging for the gateway.

Every record handled by ``configure_logging`` carries two ids: the stream
session it belongs to and the JSON-RPC message being processed. Together
they let one client exchange be followed through the log, including replies
that finish after a newer stream has taken over.

Tool arguments are logged through ``ToolCallLogger``, which redacts
credential-looking keys and truncates long text.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from .config import get_config

_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(session_id)s %(correlation_id)s] %(message)s"
NOISY_LOGGERS = ("uvicorn.access", "httpx")
SENSITIVE_KEYS = ("api_key", "apikey", "token", "secret", "password", "auth", "credential")


@contextmanager
def correlation_context(correlation_id: str | None = None, session_id: str | None = None) -> Iterator[str]:
    """Scope log records to one inbound message.

    ``correlation_id`` is normally the JSON-RPC id; messages without one get a
    short generated id. ``session_id`` is left as it was when not given.

    Example:
        with correlation_context(str(message["id"]), session.session_id):
            logger.info("Dispatching")
    """
    cid = correlation_id or uuid.uuid4().hex[:12]
    cid_token = _correlation_id.set(cid)
    sid_token = _session_id.set(session_id) if session_id is not None else None
    try:
        yield cid
    finally:
        _correlation_id.reset(cid_token)
        if sid_token is not None:
            _session_id.reset(sid_token)


class ContextFilter(logging.Filter):
    """Stamp records with the current session and message ids ('-' when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        sid = _session_id.get()
        record.session_id = sid[:8] if sid else "-"
        record.correlation_id = _correlation_id.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("session_id", "correlation_id"):
            value = getattr(record, key, "-")
            if value != "-":
                entry[key] = value
        tool_call = getattr(record, "tool_call", None)
        if tool_call is not None:
            entry["tool_call"] = tool_call
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Install the gateway's handlers on the root logger.

    Unset arguments come from ``GATEWAY_LOG_LEVEL``, ``GATEWAY_LOG_FORMAT``
    (``json``, ``text``, or empty to pick JSON when stderr is not a terminal)
    and ``GATEWAY_LOG_FILE``. The log file is always written as JSON.
    """
    config = get_config()
    level = level if level is not None else config.log_level
    if isinstance(level, str):
        level = level.upper()
    if json_format is None:
        json_format = {"json": True, "text": False}.get(config.log_format.lower(), not sys.stderr.isatty())
    log_file = log_file if log_file is not None else config.log_file

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    handlers: list[logging.Handler] = [console]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    context = ContextFilter()
    for handler in handlers:
        handler.addFilter(context)

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def redact(value: Any, max_string: int = 500) -> Any:
    """Copy of ``value`` with credential-looking keys masked and long strings cut."""
    if isinstance(value, dict):
        return {
            key: "[REDACTED]" if any(s in str(key).lower() for s in SENSITIVE_KEYS) else redact(item, max_string)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item, max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return value[:max_string] + "..."
    return value


class ToolCallLogger:
    """Logs each ``tools/call`` when it starts and when it finishes.

    Starts are DEBUG; failures are logged at INFO so they show at the default level.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("remote_gateway.tools")

    def started(self, tool: str, arguments: Any) -> None:
        self.logger.debug(
            f"tools/call {tool}",
            extra={"tool_call": {"tool": tool, "arguments": redact(arguments)}},
        )

    def finished(self, tool: str, ok: bool, duration_ms: float) -> None:
        outcome = "ok" if ok else "failed"
        self.logger.log(
            logging.DEBUG if ok else logging.INFO,
            f"tools/call {tool} {outcome} in {duration_ms:.1f}ms",
            extra={"tool_call": {"tool": tool, "ok": ok, "duration_ms": round(duration_ms, 1)}},
        )


tool_logger = ToolCallLogger()
