# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Stream sessions: one SSE stream plus the messages posted against it.

``SessionManager`` holds at most one ``DispatchSession``. Opening a new
stream supersedes the current one (last stream wins); closing a stale
session never touches the active one.

Posted messages carry no session id of their own, so they are routed to
whichever session is active. When the client echoes the ``sessionId`` from
the ``endpoint`` event, the HTTP layer checks it against the active session.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from remote_gateway.core.exceptions import NoActiveSessionError, SinkClosedError
from remote_gateway.core.logging import correlation_context

from .jsonrpc import McpProtocol
from .sse import EventSink

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class DispatchSession:
    """Routes inbound messages to the protocol and writes replies to the sink."""

    def __init__(self, sink: EventSink, protocol: McpProtocol):
        self.session_id = sink.session_id
        self.sink = sink
        self.protocol = protocol
        self.created_at = datetime.now(UTC)
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def closed(self) -> bool:
        return self.sink.closed

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def handle_inbound(self, message: Any) -> Any:
        """Process one message (or batch) and write the reply to the stream.

        Returns:
            The reply that was written, or None when there is nothing to send.
        """
        if isinstance(message, list):
            if not message:
                reply: Any = await self.protocol.handle(None)
            else:
                replies = await asyncio.gather(*(self._handle_one(m) for m in message))
                reply = [r for r in replies if r is not None] or None
        else:
            reply = await self._handle_one(message)

        if reply is not None:
            await self._write(reply)
        return reply

    async def _handle_one(self, message: Any) -> dict[str, Any] | None:
        request_id = message.get("id") if isinstance(message, dict) else None
        with correlation_context(None if request_id is None else str(request_id), self.session_id):
            return await self.protocol.handle(message)

    async def _write(self, reply: Any) -> None:
        try:
            await self.sink.send_json(reply)
        except SinkClosedError:
            # Client disconnected while the call was in flight
            logger.info(f"Dropped reply for closed session {self.session_id[:8]}")

    def spawn(self, message: Any) -> asyncio.Task[Any]:
        """Handle ``message`` in the background; the task outlives stream close."""
        task = asyncio.create_task(self.handle_inbound(message), name=f"dispatch-{self.session_id[:8]}")
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Unhandled error dispatching message on session {self.session_id[:8]}", exc_info=exc)

    async def drain(self) -> None:
        """Wait for in-flight messages to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self.sink.close()


class SessionManager:
    """Owns the single active stream session."""

    def __init__(self, protocol: McpProtocol):
        self.protocol = protocol
        self._active: DispatchSession | None = None
        self._lock = asyncio.Lock()

    @property
    def active(self) -> DispatchSession | None:
        return self._active

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self._active is None else SessionState.ACTIVE

    async def open_session(self, sink: EventSink) -> DispatchSession:
        """Install a new session bound to ``sink``, closing any current one."""
        session = DispatchSession(sink, self.protocol)
        async with self._lock:
            previous, self._active = self._active, session
        if previous is not None:
            logger.info(f"Session {previous.session_id[:8]} superseded by {session.session_id[:8]}")
            previous.close()
        logger.info(f"Session {session.session_id[:8]} opened")
        return session

    def close_session(self, session_id: str) -> bool:
        """Return to IDLE if ``session_id`` is the active session.

        Returns:
            True if the active session was closed, False for stale ids.
        """
        session = self._active
        if session is None or session.session_id != session_id:
            return False
        self._active = None
        session.close()
        lifetime = (datetime.now(UTC) - session.created_at).total_seconds()
        logger.info(f"Session {session_id[:8]} closed after {lifetime:.1f}s")
        return True

    def require_active(self) -> DispatchSession:
        """Return the active session.

        Raises:
            NoActiveSessionError: If no stream is open.
        """
        if self._active is None:
            raise NoActiveSessionError()
        return self._active

    async def route_message(self, message: Any) -> Any:
        """Handle ``message`` on the active session and return its reply.

        Raises:
            NoActiveSessionError: If no stream is open.
        """
        return await self.require_active().handle_inbound(message)

    def submit(self, message: Any) -> asyncio.Task[Any]:
        """Schedule ``message`` on the active session without waiting for it.

        Raises:
            NoActiveSessionError: If no stream is open.
        """
        return self.require_active().spawn(message)

    async def shutdown(self) -> None:
        """Close the active session and let its in-flight calls finish."""
        async with self._lock:
            session, self._active = self._active, None
        if session is not None:
            session.close()
            await session.drain()
