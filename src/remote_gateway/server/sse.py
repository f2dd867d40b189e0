# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Server-Sent Events sink for the outbound half of a session.

Writers push events with ``send``; the HTTP response drains them with
``stream``. Sends are serialized so frames from concurrent replies never
interleave, and a send after close raises ``SinkClosedError``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from remote_gateway.core.exceptions import SinkClosedError

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

KEEPALIVE_FRAME = ": keepalive\n\n"


@dataclass(frozen=True)
class SSEEvent:
    """A single SSE frame."""

    data: str
    event: str | None = None

    def encode(self) -> str:
        lines = []
        if self.event:
            lines.append(f"event: {self.event}")
        # Multi-line payloads need one data field per line
        lines.extend(f"data: {line}" for line in self.data.split("\n"))
        return "\n".join(lines) + "\n\n"


class EventSink:
    """Queue-backed writer for one SSE stream."""

    def __init__(self, session_id: str, keepalive_seconds: float = 15.0):
        self.session_id = session_id
        self.keepalive_seconds = keepalive_seconds
        self._queue: asyncio.Queue[SSEEvent | None] = asyncio.Queue()
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, data: str, event: str | None = "message") -> None:
        """Queue one event for the stream.

        Raises:
            SinkClosedError: If the stream has already closed.
        """
        async with self._write_lock:
            if self._closed:
                raise SinkClosedError(self.session_id)
            await self._queue.put(SSEEvent(data=data, event=event))

    async def send_json(self, payload: Any, event: str | None = "message") -> None:
        await self.send(json.dumps(payload, default=str, ensure_ascii=False), event=event)

    def close(self) -> None:
        """Stop the stream after already-queued events are delivered. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def stream(self) -> AsyncIterator[str]:
        """Yield encoded frames until closed, with keepalive comments when idle."""
        try:
            while True:
                try:
                    item = await asyncio.wait_for(self._queue.get(), timeout=self.keepalive_seconds)
                except TimeoutError:
                    yield KEEPALIVE_FRAME
                    continue
                if item is None:
                    break
                yield item.encode()
        finally:
            # Client went away or the sink was closed; later sends must fail
            self._closed = True
            logger.debug(f"Stream for session {self.session_id[:8]} finished")
