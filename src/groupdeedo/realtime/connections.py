"""Per-connection outboxes over FastAPI WebSockets.

Every open socket gets an :class:`asyncio.Queue` drained by its own writer
task. Pushing onto the queue never suspends, so a broadcast loop over many
participants cannot be stalled by one slow client.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Protocol

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

DEFAULT_OUTBOX_SIZE = 256


class Transport(Protocol):
    """Best-effort, non-blocking delivery of one event to one connection."""

    def push(self, connection_id: str, event: str, data: Any) -> bool: ...


class Connection:
    """One open WebSocket and its outbound queue."""

    def __init__(
        self,
        connection_id: str,
        websocket: WebSocket,
        *,
        max_queue: int = DEFAULT_OUTBOX_SIZE,
    ) -> None:
        self.connection_id = connection_id
        self.websocket = websocket
        self.closed = False
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_queue)
        self._writer: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start draining the outbox onto the socket."""
        if self._writer is None or self._writer.done():
            self._writer = asyncio.create_task(self._pump())

    def push(self, event: str, data: Any) -> bool:
        """Queue an event for delivery; return False if it was dropped."""
        if self.closed:
            logger.debug("Dropping %s for closed connection %s", event, self.connection_id)
            return False
        try:
            self._queue.put_nowait({"event": event, "data": data})
        except asyncio.QueueFull:
            logger.warning(
                "Outbox full for connection %s; dropping %s", self.connection_id, event
            )
            return False
        return True

    async def close(self) -> None:
        """Stop the writer task; queued frames that were not sent are discarded."""
        self.closed = True
        if self._writer is None:
            return
        self._writer.cancel()
        try:
            await self._writer
        except asyncio.CancelledError:
            pass
        self._writer = None

    async def _pump(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self.websocket.send_json(frame)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                # The socket went away underneath us; the receive loop will
                # observe the disconnect and deregister the participant.
                logger.warning(
                    "Send to connection %s failed: %s", self.connection_id, exc
                )
                self.closed = True
                return


class ConnectionManager:
    """Registry of open sockets implementing :class:`Transport`."""

    def __init__(self, *, max_queue: int = DEFAULT_OUTBOX_SIZE) -> None:
        self._connections: dict[str, Connection] = {}
        self._max_queue = max_queue

    def __len__(self) -> int:
        return len(self._connections)

    def open(self, websocket: WebSocket) -> Connection:
        """Attach a freshly accepted socket under a new connection id."""
        connection_id = uuid.uuid4().hex
        connection = Connection(connection_id, websocket, max_queue=self._max_queue)
        self._connections[connection_id] = connection
        connection.start()
        return connection

    def push(self, connection_id: str, event: str, data: Any) -> bool:
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        return connection.push(event, data)

    async def close(self, connection_id: str) -> None:
        connection = self._connections.pop(connection_id, None)
        if connection is not None:
            await connection.close()

    async def close_all(self) -> None:
        for connection_id in list(self._connections):
            await self.close(connection_id)
