"""WebSocket endpoint carrying the chat event stream."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from groupdeedo.realtime.hub import ChatHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket) -> None:
    """Run one client connection.

    Frames in both directions are JSON objects of the form
    ``{"event": <name>, "data": <payload>}``. Inbound frames from one client
    are handled strictly in order; outbound frames go through the
    connection's outbox so broadcasts never wait on this socket.
    """
    hub: ChatHub | None = getattr(websocket.app.state, "hub", None)
    if hub is None:
        await websocket.close(code=1013)
        return

    await websocket.accept()
    connection = hub.connections.open(websocket)
    connection_id = connection.connection_id
    hub.connect(connection_id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                connection.push("error", "Malformed frame")
                continue
            try:
                frame = json.loads(raw)
            except ValueError:
                connection.push("error", "Malformed frame")
                continue
            if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                connection.push("error", "Malformed frame")
                continue
            await hub.handle(connection_id, frame["event"], frame.get("data"))
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(connection_id)
        await hub.connections.close(connection_id)
