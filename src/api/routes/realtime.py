"""
Realtime websocket endpoint.

Each connection gets a session; every frame is handed to the room hub.
Binary frames are read as UTF-8 JSON, the same as text frames.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from src.api.deps import get_hub
from src.shell.realtime.hub import ClientSession, RoomHub, error_message

logger = logging.getLogger(__name__)

router = APIRouter()


def frame_text(frame: dict) -> str | None:
    """Text payload of a websocket.receive frame, or None if it is not UTF-8."""
    if frame.get("text") is not None:
        return frame["text"]
    try:
        return (frame.get("bytes") or b"").decode("utf-8")
    except UnicodeDecodeError:
        return None


async def serve_connection(websocket: WebSocket, hub: RoomHub) -> None:
    await websocket.accept()
    session = ClientSession(connection_id=uuid.uuid4().hex, socket=websocket)
    logger.info("Client connected: %s", session.connection_id)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                logger.info("Client disconnected: %s", session.connection_id)
                break

            raw = frame_text(frame)
            if raw is None:
                await hub.send(session, error_message("Malformed message"))
                continue
            await hub.handle_message(session, raw)
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", session.connection_id)
    finally:
        await hub.leave(session)


@router.websocket("/")
async def websocket_root(websocket: WebSocket, hub: RoomHub = Depends(get_hub)) -> None:
    await serve_connection(websocket, hub)


@router.websocket("/ws")
async def websocket_ws(websocket: WebSocket, hub: RoomHub = Depends(get_hub)) -> None:
    await serve_connection(websocket, hub)
