from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from scan2eat.deps import get_broadcaster
from scan2eat.services.live_updates import EVENT_CONNECTED, LiveUpdateBroadcaster, build_message

router = APIRouter(tags=["live"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    broadcaster: LiveUpdateBroadcaster = Depends(get_broadcaster),
):
    """Push-only channel: clients listen, state changes go through the HTTP API."""
    await websocket.accept()
    broadcaster.connect(websocket)
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else None
    logger.info("live client connected", extra={"client": client})

    try:
        await websocket.send_json(build_message(EVENT_CONNECTED))
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            if (message.get("text") or "").strip().lower() == "ping":
                await websocket.send_json(build_message("pong"))
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
        logger.info("live client disconnected", extra={"client": client})
