"""Websocket endpoint that streams every enriched message."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from vdl2feed.services.broadcaster import Broadcaster

router = APIRouter(tags=["feed"])

logger = logging.getLogger("vdl2feed.feed")


async def feed_endpoint(websocket: WebSocket) -> None:
    """Register the connection with the broadcaster until the client leaves.

    Inbound frames are read and ignored; there is no subscriber-side protocol
    beyond staying connected.
    """

    broadcaster: Broadcaster = websocket.app.state.runtime.broadcaster
    await websocket.accept()
    broadcaster.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except RuntimeError as exc:
        logger.debug("WebSocket receive failed: %s", exc)
    finally:
        broadcaster.unregister(websocket)


router.add_api_websocket_route("/ws", feed_endpoint)

__all__ = ["feed_endpoint", "router"]
