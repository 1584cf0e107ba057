"""Best-effort fan-out of enriched messages to websocket subscribers."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

from fastapi.websockets import WebSocketState

logger = logging.getLogger("vdl2feed.broadcaster")


class Subscriber(Protocol):
    """The part of a websocket connection the broadcaster relies on."""

    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None:
        ...


class Broadcaster:
    """Push every published message to all connected subscribers.

    ``publish`` never awaits a subscriber: it schedules one send per ready
    client and returns. A client whose previous send has not finished, or
    whose connection is not open, misses the message. Nothing is queued or
    retried.
    """

    def __init__(self) -> None:
        self._clients: set[Subscriber] = set()
        self._in_flight: set[Subscriber] = set()
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._clients)

    def register(self, client: Subscriber) -> None:
        self._clients.add(client)
        logger.info("WebSocket client connected. Total clients: %s", len(self._clients))

    def unregister(self, client: Subscriber) -> None:
        if client in self._clients:
            self._clients.discard(client)
            logger.info(
                "WebSocket client disconnected. Total clients: %s", len(self._clients)
            )
        self._in_flight.discard(client)

    def publish(self, message: dict[str, Any]) -> int:
        """Schedule delivery of ``message``; return the number of sends scheduled."""

        if not self._clients:
            return 0

        payload = json.dumps(message)
        scheduled = 0
        for client in list(self._clients):
            if not self._is_ready(client):
                continue
            self._in_flight.add(client)
            task = asyncio.create_task(self._send(client, payload))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            scheduled += 1
        return scheduled

    async def drain(self) -> None:
        """Wait for sends scheduled so far to finish."""

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()
        self._clients.clear()
        self._in_flight.clear()

    def _is_ready(self, client: Subscriber) -> bool:
        if client in self._in_flight:
            return False
        return (
            client.client_state == WebSocketState.CONNECTED
            and client.application_state == WebSocketState.CONNECTED
        )

    async def _send(self, client: Subscriber, payload: str) -> None:
        try:
            await client.send_text(payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("Dropping WebSocket client after failed send: %s", exc)
            self.unregister(client)
        finally:
            self._in_flight.discard(client)


__all__ = ["Broadcaster", "Subscriber"]
