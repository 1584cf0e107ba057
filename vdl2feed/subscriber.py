"""Websocket subscriber with automatic reconnect.

Connects to the feed endpoint, hands each decoded message to a callback and
reconnects with exponential backoff (1 s doubling to 10 s) whenever the
connection fails or closes. Messages published while disconnected are not
replayed.
"""

from __future__ import annotations

import asyncio
from enum import Enum
import json
import logging
from typing import Any, Awaitable, Callable

import websockets
from websockets.exceptions import WebSocketException

logger = logging.getLogger("vdl2feed.subscriber")

INITIAL_BACKOFF = 1.0
MAX_BACKOFF = 10.0


class SubscriberStatus(str, Enum):
    """Connection states reported to the status callback."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    STOPPED = "stopped"


class FeedSubscriber:
    """Consume the enriched message feed until stopped."""

    def __init__(
        self,
        url: str,
        *,
        on_message: Callable[[dict[str, Any]], None],
        on_status: Callable[[SubscriberStatus, float | None], None] | None = None,
        initial_backoff: float = INITIAL_BACKOFF,
        max_backoff: float = MAX_BACKOFF,
        connect: Callable[[str], Any] = websockets.connect,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.url = url
        self.on_message = on_message
        self.on_status = on_status
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.connect = connect
        self.sleep = sleep
        self.backoff = initial_backoff
        self.status = SubscriberStatus.STOPPED
        self._running = False

    def stop(self) -> None:
        self._running = False

    async def run(self) -> None:
        """Connect, consume and reconnect until ``stop`` is called or cancelled."""

        self._running = True
        self._set_status(SubscriberStatus.CONNECTING)
        while self._running:
            try:
                async with self.connect(self.url) as ws:
                    self.backoff = self.initial_backoff
                    self._set_status(SubscriberStatus.CONNECTED)
                    async for frame in ws:
                        self._handle_frame(frame)
                        if not self._running:
                            break
            except asyncio.CancelledError:
                logger.info("Feed subscriber cancelled")
                self._set_status(SubscriberStatus.STOPPED)
                raise
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                logger.warning("Feed connection error: %s", exc)

            if not self._running:
                break

            delay = self.backoff
            self._set_status(SubscriberStatus.RECONNECTING, delay)
            logger.info("Feed closed, retrying in %.0fs", delay)
            await self.sleep(delay)
            self.backoff = min(self.backoff * 2, self.max_backoff)

        self._set_status(SubscriberStatus.STOPPED)

    def _handle_frame(self, frame: str | bytes) -> None:
        try:
            message = json.loads(frame)
        except ValueError as exc:
            logger.warning("Discarding undecodable feed frame: %s", exc)
            return
        if not isinstance(message, dict):
            logger.warning("Discarding non-object feed frame")
            return
        try:
            self.on_message(message)
        except Exception:
            logger.exception("Feed message handler failed")

    def _set_status(self, status: SubscriberStatus, delay: float | None = None) -> None:
        self.status = status
        if self.on_status:
            self.on_status(status, delay)


__all__ = ["FeedSubscriber", "SubscriberStatus", "INITIAL_BACKOFF", "MAX_BACKOFF"]
