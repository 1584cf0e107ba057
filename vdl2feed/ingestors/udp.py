"""UDP listener feeding decoded VDL2 datagrams into the pipeline."""

from __future__ import annotations

import asyncio
import logging

from vdl2feed.services.pipeline import IngestPipeline

logger = logging.getLogger("vdl2feed.ingestors.udp")


class UdpIngestProtocol(asyncio.DatagramProtocol):
    """Hand each received datagram to the pipeline, in arrival order.

    Processing happens inside ``datagram_received`` so two datagrams are never
    handled at the same time.
    """

    def __init__(self, pipeline: IngestPipeline) -> None:
        self.pipeline = pipeline
        self.received = 0

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        sockname = transport.get_extra_info("sockname")
        logger.info("UDP listener on %s", sockname)

    def datagram_received(self, data: bytes, addr) -> None:
        self.received += 1
        try:
            self.pipeline.handle_datagram(data)
        except Exception:  # pragma: no cover - the loop must survive any datagram
            logger.exception("Unhandled error processing datagram from %s", addr)

    def error_received(self, exc: Exception) -> None:
        logger.warning("UDP socket error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc:
            logger.warning("UDP listener closed with error: %s", exc)
        else:
            logger.info("UDP listener closed")


async def start_udp_listener(
    pipeline: IngestPipeline, *, host: str = "0.0.0.0", port: int = 5555
) -> tuple[asyncio.DatagramTransport, UdpIngestProtocol]:
    """Bind the inbound UDP port and start feeding the pipeline."""

    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: UdpIngestProtocol(pipeline),
        local_addr=(host, port),
    )
    return transport, protocol


__all__ = ["UdpIngestProtocol", "start_udp_listener"]
