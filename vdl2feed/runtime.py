"""Wiring of the pipeline components and their background tasks."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
import logging

from vdl2feed.config import Settings
from vdl2feed.db import open_reference_store
from vdl2feed.ingestors import start_udp_listener
from vdl2feed.services import (
    Broadcaster,
    IngestPipeline,
    ReferenceLookup,
    RotatingLogWriter,
    StatsAggregator,
    UnknownKeyLedger,
    rotate_periodically,
)

logger = logging.getLogger("vdl2feed.runtime")


@dataclass
class FeedRuntime:
    """Owned pipeline state shared by the UDP listener and the API surfaces."""

    pipeline: IngestPipeline
    settings: Settings
    udp_transport: asyncio.DatagramTransport | None = None
    rotation_task: asyncio.Task | None = None
    _closed: bool = field(default=False, repr=False)

    @property
    def stats(self) -> StatsAggregator:
        return self.pipeline.stats

    @property
    def broadcaster(self) -> Broadcaster:
        return self.pipeline.broadcaster

    @property
    def writer(self) -> RotatingLogWriter:
        return self.pipeline.writer

    async def start(self) -> None:
        """Bind the UDP port and start the rotation timer."""

        self.udp_transport, _ = await start_udp_listener(
            self.pipeline,
            host=self.settings.bind_host,
            port=self.settings.udp_port,
        )
        self.rotation_task = asyncio.create_task(
            rotate_periodically(self.writer, self.settings.rotation_interval_seconds)
        )
        logger.info("Ingestion pipeline started")

    async def stop(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self.rotation_task:
            self.rotation_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.rotation_task
        if self.udp_transport:
            self.udp_transport.close()
        await self.broadcaster.close()
        logger.info("Ingestion pipeline stopped")


def build_runtime(settings: Settings) -> FeedRuntime:
    """Assemble the pipeline from startup settings.

    Raises ReferenceStoreError when the reference store cannot be opened, so
    that nothing is bound before the process gives up.
    """

    session_factory = open_reference_store(settings.reference_db_path)
    ledger = UnknownKeyLedger(settings.unknown_dir)
    lookup = ReferenceLookup(
        session_factory, ledger, debug_lookups=settings.debug_lookups
    )
    writer = RotatingLogWriter(
        settings.log_dir,
        prefix=settings.log_prefix,
        retention_days=settings.retention_days,
    )
    pipeline = IngestPipeline(
        lookup=lookup,
        writer=writer,
        stats=StatsAggregator(),
        broadcaster=Broadcaster(),
        debug_lookups=settings.debug_lookups,
    )
    return FeedRuntime(pipeline=pipeline, settings=settings)


__all__ = ["FeedRuntime", "build_runtime"]
