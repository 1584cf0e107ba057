"""Per-datagram ingestion: normalize, enrich, persist, aggregate, publish."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from typing import Any, Callable

from vdl2feed.models.aircraft import EMPTY_ENRICHMENT
from vdl2feed.services.address import is_absent, normalize_address
from vdl2feed.services.broadcaster import Broadcaster
from vdl2feed.services.log_writer import RotatingLogWriter
from vdl2feed.services.reference_lookup import ReferenceLookup
from vdl2feed.services.statistics import StatsAggregator

logger = logging.getLogger("vdl2feed.pipeline")


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a UTC ISO-8601 timestamp with millisecond precision and a Z suffix."""

    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _event_time(vdl2: dict[str, Any]) -> datetime | None:
    t = vdl2.get("t")
    seconds = t.get("sec") if isinstance(t, dict) else None
    if not seconds:
        return None
    try:
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug("Ignoring unusable event time: %r", seconds)
        return None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _source_address(vdl2: dict[str, Any]) -> Any:
    avlc = vdl2.get("avlc")
    src = avlc.get("src") if isinstance(avlc, dict) else None
    return src.get("addr") if isinstance(src, dict) else None


class IngestPipeline:
    """Drive one datagram through the enrichment pipeline.

    Datagrams are handled synchronously, one at a time. Every step contains
    its own failures so that a bad datagram or a filesystem error never stops
    the loop.
    """

    def __init__(
        self,
        *,
        lookup: ReferenceLookup,
        writer: RotatingLogWriter,
        stats: StatsAggregator,
        broadcaster: Broadcaster,
        debug_lookups: bool = False,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.lookup = lookup
        self.writer = writer
        self.stats = stats
        self.broadcaster = broadcaster
        self.debug_lookups = debug_lookups
        self.clock = clock

    def handle_datagram(self, data: bytes) -> dict[str, Any] | None:
        """Process one datagram; return the enriched message or None if dropped."""

        self.writer.rotate_if_needed()

        parsed = self.parse(data)
        if parsed is None:
            return None

        message = self.enrich(parsed)

        self.writer.write(message)
        try:
            self.stats.record(message)
        except Exception:  # pragma: no cover - fail soft
            logger.exception("Failed to update statistics")
        try:
            self.broadcaster.publish(message)
        except Exception:  # pragma: no cover - fail soft
            logger.exception("Failed to publish message")
        return message

    def parse(self, data: bytes) -> dict[str, Any] | None:
        try:
            parsed = json.loads(
                data.decode("utf-8").strip(), parse_constant=_reject_constant
            )
        except (UnicodeDecodeError, ValueError) as exc:
            logger.error("Invalid JSON: %s", exc)
            return None
        if not isinstance(parsed, dict):
            logger.error("Invalid JSON: expected an object, got %s", type(parsed).__name__)
            return None
        return parsed

    def enrich(self, parsed: dict[str, Any]) -> dict[str, Any]:
        vdl2 = parsed.get("vdl2")
        if not isinstance(vdl2, dict):
            vdl2 = {}

        key = normalize_address(_source_address(vdl2))
        record = None
        if not is_absent(key):
            record = self.lookup.lookup(key)
        elif self.debug_lookups:
            logger.debug("Packet without src.addr, skipping DB lookup")

        enrichment = record or EMPTY_ENRICHMENT
        received_at = _event_time(vdl2) or self.clock()
        return {
            **parsed,
            "db": enrichment.model_dump(),
            "timestamp_iso": format_timestamp(received_at),
        }


__all__ = ["IngestPipeline", "format_timestamp"]
