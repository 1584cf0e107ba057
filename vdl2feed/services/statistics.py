"""Rolling statistics over the enriched message stream."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable

from vdl2feed.services.address import is_absent, normalize_address

UNKNOWN_LABEL = "Unknown"
TIMELINE_HORIZON = 1440
TIMELINE_WINDOW = 120
TOP_N = 10


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _dig(payload: Any, *path: str) -> Any:
    node = payload
    for part in path:
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


@dataclass
class MinuteBucket:
    """Messages processed during one minute."""

    time: str
    count: int = 0


@dataclass
class StatsSummary:
    """Point-in-time copy of the running totals."""

    total_packets: int
    unique_aircraft: int
    unique_flights: int
    top_owners: list[tuple[str, int]]
    top_models: list[tuple[str, int]]


class StatsAggregator:
    """Running totals, distinct sets, top-N tables and a per-minute series.

    Writes come from the ingestion path and reads from the query surface; a
    single lock keeps every read consistent with a whole number of records.
    """

    def __init__(
        self,
        *,
        horizon: int = TIMELINE_HORIZON,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.clock = clock
        self._lock = Lock()
        self._total = 0
        self._aircraft: set[str] = set()
        self._flights: set[str] = set()
        self._owners: Counter[str] = Counter()
        self._models: Counter[str] = Counter()
        self._timeline: deque[MinuteBucket] = deque(maxlen=horizon)

    def record(self, message: dict[str, Any]) -> None:
        raw_addr = _dig(message, "vdl2", "avlc", "src", "addr")
        key = normalize_address(raw_addr) if raw_addr else ""
        flight = _dig(message, "vdl2", "avlc", "acars", "flight") or ""
        enrichment = message.get("db") or {}
        owner = enrichment.get("ownop") or UNKNOWN_LABEL
        model = enrichment.get("icaotype") or UNKNOWN_LABEL
        minute = self.clock().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M")

        with self._lock:
            self._total += 1
            if not is_absent(key):
                self._aircraft.add(key)
            if flight:
                self._flights.add(str(flight))
            self._owners[owner] += 1
            self._models[model] += 1

            # deque(maxlen) drops the oldest bucket once the horizon is full
            if self._timeline and self._timeline[-1].time == minute:
                self._timeline[-1].count += 1
            else:
                self._timeline.append(MinuteBucket(time=minute, count=1))

    def summary(self, top_n: int = TOP_N) -> StatsSummary:
        with self._lock:
            return StatsSummary(
                total_packets=self._total,
                unique_aircraft=len(self._aircraft),
                unique_flights=len(self._flights),
                top_owners=self._owners.most_common(top_n),
                top_models=self._models.most_common(top_n),
            )

    def timeline(self, limit: int = TIMELINE_WINDOW) -> list[MinuteBucket]:
        with self._lock:
            recent = list(self._timeline)[-limit:] if limit > 0 else []
            return [MinuteBucket(time=b.time, count=b.count) for b in recent]


__all__ = [
    "MinuteBucket",
    "StatsAggregator",
    "StatsSummary",
    "TIMELINE_HORIZON",
    "TIMELINE_WINDOW",
    "UNKNOWN_LABEL",
]
