"""Aircraft reference lookup with negative-result caching."""

from __future__ import annotations

from datetime import date, datetime, timezone
import logging
from pathlib import Path
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from vdl2feed.db_models import Aircraft
from vdl2feed.models.aircraft import AircraftRecord
from vdl2feed.services.address import is_absent

logger = logging.getLogger("vdl2feed.reference_lookup")


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class UnknownKeyLedger:
    """Remember keys missing from the reference store and log each one once.

    The in-memory set lives for the process lifetime. The first miss of a key
    appends one line to that day's ``unknown_hex_YYYY-MM-DD.log``.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        clock: Callable[[], datetime] = _utc_now,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.directory = Path(directory)
        self.clock = clock
        self.today = today
        self._seen: set[str] = set()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Failed to create unknown-key directory %s: %s", self.directory, exc)

    def __contains__(self, key: str) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def path_for(self, day: date) -> Path:
        return self.directory / f"unknown_hex_{day.isoformat()}.log"

    def record(self, key: str) -> bool:
        """Record a miss; return True once the key has been written to the ledger.

        A key whose append failed is not remembered, so the next miss retries.
        """

        if not key or key in self._seen:
            return False

        stamp = self.clock().isoformat(timespec="milliseconds").replace("+00:00", "Z")
        line = f"{stamp} {key} — not found in DB\n"
        try:
            with self.path_for(self.today()).open("a", encoding="utf-8") as ledger:
                ledger.write(line)
        except OSError as exc:
            logger.error("Failed to log unknown address %s: %s", key, exc)
            return False
        self._seen.add(key)
        return True


class ReferenceLookup:
    """Point lookups from address key to aircraft metadata."""

    def __init__(
        self,
        session_factory: sessionmaker,
        ledger: UnknownKeyLedger,
        *,
        debug_lookups: bool = False,
    ) -> None:
        self.session_factory = session_factory
        self.ledger = ledger
        self.debug_lookups = debug_lookups
        self._reported: set[str] = set()

    def lookup(self, key: str) -> AircraftRecord | None:
        """Return the reference record for ``key`` or None when unknown.

        Query failures are logged and reported as a miss for this message only;
        they are not added to the unknown-key ledger.
        """

        if is_absent(key):
            return None
        if key in self.ledger:
            return None

        try:
            with self.session_factory() as session:
                row = session.get(Aircraft, key)
                record = AircraftRecord.from_row(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("DB lookup error for %s: %s", key, exc)
            return None

        if record is None:
            self._report(key, "No DB match for %s", key)
            self.ledger.record(key)
            return None

        self._report(
            key,
            "DB match for %s -> reg:%s type:%s owner:%s",
            key,
            record.reg,
            record.icaotype,
            record.ownop,
        )
        return record

    def _report(self, key: str, message: str, *args) -> None:
        if not self.debug_lookups or key in self._reported:
            return
        self._reported.add(key)
        logger.info(message, *args)


__all__ = ["ReferenceLookup", "UnknownKeyLedger"]
