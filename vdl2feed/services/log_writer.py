"""Daily-rotating JSONL log of enriched messages."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
import json
import logging
import os
from pathlib import Path
import re
from typing import Any, Callable

logger = logging.getLogger("vdl2feed.log_writer")


class RotatingLogWriter:
    """Append enriched messages to ``<prefix>-YYYY-MM-DD.jsonl``.

    The file follows the local calendar day. ``<prefix>-latest.jsonl`` is a
    symlink to the current day's file, and files older than the retention
    window are deleted on each rotation. Filesystem errors are logged and
    swallowed so that ingestion never stalls on them.
    """

    def __init__(
        self,
        log_dir: str | Path,
        *,
        prefix: str = "received",
        retention_days: int = 7,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.retention_days = max(retention_days, 1)
        self.clock = clock
        self.alias_path = self.log_dir / f"{prefix}-latest.jsonl"
        self._name_re = re.compile(
            rf"^{re.escape(prefix)}-(\d{{4}}-\d{{2}}-\d{{2}})\.jsonl$"
        )

        self.current_date = self.clock()
        self.current_path = self.path_for(self.current_date)
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Failed to create log directory %s: %s", self.log_dir, exc)
        self._activate()

    def path_for(self, day: date) -> Path:
        return self.log_dir / f"{self.prefix}-{day.isoformat()}.jsonl"

    def write(self, message: dict[str, Any]) -> bool:
        """Append one message as a JSON line; return False if the append failed."""

        try:
            line = json.dumps(message, allow_nan=False)
            with self.current_path.open("a", encoding="utf-8") as log_file:
                log_file.write(line + "\n")
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed writing daily log %s: %s", self.current_path, exc)
            return False
        return True

    def rotate_if_needed(self) -> bool:
        """Switch to a new file when the local date has changed."""

        today = self.clock()
        if today == self.current_date:
            return False

        self.current_date = today
        self.current_path = self.path_for(today)
        self._activate()
        logger.info("Rotated log to %s", self.current_path)
        return True

    def prune(self) -> list[Path]:
        """Delete dated log files older than the retention window."""

        cutoff = self.current_date - timedelta(days=self.retention_days)
        removed: list[Path] = []
        try:
            entries = list(self.log_dir.iterdir())
        except OSError as exc:
            logger.warning("Failed to list log directory %s: %s", self.log_dir, exc)
            return removed

        for entry in entries:
            match = self._name_re.match(entry.name)
            if not match:
                continue
            try:
                file_date = date.fromisoformat(match.group(1))
            except ValueError:
                continue
            if file_date >= cutoff:
                continue
            try:
                entry.unlink()
                removed.append(entry)
            except OSError as exc:
                logger.warning("Failed to prune log file %s: %s", entry, exc)

        if removed:
            logger.info("Pruned %s log file(s) older than %s", len(removed), cutoff)
        return removed

    def _activate(self) -> None:
        self._touch()
        self._update_alias()
        self.prune()

    def _touch(self) -> None:
        try:
            self.current_path.touch(exist_ok=True)
        except OSError as exc:
            logger.warning("Failed to create log file %s: %s", self.current_path, exc)

    def _update_alias(self) -> None:
        try:
            if self.alias_path.is_symlink() or self.alias_path.exists():
                self.alias_path.unlink()
            os.symlink(self.current_path.name, self.alias_path)
        except OSError as exc:
            logger.warning("Failed to update latest alias %s: %s", self.alias_path, exc)


async def rotate_periodically(writer: RotatingLogWriter, interval: float = 30.0) -> None:
    """Run rotation checks on a fixed interval until cancelled."""

    while True:
        await asyncio.sleep(interval)
        try:
            writer.rotate_if_needed()
        except Exception:  # pragma: no cover - fail soft
            logger.exception("Scheduled log rotation failed")


__all__ = ["RotatingLogWriter", "rotate_periodically"]
