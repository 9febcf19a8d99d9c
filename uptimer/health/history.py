"""History store — bounded per-service status history in a JSON file.

The file maps service name to a list of entries, newest first::

    {"web": [{"timestamp": "2026-10-19T12:01:00+00:00", "up": true}, ...]}

There is no in-memory cache between ticks: each tick loads the file, updates
it and writes it back. A missing or corrupt file is an empty history. The file
is not locked, so only one scheduler may own it.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .probes import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10

# Unparseable timestamps sort as the zero time, i.e. last.
_ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded outcome for one service."""

    timestamp: str  # RFC3339
    up: bool

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "up": self.up}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "HistoryEntry":
        # Older files store the outcome under "status".
        up = raw["up"] if "up" in raw else raw["status"]
        if not isinstance(up, bool):
            raise ValueError(f"outcome must be a boolean, got {up!r}")
        return cls(timestamp=str(raw["timestamp"]), up=up)


History = dict[str, list[HistoryEntry]]


def format_timestamp(moment: datetime) -> str:
    """RFC3339 with second precision, in local time when naive."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat(timespec="seconds")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp; anything unparseable is the zero time."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return _ZERO_TIME
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


# ── Store ────────────────────────────────────────────────────────────────────


class HistoryStore:
    """Load / update / save cycle for the history file."""

    def __init__(
        self,
        path: Path,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.path = Path(path)
        self.max_entries = max_entries
        self._clock = clock

    def load(self) -> History:
        """Read the history file. Never raises; failures give an empty history."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("No history file at %s — starting empty", self.path)
            return {}
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Failed to read history %s: %s — starting empty", self.path, e)
            return {}

        if not isinstance(raw, dict):
            logger.warning("History %s is not a mapping — starting empty", self.path)
            return {}

        history: History = {}
        for name, entries in raw.items():
            if not isinstance(entries, list):
                logger.warning("Skipping malformed history for %s", name)
                continue
            parsed: list[HistoryEntry] = []
            for entry in entries:
                try:
                    parsed.append(HistoryEntry.from_dict(entry))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping malformed history entry for %s: %s", name, e)
            history[str(name)] = parsed
        return history

    def save(self, history: History) -> OSError | None:
        """Replace the history file. Returns the error instead of raising.

        The file is swapped in whole, so a crash mid-write leaves the previous
        history intact.
        """
        payload = {
            name: [entry.to_dict() for entry in entries]
            for name, entries in history.items()
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            return e
        return None

    def update(
        self,
        history: History,
        results: Iterable[ProbeResult],
        now: datetime | None = None,
    ) -> History:
        """Record one tick of results, keep each service sorted and capped, save.

        All entries of a tick share one timestamp. ``history`` is modified in
        place and returned. A failed save is logged; the tick's entries are
        then only in memory.
        """
        timestamp = format_timestamp(now or self._clock())

        for result in results:
            entries = history.setdefault(result.name, [])
            # Inserted at the front so a stable sort keeps it ahead of ties.
            entries.insert(0, HistoryEntry(timestamp=timestamp, up=result.up))
            entries.sort(key=lambda e: parse_timestamp(e.timestamp), reverse=True)
            del entries[self.max_entries:]

        error = self.save(history)
        if error is not None:
            logger.error("Failed to save history to %s: %s", self.path, error)
        return history
