"""Status scheduler — the monitor's main loop.

Each tick reads the checks file, probes every service, folds the results into
the history file and re-renders the pages, then sleeps for the check interval.
A broken checks file ends the loop; probe failures never do.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from uptimer.checks.registry import ProbeSpec, load_checks
from uptimer.config import Settings
from uptimer.pages import PageRenderer, StatusSnapshot

from .history import History, HistoryStore
from .probes import ProbeResult, ProbeRunner

logger = logging.getLogger(__name__)


class StatusScheduler:
    """Runs ticks back to back; a slow tick delays the next one, never overlaps it."""

    def __init__(
        self,
        settings: Settings,
        runner: ProbeRunner | None = None,
        store: HistoryStore | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner or ProbeRunner(timeout=settings.probe_timeout)
        self.store = store or HistoryStore(
            settings.status_history_file,
            max_entries=settings.max_history_entries,
        )
        self.renderer = renderer or PageRenderer(settings.output_dir, settings.incidents_file)
        self.last_snapshot: StatusSnapshot | None = None
        self.ticks = 0

    def load_specs(self) -> list[ProbeSpec]:
        """Read the probe list. Raises ChecksFileError."""
        return load_checks(self.settings.checks_file)

    def record(self, results: list[ProbeResult]) -> History:
        """Fold a tick's results into the history file."""
        return self.store.update(self.store.load(), results)

    async def tick(self) -> StatusSnapshot:
        """Run one probe / record / render cycle.

        Every blocking step runs in the default executor so the event loop,
        shared with the page server, stays responsive.
        """
        loop = asyncio.get_running_loop()
        specs = await loop.run_in_executor(None, self.load_specs)
        results = await loop.run_in_executor(None, self.runner.run_all, specs)
        history = await loop.run_in_executor(None, self.record, results)

        snapshot = StatusSnapshot(
            results=results,
            history=history,
            last_updated=datetime.now(timezone.utc).astimezone(),
        )
        await loop.run_in_executor(None, self.renderer.render, snapshot)

        self.last_snapshot = snapshot
        self.ticks += 1
        logger.info(
            "Status pages updated! %d/%d services up",
            sum(r.up for r in results), len(results),
        )
        return snapshot

    async def run_forever(self) -> None:
        """Tick, sleep, repeat. Only fatal errors get out of here."""
        logger.info(
            "Monitoring services from %s every %ds",
            self.settings.checks_file, self.settings.check_interval,
        )
        while True:
            await self.tick()
            await asyncio.sleep(self.settings.check_interval)
