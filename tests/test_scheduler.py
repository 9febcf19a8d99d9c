"""Tests for the status scheduler tick and loop."""

from __future__ import annotations

import asyncio
import json
import threading
from unittest.mock import patch

import pytest

from uptimer.config import Settings
from uptimer.errors import ChecksFileError, RenderError
from uptimer.health.probes import ProbeResult
from uptimer.health.scheduler import StatusScheduler


class TestTick:
    def test_full_tick(self, settings: Settings, write_checks, open_port: int, closed_port: int) -> None:
        write_checks([
            {"name": "db", "type": "port", "host": "127.0.0.1", "port": open_port},
            {"name": "cache", "type": "port", "host": "127.0.0.1", "port": closed_port},
            {"name": "odd", "type": "smtp", "host": "127.0.0.1"},
        ])
        scheduler = StatusScheduler(settings)

        snapshot = asyncio.run(scheduler.tick())

        assert sorted(snapshot.results, key=lambda r: r.name) == [
            ProbeResult(name="cache", up=False),
            ProbeResult(name="db", up=True),
            ProbeResult(name="odd", up=False),
        ]
        saved = json.loads(settings.status_history_file.read_text())
        assert set(saved) == {"db", "cache", "odd"}
        assert saved["db"][0]["up"] is True

        index = (settings.output_dir / "index.html").read_text()
        assert "db" in index and "cache" in index
        assert (settings.output_dir / "history.html").exists()
        assert scheduler.ticks == 1
        assert scheduler.last_snapshot is snapshot

    def test_history_capped_across_ticks(self, settings: Settings, write_checks, open_port: int) -> None:
        write_checks([{"name": "db", "type": "port", "host": "127.0.0.1", "port": open_port}])
        scheduler = StatusScheduler(settings)

        for _ in range(5):
            asyncio.run(scheduler.tick())

        saved = json.loads(settings.status_history_file.read_text())
        assert len(saved["db"]) == settings.max_history_entries

    def test_missing_checks_is_fatal_before_render(self, settings: Settings) -> None:
        scheduler = StatusScheduler(settings)

        with pytest.raises(ChecksFileError):
            asyncio.run(scheduler.tick())

        assert not (settings.output_dir / "index.html").exists()
        assert not settings.status_history_file.exists()

    def test_history_save_failure_does_not_stop_tick(self, settings: Settings, write_checks) -> None:
        write_checks([{"name": "odd", "type": "smtp"}])
        settings.status_history_file.mkdir()

        snapshot = asyncio.run(StatusScheduler(settings).tick())

        assert snapshot.history["odd"][0].up is False
        assert (settings.output_dir / "index.html").exists()

    def test_render_failure_propagates(self, settings: Settings, write_checks) -> None:
        write_checks([{"name": "odd", "type": "smtp"}])
        settings.output_dir.write_text("not a directory")

        with pytest.raises(RenderError):
            asyncio.run(StatusScheduler(settings).tick())

    def test_file_work_runs_off_the_loop_thread(self, settings: Settings, write_checks) -> None:
        write_checks([{"name": "odd", "type": "smtp"}])
        scheduler = StatusScheduler(settings)
        threads: dict[str, int] = {}

        def spy(label, fn):
            def wrapper(*args):
                threads[label] = threading.get_ident()
                return fn(*args)
            return wrapper

        scheduler.load_specs = spy("load", scheduler.load_specs)
        scheduler.record = spy("record", scheduler.record)
        scheduler.renderer.render = spy("render", scheduler.renderer.render)

        async def tick_on_loop() -> int:
            await scheduler.tick()
            return threading.get_ident()

        loop_thread = asyncio.run(tick_on_loop())

        assert set(threads) == {"load", "record", "render"}
        assert loop_thread not in threads.values()


class TestRunForever:
    def test_stops_when_checks_file_disappears(self, settings: Settings, write_checks) -> None:
        checks = write_checks([{"name": "odd", "type": "smtp"}])
        sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            checks.unlink()

        scheduler = StatusScheduler(settings)
        with patch("uptimer.health.scheduler.asyncio.sleep", new=fake_sleep):
            with pytest.raises(ChecksFileError):
                asyncio.run(scheduler.run_forever())

        assert scheduler.ticks == 1
        assert sleeps == [settings.check_interval]
