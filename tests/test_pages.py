"""Tests for status page rendering."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from uptimer.errors import RenderError
from uptimer.health.history import HistoryEntry
from uptimer.health.probes import ProbeResult
from uptimer.pages import DEFAULT_INCIDENTS, PageRenderer, StatusSnapshot, load_incidents


@pytest.fixture
def snapshot() -> StatusSnapshot:
    return StatusSnapshot(
        results=[ProbeResult(name="web", up=True), ProbeResult(name="api", up=False)],
        history={
            "web": [
                HistoryEntry(timestamp="2026-10-19T12:01:00+02:00", up=True),
                HistoryEntry(timestamp="2026-10-19T12:00:00+02:00", up=False),
            ],
        },
        last_updated=datetime(2026, 10, 19, 12, 1, 5),
    )


@pytest.fixture
def renderer(tmp_path: Path) -> PageRenderer:
    return PageRenderer(tmp_path / "site", tmp_path / "incidents.html")


class TestIncidents:
    def test_missing_file_falls_back(self, tmp_path: Path) -> None:
        assert str(load_incidents(tmp_path / "nope.html")) == DEFAULT_INCIDENTS

    def test_reads_fragment(self, tmp_path: Path) -> None:
        path = tmp_path / "incidents.html"
        path.write_text("<p>DB maintenance at 22:00</p>")
        assert str(load_incidents(path)) == "<p>DB maintenance at 22:00</p>"


class TestRenderIndex:
    def test_lists_services_sorted_with_labels(self, renderer: PageRenderer, snapshot: StatusSnapshot) -> None:
        html = renderer.render_index(snapshot)
        assert html.index("<span>api</span>") < html.index("<span>web</span>")
        assert '<span class="status-down">Down</span>' in html
        assert '<span class="status-up">Up</span>' in html
        assert "Last updated: 2026-10-19 12:01:05" in html

    def test_incidents_not_escaped(self, renderer: PageRenderer, snapshot: StatusSnapshot) -> None:
        renderer.incidents_file.write_text("<h2>Outage</h2>")
        assert "<h2>Outage</h2>" in renderer.render_index(snapshot)

    def test_default_incidents(self, renderer: PageRenderer, snapshot: StatusSnapshot) -> None:
        assert DEFAULT_INCIDENTS in renderer.render_index(snapshot)

    def test_service_names_escaped(self, renderer: PageRenderer) -> None:
        snap = StatusSnapshot(
            results=[ProbeResult(name="<script>", up=True)],
            history={},
            last_updated=datetime(2026, 1, 1),
        )
        html = renderer.render_index(snap)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestRenderHistory:
    def test_entries_with_display_time(self, renderer: PageRenderer, snapshot: StatusSnapshot) -> None:
        html = renderer.render_history(snapshot)
        assert "<h2>web</h2>" in html
        assert "2026-10-19 12:01:00" in html
        assert html.index("12:01:00") < html.index("12:00:00")
        assert 'href="/"' in html

    def test_empty_history(self, renderer: PageRenderer) -> None:
        snap = StatusSnapshot(results=[], history={}, last_updated=datetime(2026, 1, 1))
        assert "Status History" in renderer.render_history(snap)


class TestRender:
    def test_writes_both_pages(self, renderer: PageRenderer, snapshot: StatusSnapshot) -> None:
        renderer.render(snapshot)
        assert "Service Status" in renderer.index_path.read_text()
        assert "Status History" in renderer.history_path.read_text()
        assert not list(renderer.output_dir.glob("*.tmp"))

    def test_write_failure_raises(self, tmp_path: Path, snapshot: StatusSnapshot) -> None:
        blocker = tmp_path / "site"
        blocker.write_text("a file where the output dir should be")
        renderer = PageRenderer(blocker, tmp_path / "incidents.html")
        with pytest.raises(RenderError):
            renderer.render(snapshot)
