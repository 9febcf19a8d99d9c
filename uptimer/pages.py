"""Status page rendering — index.html and history.html from a tick snapshot."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import Markup

from uptimer.errors import RenderError
from uptimer.health.history import History, parse_timestamp
from uptimer.health.probes import ProbeResult

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
HISTORY_PAGE = "history.html"
DEFAULT_INCIDENTS = "<h2>All Fine!</h2>"

_BASE_STYLE = """
        body {
            font-family: sans-serif;
            line-height: 1.6;
            color: #e0e0e0;
            max-width: 1200px;
            margin: auto;
            padding: 20px;
            background: #181818;
        }
        h1, h2 { color: #e0e0e0; text-align: center; }
        .status-up { color: #27ae60; }
        .status-down { color: #e74c3c; }
        .footer { text-align: center; font-size: .9em; color: #a0a0a0; margin-top: 40px; }
        .footer a { color: #9b59b6; text-decoration: none; }
        .footer a:hover { text-decoration: underline; }
"""

_INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Service Status</title>
    <style>{{ style }}
        .status-list { list-style: none; padding: 0; }
        .status-item {
            background: #242424;
            border-radius: 8px;
            padding: 10px 15px;
            margin-bottom: 10px;
            display: flex;
            justify-content: space-between;
        }
        .incidents { margin-top: 40px; }
    </style>
</head>
<body>
<h1>Service Status</h1>
<ul class="status-list">
    {% for result in results %}
    <li class="status-item">
        <span>{{ result.name }}</span>
        <span class="{{ 'status-up' if result.up else 'status-down' }}">{{ result.up | updown }}</span>
    </li>
    {% endfor %}
</ul>
<div class="incidents">
    {{ incidents }}
</div>
<div class="footer">
    <p>Last updated: {{ last_updated }}</p>
    <p><a href="/history">View History</a></p>
</div>
</body>
</html>
"""

_HISTORY_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Status History</title>
    <style>{{ style }}
        .history-grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(250px, 1fr));
            gap: 20px;
            margin-bottom: 40px;
        }
        .history-item {
            background: #242424;
            border-radius: 8px;
            padding: 15px;
            max-height: 300px;
            overflow: auto;
        }
        .history-item h2 { font-size: 1.2rem; margin: 0; }
        .history-entry {
            margin-bottom: 5px;
            font-size: 0.9rem;
            display: flex;
            justify-content: space-between;
        }
    </style>
</head>
<body>
<h1>Status History</h1>
<div class="history-grid">
    {% for service, entries in history %}
    <div class="history-item">
        <h2>{{ service }}</h2>
        {% for entry in entries %}
        <div class="history-entry">
            <span>{{ entry.timestamp | display_time }}</span>
            <span class="{{ 'status-up' if entry.up else 'status-down' }}">{{ entry.up | updown }}</span>
        </div>
        {% endfor %}
    </div>
    {% endfor %}
</div>
<div class="footer">
    <p>Last updated: {{ last_updated }}</p>
    <p><a href="/">Back to Current Status</a></p>
</div>
</body>
</html>
"""


@dataclass
class StatusSnapshot:
    """Everything the pages need from one tick."""

    results: list[ProbeResult]
    history: History
    last_updated: datetime


def _updown(up: bool) -> str:
    return "Up" if up else "Down"


def _display_time(timestamp: str) -> str:
    # "2026-10-19T12:01:00+02:00" -> "2026-10-19 12:01:00"
    date, _, rest = timestamp.partition("T")
    return f"{date} {rest[:8]}".strip()


def _build_env() -> Environment:
    env = Environment(
        loader=DictLoader({INDEX_PAGE: _INDEX_TEMPLATE, HISTORY_PAGE: _HISTORY_TEMPLATE}),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["updown"] = _updown
    env.filters["display_time"] = _display_time
    env.globals["style"] = Markup(_BASE_STYLE)
    return env


def load_incidents(path: Path) -> Markup:
    """Read the operator's incident notes (trusted HTML fragment)."""
    try:
        return Markup(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        logger.warning("Failed to load incidents from %s: %s", path, e)
        return Markup(DEFAULT_INCIDENTS)


class PageRenderer:
    """Writes the status and history pages into an output directory."""

    def __init__(self, output_dir: Path, incidents_file: Path) -> None:
        self.output_dir = Path(output_dir)
        self.incidents_file = Path(incidents_file)
        self._env = _build_env()

    @property
    def index_path(self) -> Path:
        return self.output_dir / INDEX_PAGE

    @property
    def history_path(self) -> Path:
        return self.output_dir / HISTORY_PAGE

    def render_index(self, snapshot: StatusSnapshot) -> str:
        return self._env.get_template(INDEX_PAGE).render(
            results=sorted(snapshot.results, key=lambda r: r.name),
            incidents=load_incidents(self.incidents_file),
            last_updated=snapshot.last_updated.strftime("%Y-%m-%d %H:%M:%S"),
        )

    def render_history(self, snapshot: StatusSnapshot) -> str:
        history = [
            (name, sorted(entries, key=lambda e: parse_timestamp(e.timestamp), reverse=True))
            for name, entries in sorted(snapshot.history.items())
        ]
        return self._env.get_template(HISTORY_PAGE).render(
            history=history,
            last_updated=snapshot.last_updated.strftime("%Y-%m-%d %H:%M:%S"),
        )

    def render(self, snapshot: StatusSnapshot) -> None:
        """Render and write both pages. Raises RenderError if a write fails."""
        self._write(self.index_path, self.render_index(snapshot))
        self._write(self.history_path, self.render_history(snapshot))

    def _write(self, path: Path, html: str) -> None:
        # Readers only ever see a complete page.
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(html, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise RenderError(f"Failed to write {path}: {e}") from e
