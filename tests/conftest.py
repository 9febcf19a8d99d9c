"""Shared test fixtures."""

from __future__ import annotations

import socket
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import yaml

from uptimer.config import Settings


@pytest.fixture
def open_port() -> Iterator[int]:
    """A loopback TCP port with a listener on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(16)
        yield sock.getsockname()[1]


@pytest.fixture
def closed_port() -> int:
    """A loopback TCP port nobody listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def write_checks(tmp_path: Path) -> Callable[[list[dict]], Path]:
    """Write a checks.yaml into tmp_path and return its path."""

    def _write(checks: list[dict]) -> Path:
        path = tmp_path / "checks.yaml"
        path.write_text(yaml.safe_dump(checks))
        return path

    return _write


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every file at tmp_path."""
    return Settings(
        checks_file=tmp_path / "checks.yaml",
        status_history_file=tmp_path / "history.json",
        incidents_file=tmp_path / "incidents.html",
        output_dir=tmp_path / "site",
        max_history_entries=3,
        probe_timeout=1.0,
    )
