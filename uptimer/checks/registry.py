"""Checks registry — loads checks.yaml into typed probe specs.

The file is a YAML list of records::

    - name: web
      type: http
      host: https://example.com
      expected_code: 200
    - name: db
      type: port
      host: 10.0.0.5
      port: 5432

Unlike most collaborators a broken checks file is not recoverable: every
failure raises ChecksFileError and the process is expected to stop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from uptimer.errors import ChecksFileError

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_CODE = 200


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProbeSpec:
    """Definition of a single probe from the checks file."""

    name: str
    kind: str  # http | ping | port, anything else probes as down
    host: str = ""  # full URL for http probes
    port: int = 0
    expected_status_code: int = DEFAULT_EXPECTED_CODE


# ── Loading ──────────────────────────────────────────────────────────────────


def load_checks(path: Path) -> list[ProbeSpec]:
    """Parse the checks file and return its probe specs in file order."""
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ChecksFileError(f"Failed to load checks file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ChecksFileError(f"Failed to parse checks file {path}: {e}") from e

    if raw is None:
        logger.warning("Checks file %s is empty — no probes will run", path)
        return []
    if not isinstance(raw, list):
        raise ChecksFileError(
            f"Failed to parse checks file {path}: expected a list, got {type(raw).__name__}"
        )

    specs = [_parse_check(entry, index) for index, entry in enumerate(raw)]
    logger.debug("Loaded %d checks from %s", len(specs), path)
    return specs


def _parse_check(entry: Any, index: int) -> ProbeSpec:
    if not isinstance(entry, dict):
        raise ChecksFileError(f"Check #{index} is not a mapping: {entry!r}")
    try:
        return ProbeSpec(
            name=str(entry.get("name") or ""),
            kind=str(entry.get("type") or ""),
            host=str(entry.get("host") or ""),
            port=int(entry.get("port") or 0),
            expected_status_code=int(entry.get("expected_code") or DEFAULT_EXPECTED_CODE),
        )
    except (TypeError, ValueError) as e:
        raise ChecksFileError(f"Check #{index} ({entry.get('name')!r}) is invalid: {e}") from e
