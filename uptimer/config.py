from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file.

    Built once at startup and handed to each component; never mutated.
    """

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_ignore_empty": True,
        "frozen": True,
    }

    # Scheduler
    check_interval: int = Field(default=60, ge=1)  # seconds between ticks
    max_history_entries: int = Field(default=10, ge=1)  # per service

    # Probes
    probe_timeout: float = Field(default=2.0, gt=0)  # seconds, every probe kind

    # Files
    checks_file: Path = Path("checks.yaml")
    status_history_file: Path = Path("history.json")
    incidents_file: Path = Path("incidents.html")
    output_dir: Path = Path(".")  # where index.html / history.html are written

    # HTTP server (no server when port is unset)
    host: str = "0.0.0.0"
    port: int | None = Field(default=None, ge=1, le=65535)

    # Logging
    log_level: str = "INFO"
