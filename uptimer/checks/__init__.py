"""Checks registry — the probe list read from checks.yaml."""

from .registry import ProbeSpec, load_checks
