"""Health subsystem — probes and history store (scheduler lives in .scheduler)."""

from .history import History, HistoryEntry, HistoryStore
from .probes import ProbeKind, ProbeResult, ProbeRunner, execute_probe
