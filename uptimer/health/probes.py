"""Probe engine — runs HTTP, ping and TCP port checks.

Every probe answers a single question, is the target up, and never raises:
transport errors, timeouts, unexpected status codes and unknown probe kinds
all come back as ``False``.
"""

from __future__ import annotations

import logging
import math
import platform
import socket
import subprocess
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum

import httpx

from uptimer.checks.registry import ProbeSpec

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0  # seconds


# ── Models ───────────────────────────────────────────────────────────────────


class ProbeKind(str, Enum):
    HTTP = "http"
    PING = "ping"
    PORT = "port"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe in one tick."""

    name: str
    up: bool


# ── Probes ───────────────────────────────────────────────────────────────────


def _fetch_status(client: httpx.Client, url: str) -> int:
    with client.stream("GET", url) as resp:
        return resp.status_code


def run_http_probe(url: str, expected_status: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """GET the URL and compare the status code. The body is never read.

    ``timeout`` bounds the whole request, not just each connect or read, so a
    server that trickles its headers is reported down once it runs out.
    """
    client = httpx.Client(timeout=timeout, follow_redirects=True)
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="http-probe")
    try:
        status_code = pool.submit(_fetch_status, client, url).result(timeout=timeout)
    except FutureTimeoutError:
        logger.debug("HTTP probe %s: no response within %.1fs", url, timeout)
        return False
    except Exception as e:
        logger.debug("HTTP probe %s failed: %s: %s", url, type(e).__name__, e)
        return False
    finally:
        # Closing the client drops a request still in flight.
        _close_client(client, url)
        pool.shutdown(wait=False)

    if status_code != expected_status:
        logger.debug("HTTP probe %s: expected %d, got %d", url, expected_status, status_code)
        return False
    return True


def _close_client(client: httpx.Client, url: str) -> None:
    try:
        client.close()
    except Exception as e:
        logger.debug("HTTP probe %s: close failed: %s: %s", url, type(e).__name__, e)


def ping_command(host: str, timeout: float = DEFAULT_TIMEOUT) -> list[str]:
    """Build a single-echo ping command line for the current platform."""
    seconds = max(1, math.ceil(timeout))
    system = platform.system()
    if system == "Windows":
        return ["ping", "-n", "1", "-w", str(seconds * 1000), host]
    if system == "Darwin":
        return ["ping", "-c", "1", "-t", str(seconds), host]
    return ["ping", "-c", "1", "-W", str(seconds), host]


def run_ping_probe(host: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Send one ICMP echo through the OS ping binary; only exit code 0 is up."""
    if not host:
        return False
    if host.startswith("-"):
        logger.warning("Ping probe: refusing host %r that looks like an option", host)
        return False
    try:
        proc = subprocess.run(
            ping_command(host, timeout),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout + 1,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("Ping probe %s: ping binary not found", host)
        return False
    except subprocess.TimeoutExpired:
        logger.debug("Ping probe %s: timed out", host)
        return False
    except OSError as e:
        logger.debug("Ping probe %s failed: %s", host, e)
        return False
    return proc.returncode == 0


def run_port_probe(host: str, port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Open and immediately close a TCP connection."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except (OSError, ValueError, OverflowError) as e:
        logger.debug("Port probe %s:%s failed: %s: %s", host, port, type(e).__name__, e)
        return False


# Dispatcher
PROBE_RUNNERS: dict[str, Callable[[ProbeSpec, float], bool]] = {
    ProbeKind.HTTP.value: lambda s, t: run_http_probe(s.host, s.expected_status_code, t),
    ProbeKind.PING.value: lambda s, t: run_ping_probe(s.host, t),
    ProbeKind.PORT.value: lambda s, t: run_port_probe(s.host, s.port, t),
}


def execute_probe(spec: ProbeSpec, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Run a probe by kind. Unknown kinds are reported as down."""
    runner = PROBE_RUNNERS.get(spec.kind)
    if runner is None:
        logger.warning("Unknown probe type %r for %s — reporting down", spec.kind, spec.name)
        return False
    return runner(spec, timeout)


# ── Runner ───────────────────────────────────────────────────────────────────


class ProbeRunner:
    """Fans a tick's probes out to a thread pool and collects every result.

    One worker per spec, so the tick costs about as long as its slowest probe.
    Results come back in completion order; sort by name for display.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def run_all(self, specs: Sequence[ProbeSpec]) -> list[ProbeResult]:
        if not specs:
            return []

        results: list[ProbeResult] = []
        with ThreadPoolExecutor(max_workers=len(specs), thread_name_prefix="probe") as pool:
            futures = {pool.submit(execute_probe, spec, self.timeout): spec for spec in specs}
            for future in as_completed(futures):
                spec = futures[future]
                try:
                    up = future.result()
                except Exception:
                    logger.exception("Probe %s crashed — reporting down", spec.name)
                    up = False
                results.append(ProbeResult(name=spec.name, up=up))

        logger.debug(
            "Ran %d probes: %d up, %d down",
            len(results),
            sum(r.up for r in results),
            sum(not r.up for r in results),
        )
        return results
