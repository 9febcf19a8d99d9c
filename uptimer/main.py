"""Entry point for the uptimer monitor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from uptimer.api.server import create_app
from uptimer.config import Settings
from uptimer.errors import UptimerError
from uptimer.health.scheduler import StatusScheduler

console = Console()
logger = logging.getLogger("uptimer")


async def serve(settings: Settings, scheduler: StatusScheduler) -> None:
    """Run the monitor loop and the page server on one event loop."""
    app = create_app(settings, scheduler)
    server = uvicorn.Server(
        uvicorn.Config(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    )
    server_task = asyncio.create_task(server.serve(), name="uptimer-http")
    logger.info("Server started on %s:%s", settings.host, settings.port)
    try:
        await scheduler.run_forever()
    finally:
        server.should_exit = True
        await server_task


def run_server(settings: Settings) -> None:
    console.print(Panel(f"Serving status pages on port {settings.port}", title="uptimer", style="bold green"))
    asyncio.run(serve(settings, StatusScheduler(settings)))


def run_monitor(settings: Settings) -> None:
    console.print(Panel("Monitoring services ...", title="uptimer", style="bold blue"))
    asyncio.run(StatusScheduler(settings).run_forever())


def run_once(settings: Settings) -> None:
    snapshot = asyncio.run(StatusScheduler(settings).tick())
    for result in sorted(snapshot.results, key=lambda r: r.name):
        style = "green" if result.up else "red"
        console.print(f"[{style}]{'Up' if result.up else 'Down':<5}[/{style}] {result.name}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="uptimer — minimal uptime monitor")
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Monitor and serve the status pages over HTTP")
    serve_parser.add_argument("--port", type=int, help="Override PORT")
    sub.add_parser("run", help="Monitor and write the status pages, no HTTP server")
    sub.add_parser("once", help="Run a single tick and print the results")

    args = parser.parse_args(argv)

    try:
        settings = Settings()
        if getattr(args, "port", None):
            settings = settings.model_copy(update={"port": args.port})
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    command = args.command or ("serve" if settings.port else "run")
    try:
        if command == "serve":
            if not settings.port:
                parser.error("serve needs PORT or --port")
            run_server(settings)
        elif command == "run":
            run_monitor(settings)
        else:
            run_once(settings)
    except UptimerError as e:
        logger.critical("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
    logger.info("Bye!")


if __name__ == "__main__":
    main()
