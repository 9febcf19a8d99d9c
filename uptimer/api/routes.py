"""Page routes.

Endpoints:
  GET /         — rendered current status page
  GET /history  — rendered history page
  GET /status   — runtime info for the monitor process itself
"""

from __future__ import annotations

import asyncio
import platform
import threading
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse

from uptimer import __version__
from uptimer.pages import HISTORY_PAGE, INDEX_PAGE

page_router = APIRouter()

_STATUS_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Monitor Status</title></head>
<body>
<h1>uptimer {version}</h1>
<p>Python: {python}</p>
<p>Threads: {threads}</p>
<p>Tasks: {tasks}</p>
<p>Ticks: {ticks}</p>
<p>Last tick: {last_tick}</p>
</body>
</html>
"""


def _serve_page(request: Request, name: str) -> FileResponse:
    path: Path = request.app.state.settings.output_dir / name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(path, media_type="text/html")


@page_router.get("/")
def index(request: Request) -> FileResponse:
    return _serve_page(request, INDEX_PAGE)


@page_router.get("/history")
def history(request: Request) -> FileResponse:
    return _serve_page(request, HISTORY_PAGE)


@page_router.get("/status", response_class=HTMLResponse)
async def status(request: Request) -> str:
    scheduler = getattr(request.app.state, "scheduler", None)
    snapshot = scheduler.last_snapshot if scheduler else None
    return _STATUS_TEMPLATE.format(
        version=__version__,
        python=platform.python_version(),
        threads=threading.active_count(),
        tasks=len(asyncio.all_tasks()),
        ticks=scheduler.ticks if scheduler else 0,
        last_tick=snapshot.last_updated.strftime("%Y-%m-%d %H:%M:%S") if snapshot else "never",
    )
