"""FastAPI application serving disk usage reports."""

import logging
import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from fastapi.staticfiles import StaticFiles

from ..core.cache import PathCache
from ..core.scanner import DirectoryScanner
from ..exceptions import EncodingError
from .orchestrator import ReportOrchestrator, ReportStream
from .renderer import SERVER_ERROR, ReportRenderer

STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "static")

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
async def report(
    request: Request,
    path: str = "",
    json_format: Optional[str] = Query(None, alias="json"),
    d3: Optional[str] = None,
    sunburst: Optional[str] = None,
):
    """Report on ``path`` as a streamed HTML page, or as JSON when requested."""
    orchestrator: ReportOrchestrator = request.app.state.orchestrator

    if json_format:
        try:
            body = await orchestrator.build_json(path, flat=json_format == "flat")
        except EncodingError as e:
            logger.error(f"Internal error: {e}")
            return PlainTextResponse(SERVER_ERROR, status_code=500)
        return Response(body, media_type="application/json")

    chart = "d3" if d3 else "sunburst" if sunburst else None
    stream = ReportStream()
    orchestrator.start(path, chart, stream)

    return StreamingResponse(
        stream.chunks(),
        media_type="text/html; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        }
    )


def build_orchestrator(config: Dict[str, Any], clock=None) -> ReportOrchestrator:
    """Wire cache, scanner and renderer from a loaded configuration."""
    scan_config = config.get('scan', {})
    server_config = config.get('server', {})
    cache_config = config.get('cache', {})

    cache = PathCache(ttl_seconds=float(cache_config.get('duration_seconds', 30.0)), clock=clock)
    scanner = DirectoryScanner(cache=cache, follow_symlinks=bool(scan_config.get('follow_symlinks', False)))

    return ReportOrchestrator(
        scanner=scanner,
        base_path=scan_config.get('base_path', '.'),
        renderer=ReportRenderer(),
        apology_timeout=float(server_config.get('apology_timeout_seconds', 2.0)),
        clock=clock,
    )


def create_app(orchestrator: ReportOrchestrator) -> FastAPI:
    """Create the application around a configured orchestrator."""
    app = FastAPI(title="du-browser", docs_url=None, redoc_url=None)
    app.state.orchestrator = orchestrator

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.include_router(router)

    logger.info(f"Serving reports for {os.path.abspath(orchestrator.base_path)}")
    return app
