"""
Minesweeper Static Server
Serves the browser game's HTML, CSS and JavaScript from a read-only asset tree.
"""

import os
import sys
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from pydantic import BaseModel

from core.config import ServerConfig

INDEX_DOCUMENT = "index.html"

FALLBACK_INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>Minesweeper</title>
    <meta charset="utf-8" />
    <style>
        body { font-family: Arial, sans-serif; margin: 40px; }
        code { background: #eee; padding: 2px 4px; }
    </style>
</head>
<body>
    <h1>Minesweeper</h1>
    <p>The game assets were not found on this server.</p>
    <p>Point <code>STATIC_DIR</code> at the directory containing <code>index.html</code>.</p>
</body>
</html>
"""


def configure_logging(log_level: str = "INFO", log_dir: Optional[str] = None):
    """Replace loguru's default handler; optionally add a rotating file log."""
    # Unknown level names raise ValueError before any handler is removed
    logger.level(log_level.upper())
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level}</level> | <cyan>{function}</cyan> | {message}",
    )

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            str(Path(log_dir) / "minesweeper.log"),
            rotation="10 MB",
            retention="7 days",
            level=log_level.upper(),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}",
        )


class HealthResponse(BaseModel):
    status: str
    service: str
    transport: str


def resolve_asset(root: Path, request_path: str) -> Optional[Path]:
    """
    Map a URL path onto a file under the asset root.

    Returns None when the path does not name a file, or when it resolves
    outside the root (parent segments, absolute paths, escaping symlinks).
    A directory resolves to its index document.
    """
    root = root.resolve()
    relative = request_path.lstrip("/")

    try:
        candidate = (root / relative).resolve()
        if candidate != root and root not in candidate.parents:
            logger.warning(f"Rejected path outside asset root: {request_path!r}")
            return None
        if candidate.is_dir():
            candidate = candidate / INDEX_DOCUMENT
        if not candidate.is_file():
            return None
    except (OSError, ValueError):
        # NUL bytes, over-long names and similar never name a served file
        return None

    return candidate


def asset_response(path: Path) -> FileResponse:
    if not os.access(path, os.R_OK):
        logger.error(f"Asset exists but is not readable: {path}")
        raise HTTPException(status_code=500, detail="Asset could not be read")
    return FileResponse(path)


def create_app(config: ServerConfig) -> FastAPI:
    """Build the static-asset application for one immutable server config."""
    static_root = config.static_dir

    app = FastAPI(
        title="Minesweeper Static Server",
        description="Static delivery of the browser Minesweeper game",
        version="1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="Minesweeper Static Server v1.0",
            transport=config.scheme,
        )

    @app.api_route("/", methods=["GET", "HEAD"], response_class=HTMLResponse)
    async def serve_index():
        """Serve the game's entry document."""
        index_path = resolve_asset(static_root, INDEX_DOCUMENT)
        if index_path is None:
            logger.warning(f"No {INDEX_DOCUMENT} under {static_root}, serving fallback page")
            return HTMLResponse(FALLBACK_INDEX_HTML)
        return asset_response(index_path)

    # Mount static files for /static/... (only if directory exists)
    if static_root.is_dir():
        app.mount("/static", StaticFiles(directory=str(static_root), html=True), name="static")

    @app.api_route("/{asset_path:path}", methods=["GET", "HEAD"])
    async def serve_asset(asset_path: str):
        """Serve any other file under the asset root."""
        path = resolve_asset(static_root, asset_path)
        if path is None:
            raise HTTPException(status_code=404, detail="Not Found")
        return asset_response(path)

    logger.info(f"Serving static assets from {static_root}")
    return app
