#!/usr/bin/env python3
"""
dolphin-maker: FastAPI service exposing page generation.
The same runs as the CLI, driven over HTTP against $DOLPHIN_PROJECT_ROOT.
"""
import os

from fastapi import FastAPI, Request

from dolphin import __version__
from dolphin.api.pages import router as pages_router
from dolphin.core.config import get_project_config
from dolphin.core.logging import setup_logging
from dolphin.core.request_logging import RequestLoggingMiddleware

# Setup structured JSON logging
setup_logging(os.environ.get("LOG_LEVEL", "INFO"))

# =============================================================================
# Configuration from environment
# =============================================================================
LISTEN_HOST = os.environ.get("LISTEN_HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "8000"))

# Create app
app = FastAPI(
    title="dolphin-maker",
    description="Composable codebase edits: generate pages and patch collaborator files",
    version=__version__,
)

# Add request logging middleware (must be first to capture all requests)
app.add_middleware(RequestLoggingMiddleware)

# Include routes
app.include_router(pages_router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/meta")
def meta(request: Request):
    """Service metadata: version and the project being edited."""
    config = get_project_config()
    return {
        "version": __version__,
        "listen_host": LISTEN_HOST,
        "port": PORT,
        "project_root": str(config.root),
        "routes_file": config.relative(config.routes_file),
        "schemas_file": config.relative(config.schemas_file),
        "docs_url": f"{request.url.scheme}://{request.url.netloc}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=LISTEN_HOST, port=PORT)
