"""
Git Workspace Browser - FastAPI Application.

This is the entry point for the workspace browser API.
It provides endpoints for:
- Reading a file of a workspace at any revision
- Listing a directory of a workspace at any revision
- Health checks
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workspace_browser import __version__
from workspace_browser.api import HealthResponse, router
from workspace_browser.config import get_settings
from workspace_browser.logging_conf import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    """
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting Git Workspace Browser on port %s", settings.server_port)
    logger.info("Workspaces root: %s", settings.workspaces_path)
    logger.info("Scratch root: %s", settings.scratch_path)

    if not settings.workspaces_path.is_dir():
        logger.warning("Workspaces root %s does not exist yet", settings.workspaces_path)

    yield  # Application runs here

    logger.info("Shutting down Git Workspace Browser...")


# Create FastAPI application
app = FastAPI(
    title="Git Workspace Browser",
    description="""
    Browse git repositories ("workspaces") as of any revision.

    ## Key Features
    - **Any revision**: branch, tag, or an abbreviated commit id
    - **Isolated checkouts**: every request gets a private, short-lived checkout
    - **Read-only**: repositories are never written to
    """,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ===================
# Health Check Endpoint
# ===================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Used by container orchestrators and load balancers.
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        service="workspace-browser",
        version=__version__,
        workspaces_root=str(settings.workspaces_path),
    )


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "Git Workspace Browser",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "workspaces": "/v1/workspaces/{workspace_name}?revision=<rev>&path=<path>",
        },
    }


# ===================
# API Routers
# ===================
app.include_router(router)


def run() -> None:
    """Serve the application with uvicorn (console script entry point)."""
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "workspace_browser.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
