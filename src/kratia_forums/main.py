# src/kratia_forums/main.py
"""Main entry point for the Kratia Forums application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from kratia_forums import __version__
from kratia_forums.api.v1 import (
    constitution_router,
    forums_router,
    members_router,
    notifications_router,
    proposals_router,
    threads_router,
    votations_router,
)
from kratia_forums.core.errors import InfrastructureError, KratiaError
from kratia_forums.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Forum with a direct-democracy governance layer",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(votations_router, prefix="/api/v1")
app.include_router(proposals_router, prefix="/api/v1")
app.include_router(threads_router, prefix="/api/v1")
app.include_router(forums_router, prefix="/api/v1")
app.include_router(constitution_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(members_router, prefix="/api/v1")


@app.exception_handler(KratiaError)
async def kratia_error_handler(request: Request, exc: KratiaError) -> JSONResponse:
    """Map domain errors onto their HTTP status."""
    if isinstance(exc, InfrastructureError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": __version__,
        "description": "Forum with a direct-democracy governance layer",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kratia_forums.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
