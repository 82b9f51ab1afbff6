"""
FastAPI application entry point for the Rank Compass API.

This module configures logging, CORS and the domain error handler, registers
the API routers, and starts the ASGI server when run directly.

Errors raised by the services (RankCompassError subclasses) are returned as
``{"error": message}`` with the status carried by the exception class.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rank_compass import __version__
from rank_compass.api import api_router
from rank_compass.core import RankCompassError, get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Log startup message
        - Warn when no usable language-model API key is configured

    On shutdown:
        - Log shutdown message
    """
    # Startup
    logger.info("Rank Compass API starting")
    settings = get_settings()
    if not settings.has_usable_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; analysis endpoints will fail until it is")

    yield

    # Shutdown
    logger.info("Rank Compass API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Rank Compass API",
    version=__version__,
    description=(
        "Backend for the competitor ad-rank dashboard. "
        "Decodes rank spreadsheets, computes rank statistics, runs AI "
        "analysis, and builds chart payloads and reports."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RankCompassError)
async def rank_compass_error_handler(request: Request, exc: RankCompassError) -> JSONResponse:
    """Return domain errors as {"error": message}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer health checks.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Rank Compass API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rank_compass.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
