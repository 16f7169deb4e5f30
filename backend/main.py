"""
FastAPI application entry point for the Placement Analytics API.

This module serves as the central orchestration file for the Python backend service layer.
It configures logging and CORS, registers API routers, and starts the ASGI server.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from backend.api.analytics import router as analytics_router
from backend.core.config import build_policy, get_settings

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
        - Validate settings by building the default policy (fails fast on a
          bad timezone or inverted thresholds)
        - Log startup message

    On shutdown:
        - Log shutdown message
    """
    # Startup
    logger.info("Placement Analytics API starting")
    policy = build_policy(get_settings())
    logger.info(f"Calendar timezone: {policy.calendarTimezone}")

    yield

    # Shutdown
    logger.info("Placement Analytics API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Placement Analytics API",
    version=__version__,
    description=(
        "FastAPI backend for the student placement dashboards. "
        "Aggregates placement events into state, city, region, trend, "
        "growth, concentration, seasonality and recency views."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(analytics_router)  # Has its own /analytics prefix


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

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
        "name": "Placement Analytics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
