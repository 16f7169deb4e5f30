"""
Backend API package initialization.

This package contains FastAPI router modules for the Placement Analytics service:
- analytics: Placement analytics computation, effective policy, state enumeration
"""

from fastapi import APIRouter

# Import router modules
from backend.api.analytics import router as analytics_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(analytics_router)  # analytics router has its own prefix

# Export all routers for selective imports
__all__ = [
    "api_router",
    "analytics_router",
]
