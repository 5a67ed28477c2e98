"""
CoachFit API package initialization.

This package contains FastAPI router modules for the admin insight engine:
- attention: tiered attention queue
- overview: cached insights plus platform counters, and cache refresh
- trends: trend series for one metric and window
"""

from fastapi import APIRouter

# Import router modules
from coachfit.api.attention import router as attention_router
from coachfit.api.overview import router as overview_router
from coachfit.api.trends import router as trends_router

# Create main API router
api_router = APIRouter()

# Each router carries its own /admin prefix
api_router.include_router(attention_router)
api_router.include_router(overview_router)
api_router.include_router(trends_router)

# Export all routers for selective imports
__all__ = [
    "api_router",
    "attention_router",
    "overview_router",
    "trends_router",
]
