"""
FastAPI application entry point for the CoachFit insights API.

This module wires the attention scoring and insight engine into an ASGI
application: it configures logging and CORS, manages the database pool
lifecycle, builds the process-wide InsightCache and registers the admin
routers.

Design:
- create_app() builds a fresh application; the module-level `app` is what
  uvicorn serves
- The InsightCache is created once per application and stored on
  app.state, so every request shares it through dependency injection
- The asyncpg pool is opened and closed by the lifespan handler
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coachfit import __version__
from coachfit.api import api_router
from coachfit.core.config import Settings, get_settings
from coachfit.core.database import init_db, close_db
from coachfit.services.insight_cache import InsightCache

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
        - Initialize database connection pool

    On shutdown:
        - Drop cached insights
        - Close database connection pool
    """
    # Startup
    logger.info("CoachFit insights API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # Keep serving; the pool is created lazily on the first request

    yield

    # Shutdown
    logger.info("CoachFit insights API shutting down")
    app.state.insight_cache.clear()
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Process settings; defaults to get_settings().

    Returns:
        FastAPI: Configured application with its own InsightCache.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="CoachFit Insights API",
        version=__version__,
        description=(
            "Attention scoring and insight engine for the CoachFit admin "
            "dashboard: attention queue, anomalies, opportunities and trends."
        ),
        lifespan=lifespan,
    )

    app.state.insight_cache = InsightCache(
        compute_timeout=settings.insights_compute_timeout_seconds,
    )

    # The Next.js admin dashboard proxies to this service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for monitoring and load balancer probes.

        Returns:
            Dict with status 'healthy' and the number of cached insight entries
        """
        return {
            "status": "healthy",
            "cachedInsights": app.state.insight_cache.size(),
        }

    @app.get("/")
    async def root():
        """
        Root endpoint providing API information.

        Returns:
            Dict with API name and version
        """
        return {
            "name": "CoachFit Insights API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    return app


app = create_app()


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "coachfit.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
