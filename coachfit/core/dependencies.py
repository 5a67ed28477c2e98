"""
FastAPI dependency injection module for the CoachFit insights backend.

This module provides the reusable FastAPI dependencies the admin endpoints
are built from. Endpoint handlers never reach for module-level singletons
directly, which keeps them testable: tests swap any of these through
app.dependency_overrides.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: the cached process Settings
- get_metrics_repository / MetricsRepositoryDep: read-only platform data access
- get_insight_cache / InsightCacheDep: the process-wide InsightCache, built
  once in create_app() and stored on app.state

Usage Examples:
    @router.get("/admin/attention")
    async def get_attention_queue(
        repository: MetricsRepositoryDep,
    ) -> AttentionQueue:
        settings = await repository.get_system_settings()
        ...

    # In tests
    app.dependency_overrides[get_metrics_repository] = lambda: fake_repository

See Also:
    - coachfit/core/config.py: Settings management and environment variables
    - coachfit/core/database.py: Connection pool lifecycle management
    - coachfit/main.py: where the InsightCache is constructed
"""

from typing import Annotated

from fastapi import Depends, Request

from coachfit.core.config import Settings, get_settings
from coachfit.services.insight_cache import InsightCache
from coachfit.services.metrics_repository import MetricsRepository


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can do:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Metrics Repository Dependency
# =============================================================================

def get_metrics_repository() -> MetricsRepository:
    """
    Build a MetricsRepository over the shared asyncpg pool.

    The repository is cheap (it only holds the pool reference), so one is
    created per request. The pool itself is resolved on first use, which
    keeps pool failures inside the handlers where they degrade gracefully.

    Returns:
        MetricsRepository: Read-only accessor over the platform tables.
    """
    return MetricsRepository()


# =============================================================================
# Insight Cache Dependency
# =============================================================================

def get_insight_cache(request: Request) -> InsightCache:
    """
    Return the InsightCache constructed at application start.

    The cache is the only mutable shared state of the insight engine; it is
    created exactly once per application in create_app() and passed by
    reference to every request through this dependency.
    """
    return request.app.state.insight_cache


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

MetricsRepositoryDep = Annotated[MetricsRepository, Depends(get_metrics_repository)]

InsightCacheDep = Annotated[InsightCache, Depends(get_insight_cache)]
