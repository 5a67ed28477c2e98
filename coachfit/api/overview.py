"""
FastAPI router for the admin overview page.

Endpoints:
- GET /admin/overview: cached insights (anomalies, opportunities, trends)
  plus live platform counters
- POST /admin/overview/refresh: drop the cached insights so the next
  overview read recomputes them

Insights are read through the process-wide InsightCache under the key
"admin:overview:insights" (5 minute TTL by default), so dashboard polling
never triggers more than one platform scan at a time. The counters are
cheap and always read live.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter

from coachfit.core.dependencies import InsightCacheDep, MetricsRepositoryDep, SettingsDep
from coachfit.models import (
    InsightsPayload,
    OverviewResponse,
    PlatformMetrics,
    Priority,
    SystemSettings,
    TrendPoint,
)
from coachfit.services.attention import sanitize_settings
from coachfit.services.insight_bundle import make_insight_compute_fn
from coachfit.services.metrics_repository import MetricsRepository
from coachfit.services.platform_metrics import build_platform_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["overview"])


# =============================================================================
# Helper Functions
# =============================================================================


async def _load_platform_metrics(
    repository: MetricsRepository,
    system_settings: SystemSettings,
    user_growth_trend: List[TrendPoint],
) -> PlatformMetrics:
    """Read the overview counters; all zeros when they cannot be read."""
    try:
        counters = await repository.fetch_platform_counters(
            system_settings, datetime.now(timezone.utc)
        )
        return build_platform_metrics(counters, system_settings, user_growth_trend)
    except Exception as e:
        logger.error(f"Error reading platform counters: {str(e)}", exc_info=True)
        return PlatformMetrics()


# =============================================================================
# API Endpoints
# =============================================================================


@router.get(
    "/overview",
    response_model=OverviewResponse,
    summary="Get Admin Overview",
    description="""
    Return the admin overview: high-priority (red) anomalies, the user growth
    and entry completion trends, all anomalies and opportunities, and the
    platform counters.

    Insights are served from a single-flight cache; when their computation
    fails the previous insights (or empty ones) are returned. Always 200.
    """,
)
async def get_admin_overview(
    repository: MetricsRepositoryDep,
    cache: InsightCacheDep,
    settings: SettingsDep,
) -> OverviewResponse:
    """
    Build the overview response.

    Args:
        repository: Read-only access to the platform tables.
        cache: Process-wide InsightCache.
        settings: Process settings (cache key, TTL, read timeout).

    Returns:
        OverviewResponse with insights and metrics.
    """
    system_settings = sanitize_settings(await repository.get_system_settings())

    compute_fn = make_insight_compute_fn(
        repository,
        system_settings,
        read_timeout=settings.metrics_read_timeout_seconds,
    )
    bundle = await cache.get_or_compute(
        settings.insights_cache_key,
        settings.insights_cache_ttl_seconds,
        compute_fn,
    )

    metrics = await _load_platform_metrics(repository, system_settings, bundle.userGrowthTrend)

    insights = InsightsPayload(
        highPriority=[a for a in bundle.anomalies if a.priority == Priority.RED],
        trends=bundle.userGrowthTrend + bundle.entryCompletionTrend,
        anomalies=bundle.anomalies,
        opportunities=bundle.opportunities,
        computedAt=bundle.computedAt,
    )
    return OverviewResponse(insights=insights, metrics=metrics)


@router.post(
    "/overview/refresh",
    summary="Refresh Overview Insights",
    description="Invalidate the cached overview insights; the next overview read recomputes them.",
)
async def refresh_admin_overview(
    cache: InsightCacheDep,
    settings: SettingsDep,
) -> Dict[str, bool]:
    cache.invalidate(settings.insights_cache_key)
    logger.info(f"Invalidated cache key '{settings.insights_cache_key}'")
    return {"invalidated": True}
