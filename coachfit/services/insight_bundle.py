"""
Insight bundle computation.

Builds the InsightBundle cached behind GET /admin/overview: the anomalies,
the opportunities and the two standard 30-day trend series (user growth and
entry completion).

The metrics snapshot is read once, then the four generators run
concurrently. A generator that fails contributes an empty list and is
logged; the bundle only fails as a whole (InsightComputeError) when every
generator failed, which lets the cache fall back to its previous bundle.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from coachfit.core.exceptions import InsightComputeError
from coachfit.models.enums import TrendMetric, TrendWindow
from coachfit.models.schemas import InsightBundle, SystemSettings
from coachfit.services.anomalies import detect_anomalies
from coachfit.services.attention import sanitize_settings
from coachfit.services.metrics_repository import MetricsRepository
from coachfit.services.opportunities import find_opportunities
from coachfit.services.snapshot import collect_metrics_snapshot
from coachfit.services.trends import TrendGenerator

logger = logging.getLogger(__name__)

OVERVIEW_TREND_WINDOW = TrendWindow.DAYS_30


async def _run_sync(fn, *args):
    return fn(*args)


async def build_insight_bundle(
    repository: MetricsRepository,
    settings: SystemSettings,
    *,
    read_timeout: float,
    as_of: Optional[datetime] = None,
) -> InsightBundle:
    """
    Compute a full InsightBundle.

    Args:
        repository: Source of every read.
        settings: Snapshot loaded for this computation; clamped before use.
        read_timeout: Seconds allowed for each snapshot read and each trend series.
        as_of: Reference time (aware). Defaults to the current UTC time.

    Returns:
        InsightBundle stamped with computedAt = as_of.

    Raises:
        InsightComputeError: If every generator failed.
    """
    if as_of is None:
        as_of = datetime.now(timezone.utc)
    settings = sanitize_settings(settings)

    snapshot = await collect_metrics_snapshot(
        repository, settings, read_timeout=read_timeout, as_of=as_of
    )
    trends = TrendGenerator(repository, settings)

    parts = ["anomalies", "opportunities", "userGrowthTrend", "entryCompletionTrend"]
    results = await asyncio.gather(
        _run_sync(detect_anomalies, snapshot, settings),
        _run_sync(find_opportunities, snapshot, settings),
        asyncio.wait_for(
            trends.generate_trends(TrendMetric.USER_GROWTH, OVERVIEW_TREND_WINDOW, as_of=as_of),
            timeout=read_timeout,
        ),
        asyncio.wait_for(
            trends.generate_trends(TrendMetric.ENTRY_COMPLETION, OVERVIEW_TREND_WINDOW, as_of=as_of),
            timeout=read_timeout,
        ),
        return_exceptions=True,
    )

    values = {}
    failures: List[str] = []
    for name, result in zip(parts, results):
        if isinstance(result, BaseException):
            logger.error(f"Insight generator '{name}' failed: {result}", exc_info=result)
            failures.append(name)
            values[name] = []
        else:
            values[name] = result

    if len(failures) == len(parts):
        raise InsightComputeError("Every insight generator failed")

    return InsightBundle(computedAt=as_of, **values)


def make_insight_compute_fn(
    repository: MetricsRepository,
    settings: SystemSettings,
    *,
    read_timeout: float,
) -> Callable[[], Awaitable[InsightBundle]]:
    """
    Bind a zero-argument compute function for InsightCache.get_or_compute.

    The settings snapshot is the one the calling request loaded, so a
    refresh never mixes thresholds with the rest of that request.
    """

    async def compute() -> InsightBundle:
        return await build_insight_bundle(repository, settings, read_timeout=read_timeout)

    return compute


__all__ = [
    "OVERVIEW_TREND_WINDOW",
    "build_insight_bundle",
    "make_insight_compute_fn",
]
