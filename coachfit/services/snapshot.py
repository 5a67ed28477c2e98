"""
Metrics snapshot collection.

Reads every aggregate the anomaly detector and opportunity finder need,
concurrently, each under its own timeout. A read that fails or times out
leaves its field as None; only the checks depending on that field are then
skipped.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Dict, Optional

from coachfit.models.schemas import MetricsSnapshot, SystemSettings
from coachfit.services.metrics_repository import MetricsRepository

logger = logging.getLogger(__name__)


async def _read(name: str, awaitable: Awaitable[Any], timeout: float) -> Any:
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Metrics read '{name}' timed out after {timeout:.1f}s")
    except Exception as e:
        logger.warning(f"Metrics read '{name}' failed: {e}", exc_info=True)
    return None


async def collect_metrics_snapshot(
    repository: MetricsRepository,
    settings: SystemSettings,
    *,
    read_timeout: float,
    as_of: Optional[datetime] = None,
) -> MetricsSnapshot:
    """
    Collect a MetricsSnapshot as of the given time.

    Args:
        repository: Source of the aggregates.
        settings: Provides the short-term and recent-activity windows.
        read_timeout: Seconds allowed for each individual read.
        as_of: Reference time (aware). Defaults to the current UTC time.

    Returns:
        MetricsSnapshot with None for every field whose read was unavailable.
    """
    if as_of is None:
        as_of = datetime.now(timezone.utc)

    short_window = timedelta(days=max(settings.shortTermWindowDays, 1))
    recent_start = as_of - timedelta(days=max(settings.recentActivityDays, 0))

    reads: Dict[str, Awaitable[Any]] = {
        "newUsersLast7Days": repository.count_new_users(as_of - short_window, as_of),
        "newUsersPrior7Days": repository.count_new_users(
            as_of - 2 * short_window, as_of - short_window
        ),
        "totalClients": repository.count_clients(),
        "activeClients": repository.count_active_clients(recent_start),
        "entriesLast7Days": repository.count_entries_since(as_of - short_window),
        "unassignedClientIds": repository.list_unassigned_client_ids(),
        "coachLoads": repository.list_coach_loads(),
        "cohorts": repository.list_cohort_summaries(),
    }

    results = await asyncio.gather(
        *(_read(name, awaitable, read_timeout) for name, awaitable in reads.items())
    )
    values = dict(zip(reads.keys(), results))

    missing = [name for name, value in values.items() if value is None]
    if missing:
        logger.info(f"Metrics snapshot incomplete, unavailable: {', '.join(missing)}")

    return MetricsSnapshot(asOf=as_of, **values)


__all__ = ["collect_metrics_snapshot"]
