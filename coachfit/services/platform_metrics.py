"""
Overview counters for the admin dashboard.

Turns the raw PlatformCounters into the "metrics" block of
GET /admin/overview: user growth, coach utilization, client engagement,
entry volume and cohort health. Pure; every ratio guards its denominator.
"""

from typing import List

import numpy as np

from coachfit.models.enums import TrendDirection
from coachfit.models.schemas import (
    ClientEngagementMetrics,
    CoachUtilizationMetrics,
    CohortHealthMetrics,
    EntryMetrics,
    PlatformCounters,
    PlatformMetrics,
    SystemSettings,
    TrendPoint,
    UserGrowthMetrics,
)


def _percent(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def build_platform_metrics(
    counters: PlatformCounters,
    settings: SystemSettings,
    user_growth_trend: List[TrendPoint],
) -> PlatformMetrics:
    """
    Derive the overview metrics from raw counters.

    Args:
        counters: Raw counts read by MetricsRepository.fetch_platform_counters.
        settings: Coach capacity bounds and the short-term window length.
        user_growth_trend: Cached series; its first point carries the
            direction of the whole window.

    Returns:
        PlatformMetrics ready for the response.
    """
    growth_rate = _percent(counters.usersLast7Days, counters.usersLast30Days)
    trend = user_growth_trend[0].direction if user_growth_trend else TrendDirection.STABLE

    client_counts = np.array(counters.coachClientCounts, dtype=float)
    average_load = float(client_counts.sum()) / counters.totalCoaches if counters.totalCoaches > 0 else 0.0
    overloaded = int(np.count_nonzero(client_counts > settings.maxClientsPerCoach))
    underutilized = int(
        np.count_nonzero((client_counts > 0) & (client_counts < settings.minClientsPerCoach))
    )

    window_days = max(settings.shortTermWindowDays, 1)
    avg_per_day = counters.entriesLast7Days / window_days
    expected_per_day = counters.totalClients

    return PlatformMetrics(
        userGrowth=UserGrowthMetrics(
            current=counters.totalUsers,
            change=counters.usersLast30Days,
            trend=trend,
            prediction=round(counters.totalUsers * (1 + growth_rate / 100)),
            growthRate=growth_rate,
        ),
        coachUtilization=CoachUtilizationMetrics(
            total=counters.totalCoaches,
            active=counters.coachesWithCohorts,
            average=average_load,
            overloaded=overloaded,
            underutilized=underutilized,
        ),
        clientEngagement=ClientEngagementMetrics(
            total=counters.totalClients,
            active=counters.activeClients,
            activeRate=_percent(counters.activeClients, counters.totalClients),
            completionRate=_percent(avg_per_day, expected_per_day),
            inactiveUsers=max(counters.totalClients - counters.activeClients, 0),
        ),
        entryMetrics=EntryMetrics(
            total=counters.totalEntries,
            last7Days=counters.entriesLast7Days,
            last30Days=counters.entriesLast30Days,
            avgPerDay=avg_per_day,
            expectedPerDay=expected_per_day,
        ),
        cohortHealth=CohortHealthMetrics(
            total=counters.totalCohorts,
            withClients=counters.cohortsWithClients,
            empty=max(counters.totalCohorts - counters.cohortsWithClients, 0),
        ),
    )


__all__ = ["build_platform_metrics"]
