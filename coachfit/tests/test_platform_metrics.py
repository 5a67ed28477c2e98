"""Tests for the overview counters block."""

from datetime import datetime, timezone

import pytest

from coachfit.models import PlatformCounters, PlatformMetrics, TrendDirection, TrendPoint
from coachfit.services.platform_metrics import build_platform_metrics


class TestBuildPlatformMetrics:
    """Tests for build_platform_metrics()."""

    def test_zero_counters_do_not_divide_by_zero(self, default_settings):
        metrics = build_platform_metrics(PlatformCounters(), default_settings, [])

        assert metrics == PlatformMetrics()

    def test_derived_rates(self, default_settings):
        counters = PlatformCounters(
            totalUsers=200,
            usersLast30Days=40,
            usersLast7Days=10,
            totalCoaches=4,
            coachesWithCohorts=3,
            totalClients=70,
            activeClients=56,
            totalEntries=5000,
            entriesLast7Days=245,
            entriesLast30Days=1100,
            totalCohorts=6,
            cohortsWithClients=4,
            coachClientCounts=[60, 5, 5, 0],
        )
        trend = [
            TrendPoint(
                timestamp=datetime(2026, 9, 20, tzinfo=timezone.utc),
                value=1,
                direction=TrendDirection.UP,
            )
        ]

        metrics = build_platform_metrics(counters, default_settings, trend)

        assert metrics.userGrowth.growthRate == pytest.approx(25.0)
        assert metrics.userGrowth.prediction == 250
        assert metrics.userGrowth.trend == TrendDirection.UP
        assert metrics.coachUtilization.average == pytest.approx(17.5)
        assert metrics.coachUtilization.overloaded == 1
        assert metrics.coachUtilization.underutilized == 2
        assert metrics.clientEngagement.activeRate == pytest.approx(80.0)
        assert metrics.clientEngagement.inactiveUsers == 14
        assert metrics.entryMetrics.avgPerDay == pytest.approx(35.0)
        assert metrics.clientEngagement.completionRate == pytest.approx(50.0)
        assert metrics.cohortHealth.empty == 2
