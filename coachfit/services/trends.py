"""
Trend Generation Service

Produces gap-free, evenly bucketed time series for the admin dashboard.

Metrics:
    - user_growth: users created per bucket
    - entry_completion: check-ins logged per bucket

Windows:
    - 7d / 14d / 30d: one bucket per UTC day
    - 90d: 13 weekly buckets

Every series ends at the bucket containing as_of (today, UTC) and includes
every bucket even when its count is zero: the database only returns days
that have rows, and pandas reindexes the result onto the full calendar.

Directions:
    The first point carries the direction of the whole series (first vs
    last bucket); each later point carries its direction relative to the
    previous bucket. A change within trendDeadband x max(|previous|, 1) is
    "stable".
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from coachfit.core.exceptions import UnknownMetric, UnknownWindow
from coachfit.models.enums import TrendDirection, TrendMetric, TrendWindow
from coachfit.models.schemas import SystemSettings, TrendPoint
from coachfit.services.metrics_repository import MetricsRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Window Layout
# =============================================================================


@dataclass(frozen=True)
class BucketLayout:
    bucket_count: int
    bucket_days: int

    @property
    def total_days(self) -> int:
        return self.bucket_count * self.bucket_days


WINDOW_LAYOUTS = {
    TrendWindow.DAYS_7: BucketLayout(7, 1),
    TrendWindow.DAYS_14: BucketLayout(14, 1),
    TrendWindow.DAYS_30: BucketLayout(30, 1),
    TrendWindow.DAYS_90: BucketLayout(13, 7),
}


def parse_metric(metric_name: Union[str, TrendMetric]) -> TrendMetric:
    try:
        return TrendMetric(metric_name)
    except ValueError:
        raise UnknownMetric(str(metric_name), [m.value for m in TrendMetric]) from None


def parse_window(window: Union[str, TrendWindow]) -> TrendWindow:
    try:
        return TrendWindow(window)
    except ValueError:
        raise UnknownWindow(str(window), [w.value for w in TrendWindow]) from None


def day_start(moment: datetime) -> datetime:
    """Midnight UTC of the day containing moment."""
    moment = moment.astimezone(timezone.utc)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def series_bounds(as_of: datetime, layout: BucketLayout):
    """
    Return (start, end) of the window: start inclusive, end exclusive.

    The last bucket ends with the day containing as_of.
    """
    today = day_start(as_of)
    start = today - timedelta(days=layout.total_days - 1)
    end = today + timedelta(days=1)
    return start, end


# =============================================================================
# Series Construction
# =============================================================================


def trend_direction(previous: float, current: float, deadband: float) -> TrendDirection:
    tolerance = deadband * max(abs(previous), 1.0)
    delta = current - previous
    if delta > tolerance:
        return TrendDirection.UP
    if delta < -tolerance:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def build_series(
    daily_counts: Mapping[date, int],
    as_of: datetime,
    layout: BucketLayout,
    deadband: float,
) -> List[TrendPoint]:
    """
    Turn sparse per-day counts into a full bucketed series.

    Args:
        daily_counts: Count per UTC calendar day; missing days count as zero.
            Days outside the window are ignored.
        as_of: Reference time; the last bucket contains this day.
        layout: Bucket count and bucket width in days.
        deadband: Relative change treated as stable.

    Returns:
        Exactly layout.bucket_count points, oldest first, with timestamps at
        the UTC start of each bucket.
    """
    start, _ = series_bounds(as_of, layout)
    days = pd.date_range(start=start, periods=layout.total_days, freq="D")

    if daily_counts:
        index = pd.to_datetime(list(daily_counts.keys()), utc=True).normalize()
        counts = pd.Series(list(daily_counts.values()), index=index, dtype="float64")
        counts = counts.groupby(level=0).sum().reindex(days, fill_value=0.0)
    else:
        counts = pd.Series(0.0, index=days)

    bucket_ids = np.arange(len(counts)) // layout.bucket_days
    values = counts.groupby(bucket_ids).sum().to_numpy()
    bucket_starts = days[:: layout.bucket_days]

    points: List[TrendPoint] = []
    for i, (bucket_start, value) in enumerate(zip(bucket_starts, values)):
        if i == 0:
            direction = trend_direction(float(values[0]), float(values[-1]), deadband)
        else:
            direction = trend_direction(float(values[i - 1]), float(value), deadband)
        points.append(
            TrendPoint(
                timestamp=bucket_start.to_pydatetime(),
                value=float(value),
                direction=direction,
            )
        )
    return points


# =============================================================================
# Generator
# =============================================================================


class TrendGenerator:
    """
    Generates trend series from the metrics repository.

    Bound to one repository and one settings snapshot (for the deadband).
    """

    def __init__(self, repository: MetricsRepository, settings: SystemSettings):
        self._repository = repository
        self._settings = settings

    async def generate_trends(
        self,
        metric_name: Union[str, TrendMetric],
        window: Union[str, TrendWindow],
        *,
        as_of: Optional[datetime] = None,
    ) -> List[TrendPoint]:
        """
        Generate the series for one metric over one window.

        Args:
            metric_name: "user_growth" or "entry_completion".
            window: "7d", "14d", "30d" or "90d".
            as_of: Reference time (aware). Defaults to the current UTC time.

        Returns:
            Gap-free list of TrendPoint, oldest first.

        Raises:
            UnknownMetric: If metric_name is not supported.
            UnknownWindow: If window is not supported.
        """
        metric = parse_metric(metric_name)
        layout = WINDOW_LAYOUTS[parse_window(window)]
        if as_of is None:
            as_of = datetime.now(timezone.utc)

        start, end = series_bounds(as_of, layout)
        daily_counts = await self._repository.fetch_daily_counts(metric, start, end)

        logger.debug(
            f"Trend {metric.value}/{window}: {len(daily_counts)} non-empty days "
            f"between {start:%Y-%m-%d} and {end:%Y-%m-%d}"
        )
        return build_series(
            daily_counts,
            as_of,
            layout,
            max(self._settings.trendDeadband, 0.0),
        )


__all__ = [
    "BucketLayout",
    "WINDOW_LAYOUTS",
    "parse_metric",
    "parse_window",
    "day_start",
    "series_bounds",
    "trend_direction",
    "build_series",
    "TrendGenerator",
]
