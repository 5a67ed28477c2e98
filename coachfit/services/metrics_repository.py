"""
Read-only data access for the attention scoring and insight engine.

MetricsRepository wraps the asyncpg pool and turns rows of the platform
tables into the engine's models:

- get_system_settings(): the SystemSettings row, falling back to defaults
- fetch_entity_facts(): EntityFacts for every client, coach and cohort
- snapshot reads (new users, clients, entries, coach loads, cohorts) used by
  services.snapshot.collect_metrics_snapshot
- fetch_daily_counts(): per-day counts for the trend generator
- fetch_platform_counters(): raw counters of the overview page

Timestamps:
    Prisma stores DateTime columns as UTC timestamps without time zone.
    Parameters are therefore sent as naive UTC datetimes and every value
    read back is returned as a timezone-aware UTC datetime.

The repository never writes. Settings mutation happens in the admin panel.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from asyncpg import Pool

from coachfit.core.database import get_db_pool
from coachfit.models.enums import EntityType, TrendMetric
from coachfit.models.schemas import (
    CoachLoad,
    CohortSummary,
    EntityFacts,
    PlatformCounters,
    SystemSettings,
)
from coachfit.sql import (
    ENTRY_OPTIONAL_FIELDS,
    get_active_clients_query,
    get_client_facts_query,
    get_coach_facts_query,
    get_coach_loads_query,
    get_cohort_facts_query,
    get_cohort_summaries_query,
    get_daily_counts_query,
    get_entries_since_query,
    get_new_users_between_query,
    get_platform_counters_query,
    get_system_settings_query,
    get_total_clients_query,
    get_unassigned_clients_query,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Timestamp Helpers
# =============================================================================


def as_utc(value: Any) -> Optional[datetime]:
    """
    Normalize a value read from the database to an aware UTC datetime.

    Accepts naive datetimes (interpreted as UTC), aware datetimes, and plain
    dates (midnight UTC). Returns None for None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Unsupported timestamp value: {value!r}")


def to_db_timestamp(value: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC form Prisma columns expect."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# =============================================================================
# Row -> EntityFacts Derivation
# =============================================================================


def completeness_ratio(fields_populated: int, entry_count: int) -> Optional[float]:
    """
    Fraction of optional check-in fields populated across recent entries.

    Returns:
        Ratio in 0..1, or None when there are no recent entries.
    """
    if entry_count <= 0:
        return None
    ratio = fields_populated / (entry_count * len(ENTRY_OPTIONAL_FIELDS))
    return min(max(ratio, 0.0), 1.0)


def client_facts_from_row(row: Mapping[str, Any]) -> EntityFacts:
    recent = int(row["recent_entry_count"])
    memberships = int(row["membership_count"])

    return EntityFacts(
        entityId=row["id"],
        entityType=EntityType.CLIENT,
        entityName=row["name"] or row["email"] or row["id"],
        entityEmail=row["email"],
        lastActivityAt=as_utc(row["last_entry_at"]),
        recentEntryCount=recent,
        completenessRatio=completeness_ratio(int(row["recent_fields_populated"]), recent),
        loadCount=memberships,
        hasAssignment=memberships > 0,
    )


def coach_facts_from_row(row: Mapping[str, Any]) -> EntityFacts:
    """
    Build coach facts from an aggregated coach row.

    A coach without clients has no check-ins of their own to look at, so the
    account creation time stands in for last activity.
    """
    clients = int(row["client_count"])
    total_entries = int(row["recent_entry_total"])
    last_activity = as_utc(row["last_entry_at"])
    if clients == 0:
        last_activity = as_utc(row["created_at"])

    return EntityFacts(
        entityId=row["id"],
        entityType=EntityType.COACH,
        entityName=row["name"] or row["email"] or row["id"],
        entityEmail=row["email"],
        lastActivityAt=last_activity,
        recentEntryCount=round(total_entries / clients) if clients else 0,
        completenessRatio=completeness_ratio(
            int(row["recent_fields_populated"]), total_entries
        ),
        loadCount=clients,
        hasAssignment=int(row["cohort_count"]) > 0,
    )


def cohort_facts_from_row(row: Mapping[str, Any]) -> EntityFacts:
    members = int(row["member_count"])
    total_entries = int(row["recent_entry_total"])
    last_activity = as_utc(row["last_entry_at"]) or as_utc(row["created_at"])

    return EntityFacts(
        entityId=row["id"],
        entityType=EntityType.COHORT,
        entityName=row["name"] or row["id"],
        lastActivityAt=last_activity,
        recentEntryCount=round(total_entries / members) if members else 0,
        completenessRatio=completeness_ratio(
            int(row["recent_fields_populated"]), total_entries
        ),
        loadCount=members,
        hasAssignment=row["coach_id"] is not None,
    )


# =============================================================================
# Repository
# =============================================================================


class MetricsRepository:
    """
    Read-only accessor over the platform tables.

    Holds only the pool reference, resolved lazily from the shared asyncpg
    pool when not given; cheap enough to build per request.
    """

    def __init__(self, pool: Optional[Pool] = None):
        self._pool = pool

    async def _get_pool(self) -> Pool:
        if self._pool is None:
            self._pool = await get_db_pool()
        return self._pool

    async def _fetch(self, query: str, *args: Any) -> List[Any]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def _fetchrow(self, query: str, *args: Any) -> Optional[Any]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def _count(self, query: str, *args: Any) -> int:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            value = await conn.fetchval(query, *args)
        return int(value or 0)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_system_settings(self) -> SystemSettings:
        """
        Load the SystemSettings row as a frozen snapshot.

        Missing rows, NULL columns and read errors all fall back to the
        defaults declared on SystemSettings.
        """
        try:
            row = await self._fetchrow(get_system_settings_query())
        except Exception as e:
            logger.warning(f"Error fetching system settings, using defaults: {e}")
            return SystemSettings()

        if row is None:
            logger.info("No SystemSettings row found, using defaults")
            return SystemSettings()

        values = {key: value for key, value in dict(row).items() if value is not None}
        try:
            return SystemSettings.model_validate(values)
        except ValueError as e:
            logger.warning(f"Invalid system settings row, using defaults: {e}")
            return SystemSettings()

    # -------------------------------------------------------------------------
    # Entity Facts
    # -------------------------------------------------------------------------

    async def fetch_entity_facts(
        self,
        settings: SystemSettings,
        now: datetime,
    ) -> List[EntityFacts]:
        """
        Derive EntityFacts for every client, coach and cohort.

        Args:
            settings: Provides recentActivityDays for the recent window.
            now: Reference time (aware UTC).

        Returns:
            Clients, then coaches, then cohorts, each ordered by id.
        """
        recent_start = to_db_timestamp(
            now - timedelta(days=max(settings.recentActivityDays, 0))
        )

        pool = await self._get_pool()
        async with pool.acquire() as conn:
            client_rows = await conn.fetch(get_client_facts_query(), recent_start)
            coach_rows = await conn.fetch(get_coach_facts_query(), recent_start)
            cohort_rows = await conn.fetch(get_cohort_facts_query(), recent_start)

        facts: List[EntityFacts] = []
        facts.extend(client_facts_from_row(row) for row in client_rows)
        facts.extend(coach_facts_from_row(row) for row in coach_rows)
        facts.extend(cohort_facts_from_row(row) for row in cohort_rows)

        logger.info(
            f"Derived entity facts: {len(client_rows)} clients, "
            f"{len(coach_rows)} coaches, {len(cohort_rows)} cohorts"
        )
        return facts

    # -------------------------------------------------------------------------
    # Snapshot Reads
    # -------------------------------------------------------------------------

    async def count_new_users(self, start: datetime, end: datetime) -> int:
        return await self._count(
            get_new_users_between_query(),
            to_db_timestamp(start),
            to_db_timestamp(end),
        )

    async def count_clients(self) -> int:
        return await self._count(get_total_clients_query())

    async def count_active_clients(self, since: datetime) -> int:
        return await self._count(get_active_clients_query(), to_db_timestamp(since))

    async def count_entries_since(self, since: datetime) -> int:
        return await self._count(get_entries_since_query(), to_db_timestamp(since))

    async def list_unassigned_client_ids(self) -> List[str]:
        rows = await self._fetch(get_unassigned_clients_query())
        return [row["id"] for row in rows]

    async def list_coach_loads(self) -> List[CoachLoad]:
        rows = await self._fetch(get_coach_loads_query())
        return [
            CoachLoad(
                coachId=row["coach_id"],
                coachName=row["coach_name"] or row["coach_id"],
                clientCount=int(row["client_count"]),
                cohortCount=int(row["cohort_count"]),
            )
            for row in rows
        ]

    async def list_cohort_summaries(self) -> List[CohortSummary]:
        rows = await self._fetch(get_cohort_summaries_query())
        return [
            CohortSummary(
                cohortId=row["cohort_id"],
                name=row["name"] or row["cohort_id"],
                coachId=row["coach_id"],
                memberCount=int(row["member_count"]),
                createdAt=as_utc(row["created_at"]),
                lastActivityAt=as_utc(row["last_activity_at"]),
            )
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Trend Buckets
    # -------------------------------------------------------------------------

    async def fetch_daily_counts(
        self,
        metric: TrendMetric,
        start: datetime,
        end: datetime,
    ) -> Dict[date, int]:
        """
        Count rows per UTC day in [start, end).

        Returns:
            Mapping of calendar day to count; days without rows are absent.
        """
        rows = await self._fetch(
            get_daily_counts_query(metric),
            to_db_timestamp(start),
            to_db_timestamp(end),
        )
        return {row["day"]: int(row["count"]) for row in rows}

    # -------------------------------------------------------------------------
    # Overview Counters
    # -------------------------------------------------------------------------

    async def fetch_platform_counters(
        self,
        settings: SystemSettings,
        now: datetime,
    ) -> PlatformCounters:
        """
        Read the overview counters and per-coach client counts.

        Args:
            settings: Provides the short/long-term window lengths.
            now: Reference time (aware UTC).
        """
        long_start = to_db_timestamp(now - timedelta(days=settings.longTermWindowDays))
        short_start = to_db_timestamp(now - timedelta(days=settings.shortTermWindowDays))

        row = await self._fetchrow(get_platform_counters_query(), long_start, short_start)
        loads = await self.list_coach_loads()

        if row is None:
            return PlatformCounters(coachClientCounts=[c.clientCount for c in loads])

        return PlatformCounters(
            totalUsers=int(row["total_users"]),
            usersLast30Days=int(row["users_last_30_days"]),
            usersLast7Days=int(row["users_last_7_days"]),
            totalCoaches=int(row["total_coaches"]),
            coachesWithCohorts=int(row["coaches_with_cohorts"]),
            totalClients=int(row["total_clients"]),
            activeClients=int(row["active_clients"]),
            totalEntries=int(row["total_entries"]),
            entriesLast7Days=int(row["entries_last_7_days"]),
            entriesLast30Days=int(row["entries_last_30_days"]),
            totalCohorts=int(row["total_cohorts"]),
            cohortsWithClients=int(row["cohorts_with_clients"]),
            coachClientCounts=[c.clientCount for c in loads],
        )


__all__ = [
    "MetricsRepository",
    "as_utc",
    "to_db_timestamp",
    "completeness_ratio",
    "client_facts_from_row",
    "coach_facts_from_row",
    "cohort_facts_from_row",
]
