"""
Metrics Queries Module for the CoachFit insights backend.

Provides parameterized PostgreSQL queries behind the platform-wide reads of
the insight engine:

- the operator-tunable SystemSettings row
- the individual aggregates of a MetricsSnapshot (each read separately so a
  slow or failing read only blanks its own field)
- the overview counters of the admin dashboard
- per-day counts feeding the trend series

All timestamp parameters are naive UTC datetimes (Prisma DateTime columns
are timestamps without time zone).
"""

from coachfit.models.enums import TrendMetric


# =============================================================================
# CONSTANTS
# =============================================================================

# Table and timestamp column counted per bucket for each trend metric
TREND_METRIC_SOURCES = {
    TrendMetric.USER_GROWTH: ('"User"', '"createdAt"'),
    TrendMetric.ENTRY_COMPLETION: ('"Entry"', 'date'),
}


# =============================================================================
# SYSTEM SETTINGS
# =============================================================================

def get_system_settings_query() -> str:
    """
    Generate SQL for the single SystemSettings row.

    Returns:
        str: Query returning zero or one row with camelCase setting columns.
    """
    return """
    SELECT *
    FROM "SystemSettings"
    LIMIT 1
    """


# =============================================================================
# SNAPSHOT READS
# =============================================================================

def get_new_users_between_query() -> str:
    """
    Count users created in [$1, $2).

    Returns:
        str: Query returning a single column `count`.
    """
    return """
    SELECT COUNT(*) AS count
    FROM "User"
    WHERE "createdAt" >= $1 AND "createdAt" < $2
    """


def get_total_clients_query() -> str:
    return """
    SELECT COUNT(*) AS count
    FROM "User"
    WHERE 'CLIENT' = ANY(roles)
    """


def get_active_clients_query() -> str:
    """
    Count clients with at least one check-in since $1.

    Returns:
        str: Query returning a single column `count`.
    """
    return """
    SELECT COUNT(DISTINCT u.id) AS count
    FROM "User" u
    JOIN "Entry" e ON e."userId" = u.id
    WHERE 'CLIENT' = ANY(u.roles)
      AND e.date >= $1
    """


def get_entries_since_query() -> str:
    return """
    SELECT COUNT(*) AS count
    FROM "Entry"
    WHERE date >= $1
    """


def get_unassigned_clients_query() -> str:
    """
    List clients that are not a member of any cohort.

    Returns:
        str: Query returning column `id`, ordered by id.
    """
    return """
    SELECT u.id
    FROM "User" u
    WHERE 'CLIENT' = ANY(u.roles)
      AND NOT EXISTS (
          SELECT 1 FROM "CohortMembership" m WHERE m."userId" = u.id
      )
    ORDER BY u.id
    """


def get_coach_loads_query() -> str:
    """
    Generate SQL for per-coach client and cohort counts.

    Client counts are distinct clients across all of the coach's cohorts.
    Coaches without cohorts are included with zero counts.

    Returns:
        str: Query with columns coach_id, coach_name, client_count,
            cohort_count, ordered by coach_id.
    """
    return """
    SELECT
        u.id AS coach_id,
        COALESCE(u.name, u.email) AS coach_name,
        COUNT(DISTINCT m."userId") AS client_count,
        COUNT(DISTINCT c.id) AS cohort_count
    FROM "User" u
    LEFT JOIN "Cohort" c ON c."coachId" = u.id
    LEFT JOIN "CohortMembership" m ON m."cohortId" = c.id
    WHERE 'COACH' = ANY(u.roles)
    GROUP BY u.id, u.name, u.email
    ORDER BY u.id
    """


def get_cohort_summaries_query() -> str:
    """
    Generate SQL for per-cohort membership and last activity.

    last_activity_at is the latest member check-in, NULL for empty cohorts.

    Returns:
        str: Query with columns cohort_id, name, coach_id, created_at,
            member_count, last_activity_at, ordered by cohort_id.
    """
    return """
    SELECT
        c.id AS cohort_id,
        c.name,
        c."coachId" AS coach_id,
        c."createdAt" AS created_at,
        COUNT(DISTINCT m."userId") AS member_count,
        MAX(e.date) AS last_activity_at
    FROM "Cohort" c
    LEFT JOIN "CohortMembership" m ON m."cohortId" = c.id
    LEFT JOIN "Entry" e ON e."userId" = m."userId"
    GROUP BY c.id, c.name, c."coachId", c."createdAt"
    ORDER BY c.id
    """


# =============================================================================
# OVERVIEW COUNTERS
# =============================================================================

def get_platform_counters_query() -> str:
    """
    Generate SQL for the overview counters in one round trip.

    Parameters:
        $1: start of the long-term window (30 days ago)
        $2: start of the short-term window (7 days ago)

    Returns:
        str: Query returning a single row of counters.
    """
    return """
    -- Platform Counters Query
    -- Mirrors the counters of the admin overview page

    SELECT
        (SELECT COUNT(*) FROM "User") AS total_users,
        (SELECT COUNT(*) FROM "User" WHERE "createdAt" >= $1) AS users_last_30_days,
        (SELECT COUNT(*) FROM "User" WHERE "createdAt" >= $2) AS users_last_7_days,
        (SELECT COUNT(*) FROM "User" WHERE 'COACH' = ANY(roles)) AS total_coaches,
        (
            SELECT COUNT(*) FROM "User" u
            WHERE 'COACH' = ANY(u.roles)
              AND EXISTS (SELECT 1 FROM "Cohort" c WHERE c."coachId" = u.id)
        ) AS coaches_with_cohorts,
        (SELECT COUNT(*) FROM "User" WHERE 'CLIENT' = ANY(roles)) AS total_clients,
        (
            SELECT COUNT(*) FROM "User" u
            WHERE 'CLIENT' = ANY(u.roles)
              AND EXISTS (
                  SELECT 1 FROM "Entry" e
                  WHERE e."userId" = u.id AND e.date >= $2
              )
        ) AS active_clients,
        (SELECT COUNT(*) FROM "Entry") AS total_entries,
        (SELECT COUNT(*) FROM "Entry" WHERE date >= $2) AS entries_last_7_days,
        (SELECT COUNT(*) FROM "Entry" WHERE date >= $1) AS entries_last_30_days,
        (SELECT COUNT(*) FROM "Cohort") AS total_cohorts,
        (
            SELECT COUNT(*) FROM "Cohort" c
            WHERE EXISTS (
                SELECT 1 FROM "CohortMembership" m WHERE m."cohortId" = c.id
            )
        ) AS cohorts_with_clients
    """


# =============================================================================
# TREND SERIES
# =============================================================================

def get_daily_counts_query(metric: TrendMetric) -> str:
    """
    Generate SQL counting rows per UTC calendar day for a trend metric.

    Days without rows are absent from the result; the trend generator fills
    them with zeros.

    Args:
        metric: Which table/timestamp column to count.

    Parameters:
        $1: window start (inclusive), $2: window end (exclusive)

    Returns:
        str: Query with columns day (date) and count, ordered by day.

    Raises:
        KeyError: If the metric has no registered source.
    """
    table, column = TREND_METRIC_SOURCES[metric]

    return f"""
    -- Daily Counts Query: {metric.value}

    SELECT
        ({column})::date AS day,
        COUNT(*) AS count
    FROM {table}
    WHERE {column} >= $1 AND {column} < $2
    GROUP BY 1
    ORDER BY 1
    """


__all__ = [
    "TREND_METRIC_SOURCES",
    "get_system_settings_query",
    "get_new_users_between_query",
    "get_total_clients_query",
    "get_active_clients_query",
    "get_entries_since_query",
    "get_unassigned_clients_query",
    "get_coach_loads_query",
    "get_cohort_summaries_query",
    "get_platform_counters_query",
    "get_daily_counts_query",
]
