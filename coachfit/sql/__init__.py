"""
SQL Query Module for the CoachFit insights backend.

Provides parameterized SQL queries for:
- Per-entity attention facts (attention_queries)
- Snapshot aggregates, overview counters, settings and trend buckets
  (metrics_queries)

Follows Repository Pattern for clean separation between business logic and
data access: only coachfit.services.metrics_repository executes these.

Example usage:
    from coachfit.sql import get_client_facts_query, get_daily_counts_query

    rows = await conn.fetch(get_client_facts_query(), recent_start)
    rows = await conn.fetch(
        get_daily_counts_query(TrendMetric.USER_GROWTH), start, end
    )
"""

# =============================================================================
# ATTENTION QUERIES - Entity facts for clients, coaches and cohorts
# =============================================================================

from coachfit.sql.attention_queries import (
    ENTRY_OPTIONAL_FIELDS,
    get_client_facts_query,
    get_coach_facts_query,
    get_cohort_facts_query,
)

# =============================================================================
# METRICS QUERIES - Platform aggregates and trend buckets
# =============================================================================

from coachfit.sql.metrics_queries import (
    TREND_METRIC_SOURCES,
    get_system_settings_query,
    get_new_users_between_query,
    get_total_clients_query,
    get_active_clients_query,
    get_entries_since_query,
    get_unassigned_clients_query,
    get_coach_loads_query,
    get_cohort_summaries_query,
    get_platform_counters_query,
    get_daily_counts_query,
)


__all__ = [
    # Attention queries
    "ENTRY_OPTIONAL_FIELDS",
    "get_client_facts_query",
    "get_coach_facts_query",
    "get_cohort_facts_query",
    # Metrics queries
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
