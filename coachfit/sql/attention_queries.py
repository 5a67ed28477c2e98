"""
Attention Queries Module for the CoachFit insights backend.

Provides parameterized PostgreSQL queries that derive the per-entity facts
consumed by the attention scorer: last activity, recent check-in counts,
populated check-in fields (for completeness) and assignment/load counts for
clients, coaches and cohorts.

Tables are the Prisma-managed platform tables, hence the quoted
PascalCase/camelCase identifiers ("User", "Entry", "Cohort",
"CohortMembership"). Prisma stores DateTime columns as UTC timestamps
without time zone, so every timestamp parameter must be a naive UTC
datetime.

Common parameters:
    $1: start of the recent activity window (naive UTC datetime)

This module follows the Repository Pattern for clean separation between
business logic and data access.
"""


# =============================================================================
# CONSTANTS
# =============================================================================

# Optional check-in fields whose population drives the completeness signal
ENTRY_OPTIONAL_FIELDS = (
    "weightLbs",
    "steps",
    "calories",
    "sleepQuality",
    "perceivedStress",
    "notes",
)

# Number of populated optional fields on one "Entry" row
_POPULATED_FIELDS_EXPR = " + ".join(
    f'(e."{field}" IS NOT NULL)::int' for field in ENTRY_OPTIONAL_FIELDS
)

# Per-client entry aggregates shared by the coach and cohort queries
_CLIENT_ENTRIES_CTE = f"""
    client_entries AS (
        SELECT
            e."userId" AS client_id,
            MAX(e.date) AS last_entry_at,
            COUNT(*) FILTER (WHERE e.date >= $1) AS recent_entry_count,
            COALESCE(
                SUM({_POPULATED_FIELDS_EXPR}) FILTER (WHERE e.date >= $1),
                0
            ) AS recent_fields_populated
        FROM "Entry" e
        GROUP BY e."userId"
    )
"""


# =============================================================================
# CLIENT FACTS
# =============================================================================

def get_client_facts_query() -> str:
    """
    Generate SQL returning one row per client.

    Returns:
        str: Query with columns id, name, email, created_at, last_entry_at,
            recent_entry_count, recent_fields_populated, membership_count.

    Note:
        last_entry_at is NULL for clients who never logged a check-in.
    """
    return f"""
    -- Client Facts Query
    -- One row per user holding the CLIENT role

    WITH {_CLIENT_ENTRIES_CTE},
    memberships AS (
        SELECT m."userId" AS client_id, COUNT(*) AS membership_count
        FROM "CohortMembership" m
        GROUP BY m."userId"
    )
    SELECT
        u.id,
        u.name,
        u.email,
        u."createdAt" AS created_at,
        ce.last_entry_at,
        COALESCE(ce.recent_entry_count, 0) AS recent_entry_count,
        COALESCE(ce.recent_fields_populated, 0) AS recent_fields_populated,
        COALESCE(ms.membership_count, 0) AS membership_count
    FROM "User" u
    LEFT JOIN client_entries ce ON ce.client_id = u.id
    LEFT JOIN memberships ms ON ms.client_id = u.id
    WHERE 'CLIENT' = ANY(u.roles)
    ORDER BY u.id
    """


# =============================================================================
# COACH FACTS
# =============================================================================

def get_coach_facts_query() -> str:
    """
    Generate SQL returning one row per coach, aggregated over their clients.

    A client who sits in two cohorts of the same coach is counted once.

    Returns:
        str: Query with columns id, name, email, created_at, cohort_count,
            client_count, last_entry_at, recent_entry_total,
            recent_fields_populated.
    """
    return f"""
    -- Coach Facts Query
    -- One row per user holding the COACH role

    WITH {_CLIENT_ENTRIES_CTE},
    coach_clients AS (
        SELECT DISTINCT c."coachId" AS coach_id, m."userId" AS client_id
        FROM "Cohort" c
        JOIN "CohortMembership" m ON m."cohortId" = c.id
    ),
    coach_cohorts AS (
        SELECT c."coachId" AS coach_id, COUNT(*) AS cohort_count
        FROM "Cohort" c
        GROUP BY c."coachId"
    )
    SELECT
        u.id,
        u.name,
        u.email,
        u."createdAt" AS created_at,
        COALESCE(MAX(cco.cohort_count), 0) AS cohort_count,
        COUNT(cc.client_id) AS client_count,
        MAX(ce.last_entry_at) AS last_entry_at,
        COALESCE(SUM(ce.recent_entry_count), 0) AS recent_entry_total,
        COALESCE(SUM(ce.recent_fields_populated), 0) AS recent_fields_populated
    FROM "User" u
    LEFT JOIN coach_cohorts cco ON cco.coach_id = u.id
    LEFT JOIN coach_clients cc ON cc.coach_id = u.id
    LEFT JOIN client_entries ce ON ce.client_id = cc.client_id
    WHERE 'COACH' = ANY(u.roles)
    GROUP BY u.id, u.name, u.email, u."createdAt"
    ORDER BY u.id
    """


# =============================================================================
# COHORT FACTS
# =============================================================================

def get_cohort_facts_query() -> str:
    """
    Generate SQL returning one row per cohort, aggregated over its members.

    Returns:
        str: Query with columns id, name, coach_id, created_at, member_count,
            last_entry_at, recent_entry_total, recent_fields_populated.
    """
    return f"""
    -- Cohort Facts Query

    WITH {_CLIENT_ENTRIES_CTE}
    SELECT
        c.id,
        c.name,
        c."coachId" AS coach_id,
        c."createdAt" AS created_at,
        COUNT(m."userId") AS member_count,
        MAX(ce.last_entry_at) AS last_entry_at,
        COALESCE(SUM(ce.recent_entry_count), 0) AS recent_entry_total,
        COALESCE(SUM(ce.recent_fields_populated), 0) AS recent_fields_populated
    FROM "Cohort" c
    LEFT JOIN "CohortMembership" m ON m."cohortId" = c.id
    LEFT JOIN client_entries ce ON ce.client_id = m."userId"
    GROUP BY c.id, c.name, c."coachId", c."createdAt"
    ORDER BY c.id
    """


__all__ = [
    "ENTRY_OPTIONAL_FIELDS",
    "get_client_facts_query",
    "get_coach_facts_query",
    "get_cohort_facts_query",
]
