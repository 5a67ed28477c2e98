"""
Enumeration definitions for the CoachFit insights backend.

All enums inherit from both `str` and `Enum` so that pydantic serializes them
as their plain string values in API responses; the admin dashboard matches
on the lowercase strings ("red", "amber", "green", ...).
"""

from enum import Enum


class EntityType(str, Enum):
    """
    Kind of coaching entity scored for attention.

    - client: A user with the CLIENT role who logs daily check-ins
    - coach: A user with the COACH role who owns cohorts
    - cohort: A group of clients run by one coach
    """
    CLIENT = "client"
    COACH = "coach"
    COHORT = "cohort"


class Priority(str, Enum):
    """
    RAG priority tier.

    - red: needs attention now
    - amber: needs attention soon
    - green: healthy

    Anomalies only ever use red or amber.
    """
    RED = "red"
    AMBER = "amber"
    GREEN = "green"


class TrendDirection(str, Enum):
    """Direction of a trend series or of one step within it."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendMetric(str, Enum):
    """
    Metrics the TrendGenerator can bucket.

    - user_growth: users created per bucket
    - entry_completion: check-in entries logged per bucket
    """
    USER_GROWTH = "user_growth"
    ENTRY_COMPLETION = "entry_completion"


class TrendWindow(str, Enum):
    """
    Supported trend windows.

    7d/14d/30d are bucketed per day; 90d is bucketed per week (13 buckets).
    """
    DAYS_7 = "7d"
    DAYS_14 = "14d"
    DAYS_30 = "30d"
    DAYS_90 = "90d"


class AnomalyKind(str, Enum):
    """
    Catalogue of platform-wide anomaly checks, in evaluation order.

    - growth_collapse: week-over-week new-user signups collapsed
    - completion_drop: check-in completion rate fell below its floor
    - load_imbalance: coaches overloaded, or clients-per-coach outside bounds
    - inactive_clients: large share of clients stopped checking in
    - unassigned_coaches: coaches without any cohort
    """
    GROWTH_COLLAPSE = "growth_collapse"
    COMPLETION_DROP = "completion_drop"
    LOAD_IMBALANCE = "load_imbalance"
    INACTIVE_CLIENTS = "inactive_clients"
    UNASSIGNED_COACHES = "unassigned_coaches"


class OpportunityKind(str, Enum):
    """
    Catalogue of non-urgent improvement suggestions, in evaluation order.

    - coach_capacity: coaches who could take more clients
    - archive_empty_cohorts: cohorts empty long enough to archive
    - rebalance_load: move clients from overloaded to under-utilized coaches
    - unassigned_clients: clients not in any cohort
    """
    COACH_CAPACITY = "coach_capacity"
    ARCHIVE_EMPTY_COHORTS = "archive_empty_cohorts"
    REBALANCE_LOAD = "rebalance_load"
    UNASSIGNED_CLIENTS = "unassigned_clients"


class Level(str, Enum):
    """Impact/effort estimate attached to an opportunity."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
