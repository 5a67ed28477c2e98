"""
Package initialization file for coachfit models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from coachfit.models directly.

Usage:
    from coachfit.models import (
        EntityFacts,
        AttentionQueue,
        InsightBundle,
        Priority,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from coachfit.models.enums import (
    EntityType,
    Priority,
    TrendDirection,
    TrendMetric,
    TrendWindow,
    AnomalyKind,
    OpportunityKind,
    Level,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from coachfit.models.schemas import (
    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------
    SystemSettings,

    # -------------------------------------------------------------------------
    # Attention Scoring
    # -------------------------------------------------------------------------
    EntityFacts,
    AttentionQueueItem,
    AttentionQueueSummary,
    AttentionQueue,

    # -------------------------------------------------------------------------
    # Anomalies
    # -------------------------------------------------------------------------
    GrowthCollapseDetails,
    CompletionDropDetails,
    LoadImbalanceDetails,
    InactiveClientsDetails,
    UnassignedCoachesDetails,
    Anomaly,

    # -------------------------------------------------------------------------
    # Opportunities
    # -------------------------------------------------------------------------
    CoachCapacityDetails,
    ArchiveEmptyCohortsDetails,
    RebalanceLoadDetails,
    UnassignedClientsDetails,
    Opportunity,

    # -------------------------------------------------------------------------
    # Trends and Insight Bundle
    # -------------------------------------------------------------------------
    TrendPoint,
    InsightBundle,

    # -------------------------------------------------------------------------
    # Aggregate Reads
    # -------------------------------------------------------------------------
    CoachLoad,
    CohortSummary,
    MetricsSnapshot,
    PlatformCounters,

    # -------------------------------------------------------------------------
    # Overview
    # -------------------------------------------------------------------------
    UserGrowthMetrics,
    CoachUtilizationMetrics,
    ClientEngagementMetrics,
    EntryMetrics,
    CohortHealthMetrics,
    PlatformMetrics,
    InsightsPayload,
    OverviewResponse,
)


# =============================================================================
# Public API Declaration
# =============================================================================

__all__ = [
    # Enums
    "EntityType",
    "Priority",
    "TrendDirection",
    "TrendMetric",
    "TrendWindow",
    "AnomalyKind",
    "OpportunityKind",
    "Level",

    # Settings
    "SystemSettings",

    # Attention Scoring
    "EntityFacts",
    "AttentionQueueItem",
    "AttentionQueueSummary",
    "AttentionQueue",

    # Anomalies
    "GrowthCollapseDetails",
    "CompletionDropDetails",
    "LoadImbalanceDetails",
    "InactiveClientsDetails",
    "UnassignedCoachesDetails",
    "Anomaly",

    # Opportunities
    "CoachCapacityDetails",
    "ArchiveEmptyCohortsDetails",
    "RebalanceLoadDetails",
    "UnassignedClientsDetails",
    "Opportunity",

    # Trends and Insight Bundle
    "TrendPoint",
    "InsightBundle",

    # Aggregate Reads
    "CoachLoad",
    "CohortSummary",
    "MetricsSnapshot",
    "PlatformCounters",

    # Overview
    "UserGrowthMetrics",
    "CoachUtilizationMetrics",
    "ClientEngagementMetrics",
    "EntryMetrics",
    "CohortHealthMetrics",
    "PlatformMetrics",
    "InsightsPayload",
    "OverviewResponse",
]
