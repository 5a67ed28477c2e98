"""
Pydantic request/response models for the CoachFit insights backend.

This module provides type-safe data validation and serialization for the
attention scoring and insight engine, including:
- SystemSettings: operator-tunable thresholds and weights (frozen snapshot)
- EntityFacts / AttentionQueueItem / AttentionQueue: attention scoring I/O
- Anomaly / Opportunity with strongly typed, kind-discriminated details
- TrendPoint / InsightBundle: trend series and the cached insight unit
- MetricsSnapshot / PlatformCounters / PlatformMetrics: aggregate reads
  and the overview counters shown on the admin dashboard

Field names are camelCase because they are the JSON contract consumed by
the Next.js admin dashboard.

All models use Pydantic v2 syntax.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Annotated

from coachfit.models.enums import (
    AnomalyKind,
    EntityType,
    Level,
    OpportunityKind,
    Priority,
    TrendDirection,
)


# =============================================================================
# System Settings
# =============================================================================


class SystemSettings(BaseModel):
    """
    Operator-tunable thresholds read by every scoring and detection call.

    Loaded once per request (or per cache refresh) from the SystemSettings
    table and frozen, so a single scoring pass never mixes old and new
    thresholds. The core never mutates it; admins edit the table.

    Values are trusted but not validated here: a contradictory configuration
    is clamped by services.attention.sanitize_settings rather than rejected.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    # -------------------------------------------------------------------------
    # Activity windows (days)
    # -------------------------------------------------------------------------
    recentActivityDays: int = Field(
        default=14,
        description="Window for counting recent check-ins"
    )
    noActivityDays: int = Field(
        default=14,
        description="Idle days before the inactivity signal fires"
    )
    criticalNoActivityDays: int = Field(
        default=30,
        description="Idle days before the critical inactivity signal fires"
    )
    shortTermWindowDays: int = 7
    longTermWindowDays: int = 30

    # -------------------------------------------------------------------------
    # Engagement and adherence
    # -------------------------------------------------------------------------
    lowEngagementEntries: int = Field(
        default=7,
        description="Fewer recent check-ins than this is low engagement"
    )
    adherenceGreenMinimum: int = Field(
        default=6,
        description="Check-ins per week at or above which adherence is green"
    )
    adherenceAmberMinimum: int = Field(
        default=3,
        description="Check-ins per week at or above which adherence is amber"
    )
    adherenceScale: int = Field(
        default=7,
        description="Upper end of the adherence scale (check-ins per week)"
    )

    # -------------------------------------------------------------------------
    # Coach capacity
    # -------------------------------------------------------------------------
    maxClientsPerCoach: int = 50
    minClientsPerCoach: int = 10

    # -------------------------------------------------------------------------
    # Attention tiers and signal weights
    # -------------------------------------------------------------------------
    attentionRedThreshold: int = 50
    attentionAmberThreshold: int = 20
    weightCriticalInactivity: int = 50
    weightInactivity: int = 25
    weightLowEngagement: int = 20
    weightCompleteness: int = 20
    weightLoadImbalance: int = 20
    weightCoverage: int = 20

    # -------------------------------------------------------------------------
    # Anomaly detection
    # -------------------------------------------------------------------------
    growthCollapseAmberDrop: float = Field(
        default=0.5,
        description="Week-over-week signup drop (fraction) flagged amber"
    )
    growthCollapseRedDrop: float = Field(
        default=0.75,
        description="Week-over-week signup drop (fraction) flagged red"
    )
    completionAmberFloor: float = 0.5
    completionRedFloor: float = 0.3
    inactiveShareAmber: float = 0.25
    inactiveShareRed: float = 0.5

    # -------------------------------------------------------------------------
    # Opportunities and trends
    # -------------------------------------------------------------------------
    emptyCohortArchiveDays: int = 30
    trendDeadband: float = Field(
        default=0.05,
        description="Relative change below which a series counts as stable"
    )


# =============================================================================
# Attention Scoring Models
# =============================================================================


class EntityFacts(BaseModel):
    """
    Immutable snapshot of one entity, used as scoring input.

    Derived fresh on every attention request from the platform tables.
    For coaches and cohorts, loadCount is the number of clients/members and
    recentEntryCount is the average number of check-ins per member over the
    recent window.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "entityId": "clx1client",
                "entityType": "client",
                "entityName": "Jordan Lee",
                "entityEmail": "jordan@example.com",
                "lastActivityAt": "2026-10-17T08:30:00Z",
                "recentEntryCount": 9,
                "completenessRatio": 0.82,
                "loadCount": 1,
                "hasAssignment": True
            }
        }
    )

    entityId: str = Field(..., min_length=1)
    entityType: EntityType
    entityName: str
    entityEmail: Optional[str] = None
    lastActivityAt: Optional[datetime] = Field(
        default=None,
        description="Latest check-in; None when the entity was never active"
    )
    recentEntryCount: int = Field(
        default=0,
        description="Check-ins within recentActivityDays"
    )
    completenessRatio: Optional[float] = Field(
        default=None,
        description="Fraction of optional check-in fields populated (0..1)"
    )
    loadCount: int = Field(
        default=0,
        description="Clients per coach, members per cohort, cohorts per client"
    )
    hasAssignment: bool = Field(
        default=True,
        description="Client in a cohort / coach owns a cohort / cohort has a coach"
    )

    @field_validator("lastActivityAt")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are UTC (Prisma stores DateTime without zone)."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class AttentionQueueItem(BaseModel):
    """
    Scoring output for one entity.

    reasons and suggestedActions follow the fixed signal evaluation order
    (inactivity, engagement, completeness, load, coverage).
    """
    entityId: str
    entityType: EntityType
    entityName: str
    entityEmail: Optional[str] = None
    priority: Priority
    score: int = Field(..., ge=0, description="Higher is more urgent")
    reasons: List[str] = Field(default_factory=list)
    suggestedActions: List[str] = Field(default_factory=list)


class AttentionQueueSummary(BaseModel):
    """Tier counts shown on the attention page header."""
    red: int = 0
    amber: int = 0
    green: int = 0
    total: int = 0


class AttentionQueue(BaseModel):
    """Response of GET /admin/attention."""
    red: List[AttentionQueueItem] = Field(default_factory=list)
    amber: List[AttentionQueueItem] = Field(default_factory=list)
    green: List[AttentionQueueItem] = Field(default_factory=list)
    summary: AttentionQueueSummary = Field(default_factory=AttentionQueueSummary)

    @classmethod
    def empty(cls) -> "AttentionQueue":
        return cls()


# =============================================================================
# Anomaly Models
# =============================================================================


class GrowthCollapseDetails(BaseModel):
    kind: Literal[AnomalyKind.GROWTH_COLLAPSE] = AnomalyKind.GROWTH_COLLAPSE
    newUsersLast7Days: int
    newUsersPrior7Days: int
    dropRatio: float


class CompletionDropDetails(BaseModel):
    kind: Literal[AnomalyKind.COMPLETION_DROP] = AnomalyKind.COMPLETION_DROP
    entriesLast7Days: int
    expectedEntries: int
    completionRate: float
    floor: float


class LoadImbalanceDetails(BaseModel):
    kind: Literal[AnomalyKind.LOAD_IMBALANCE] = AnomalyKind.LOAD_IMBALANCE
    overloadedCoachIds: List[str] = Field(default_factory=list)
    averageClientsPerCoach: float
    minClientsPerCoach: int
    maxClientsPerCoach: int


class InactiveClientsDetails(BaseModel):
    kind: Literal[AnomalyKind.INACTIVE_CLIENTS] = AnomalyKind.INACTIVE_CLIENTS
    inactiveClients: int
    totalClients: int
    inactiveShare: float
    windowDays: int


class UnassignedCoachesDetails(BaseModel):
    kind: Literal[AnomalyKind.UNASSIGNED_COACHES] = AnomalyKind.UNASSIGNED_COACHES
    coachIds: List[str]


AnomalyDetails = Annotated[
    Union[
        GrowthCollapseDetails,
        CompletionDropDetails,
        LoadImbalanceDetails,
        InactiveClientsDetails,
        UnassignedCoachesDetails,
    ],
    Field(discriminator="kind"),
]


class Anomaly(BaseModel):
    """
    A single platform-wide deviation worth flagging on the dashboard.

    Red anomalies populate the "high priority" rail of the overview page.
    """
    id: str
    kind: AnomalyKind
    priority: Priority
    metric: str
    description: str
    detectedAt: datetime
    affectedEntityIds: List[str] = Field(default_factory=list)
    details: AnomalyDetails


# =============================================================================
# Opportunity Models
# =============================================================================


class CoachCapacityDetails(BaseModel):
    kind: Literal[OpportunityKind.COACH_CAPACITY] = OpportunityKind.COACH_CAPACITY
    coachCount: int
    spareCapacity: int
    averageClientsPerCoach: float


class ArchiveEmptyCohortsDetails(BaseModel):
    kind: Literal[OpportunityKind.ARCHIVE_EMPTY_COHORTS] = OpportunityKind.ARCHIVE_EMPTY_COHORTS
    cohortCount: int
    emptyForDays: int


class RebalanceLoadDetails(BaseModel):
    kind: Literal[OpportunityKind.REBALANCE_LOAD] = OpportunityKind.REBALANCE_LOAD
    overloadedCoachIds: List[str]
    underutilizedCoachIds: List[str]
    clientsToMove: int


class UnassignedClientsDetails(BaseModel):
    kind: Literal[OpportunityKind.UNASSIGNED_CLIENTS] = OpportunityKind.UNASSIGNED_CLIENTS
    clientCount: int


OpportunityDetails = Annotated[
    Union[
        CoachCapacityDetails,
        ArchiveEmptyCohortsDetails,
        RebalanceLoadDetails,
        UnassignedClientsDetails,
    ],
    Field(discriminator="kind"),
]


class Opportunity(BaseModel):
    """An actionable, non-urgent suggestion (e.g. "Coach X is underutilized")."""
    id: str
    kind: OpportunityKind
    title: str
    description: str
    affectedEntityIds: List[str] = Field(default_factory=list)
    impact: Level = Level.MEDIUM
    effort: Level = Level.MEDIUM
    details: OpportunityDetails


# =============================================================================
# Trend and Insight Bundle Models
# =============================================================================


class TrendPoint(BaseModel):
    """
    One bucket of a generated series.

    The first point carries the direction of the whole series (first vs last
    bucket); later points carry their direction relative to the previous one.
    """
    timestamp: datetime
    value: float
    direction: TrendDirection


class InsightBundle(BaseModel):
    """The unit cached by InsightCache and shared read-only by all readers."""
    anomalies: List[Anomaly] = Field(default_factory=list)
    opportunities: List[Opportunity] = Field(default_factory=list)
    userGrowthTrend: List[TrendPoint] = Field(default_factory=list)
    entryCompletionTrend: List[TrendPoint] = Field(default_factory=list)
    computedAt: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "InsightBundle":
        """Bundle served when no computation has ever succeeded."""
        return cls()


# =============================================================================
# Aggregate Read Models
# =============================================================================


class CoachLoad(BaseModel):
    coachId: str
    coachName: str
    clientCount: int = 0
    cohortCount: int = 0


class CohortSummary(BaseModel):
    cohortId: str
    name: str
    coachId: Optional[str] = None
    memberCount: int = 0
    createdAt: Optional[datetime] = None
    lastActivityAt: Optional[datetime] = Field(
        default=None,
        description="Latest check-in by any member (or membership change)"
    )


class MetricsSnapshot(BaseModel):
    """
    Aggregates read once per insight computation.

    Every field but asOf is optional: None means the read failed or timed
    out, and only the checks that need that field are skipped.
    """
    asOf: datetime
    newUsersLast7Days: Optional[int] = None
    newUsersPrior7Days: Optional[int] = None
    totalClients: Optional[int] = None
    activeClients: Optional[int] = None
    entriesLast7Days: Optional[int] = None
    unassignedClientIds: Optional[List[str]] = None
    coachLoads: Optional[List[CoachLoad]] = None
    cohorts: Optional[List[CohortSummary]] = None


class PlatformCounters(BaseModel):
    """Raw counters behind the overview "metrics" block."""
    totalUsers: int = 0
    usersLast30Days: int = 0
    usersLast7Days: int = 0
    totalCoaches: int = 0
    coachesWithCohorts: int = 0
    totalClients: int = 0
    activeClients: int = 0
    totalEntries: int = 0
    entriesLast7Days: int = 0
    entriesLast30Days: int = 0
    totalCohorts: int = 0
    cohortsWithClients: int = 0
    coachClientCounts: List[int] = Field(default_factory=list)


class UserGrowthMetrics(BaseModel):
    current: int = 0
    change: int = 0
    trend: TrendDirection = TrendDirection.STABLE
    prediction: int = 0
    growthRate: float = 0.0


class CoachUtilizationMetrics(BaseModel):
    total: int = 0
    active: int = 0
    average: float = 0.0
    overloaded: int = 0
    underutilized: int = 0


class ClientEngagementMetrics(BaseModel):
    total: int = 0
    active: int = 0
    activeRate: float = 0.0
    completionRate: float = 0.0
    inactiveUsers: int = 0


class EntryMetrics(BaseModel):
    total: int = 0
    last7Days: int = 0
    last30Days: int = 0
    avgPerDay: float = 0.0
    expectedPerDay: int = 0


class CohortHealthMetrics(BaseModel):
    total: int = 0
    withClients: int = 0
    empty: int = 0


class PlatformMetrics(BaseModel):
    """Overview counters; all zeros when the counters could not be read."""
    userGrowth: UserGrowthMetrics = Field(default_factory=UserGrowthMetrics)
    coachUtilization: CoachUtilizationMetrics = Field(default_factory=CoachUtilizationMetrics)
    clientEngagement: ClientEngagementMetrics = Field(default_factory=ClientEngagementMetrics)
    entryMetrics: EntryMetrics = Field(default_factory=EntryMetrics)
    cohortHealth: CohortHealthMetrics = Field(default_factory=CohortHealthMetrics)


# =============================================================================
# Overview Response Models
# =============================================================================


class InsightsPayload(BaseModel):
    highPriority: List[Anomaly] = Field(default_factory=list)
    trends: List[TrendPoint] = Field(default_factory=list)
    anomalies: List[Anomaly] = Field(default_factory=list)
    opportunities: List[Opportunity] = Field(default_factory=list)
    computedAt: Optional[datetime] = None


class OverviewResponse(BaseModel):
    """Response of GET /admin/overview."""
    insights: InsightsPayload = Field(default_factory=InsightsPayload)
    metrics: PlatformMetrics = Field(default_factory=PlatformMetrics)
