"""
Attention Scoring Service

Scores a single coaching entity (client, coach or cohort) and assigns it a
RAG priority tier. Scoring is a pure function of EntityFacts and a frozen
SystemSettings snapshot; it never touches the database and never suspends.

Signals, evaluated in this fixed order (reasons follow the same order):
1. Inactivity: days since last activity beyond noActivityDays (or the
   critical threshold); no recorded activity at all counts as critical
2. Low engagement: fewer recent check-ins than lowEngagementEntries
3. Completeness: adherence (completeness x adherenceScale) below the green
   minimum, weight scaled by the shortfall
4. Load imbalance (coach/cohort only): over maxClientsPerCoach or under
   minClientsPerCoach; capped below the red threshold
5. Coverage: client without cohort, coach without cohorts, cohort without
   coach; capped below the red threshold

Score = sum of triggered weights.
Tier: score >= attentionRedThreshold -> red, >= attentionAmberThreshold ->
amber, else green.

Settings are trusted but clamped by sanitize_settings() so that a bad
configuration degrades the scoring instead of crashing it.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from coachfit.core.exceptions import DataUnavailable
from coachfit.models.enums import EntityType, Priority
from coachfit.models.schemas import AttentionQueueItem, EntityFacts, SystemSettings

logger = logging.getLogger(__name__)


# =============================================================================
# Settings Clamping
# =============================================================================

# Fields that only make sense as non-negative numbers
_NON_NEGATIVE_FIELDS = (
    "recentActivityDays",
    "noActivityDays",
    "criticalNoActivityDays",
    "shortTermWindowDays",
    "longTermWindowDays",
    "lowEngagementEntries",
    "adherenceGreenMinimum",
    "adherenceAmberMinimum",
    "maxClientsPerCoach",
    "minClientsPerCoach",
    "weightCriticalInactivity",
    "weightInactivity",
    "weightLowEngagement",
    "weightCompleteness",
    "weightLoadImbalance",
    "weightCoverage",
    "growthCollapseAmberDrop",
    "growthCollapseRedDrop",
    "completionAmberFloor",
    "completionRedFloor",
    "inactiveShareAmber",
    "inactiveShareRed",
    "emptyCohortArchiveDays",
    "trendDeadband",
)


def sanitize_settings(settings: SystemSettings) -> SystemSettings:
    """
    Clamp contradictory or out-of-range settings to a safe configuration.

    Never raises. Every adjustment is logged as a warning so operators can
    spot a bad SystemSettings row.

    Rules:
        - negative values become 0
        - criticalNoActivityDays >= noActivityDays
        - adherenceGreenMinimum >= 1 and adherenceAmberMinimum < adherenceGreenMinimum
        - adherenceScale >= 1
        - minClientsPerCoach <= maxClientsPerCoach
        - attentionRedThreshold > attentionAmberThreshold >= 1
        - each red detector bound at least as severe as its amber bound

    Args:
        settings: Snapshot as loaded from the SystemSettings table.

    Returns:
        The same snapshot when nothing needed clamping, otherwise a clamped copy.
    """
    values = settings.model_dump()
    adjustments: List[str] = []

    def clamp(field: str, new_value) -> None:
        if values[field] != new_value:
            adjustments.append(f"{field} {values[field]} -> {new_value}")
            values[field] = new_value

    for field in _NON_NEGATIVE_FIELDS:
        if values[field] < 0:
            clamp(field, 0)

    clamp("criticalNoActivityDays", max(values["criticalNoActivityDays"], values["noActivityDays"]))

    clamp("adherenceScale", max(values["adherenceScale"], 1))
    clamp("adherenceGreenMinimum", max(values["adherenceGreenMinimum"], 1))
    clamp(
        "adherenceAmberMinimum",
        min(values["adherenceAmberMinimum"], values["adherenceGreenMinimum"] - 1),
    )

    clamp("minClientsPerCoach", min(values["minClientsPerCoach"], values["maxClientsPerCoach"]))

    clamp("attentionAmberThreshold", max(values["attentionAmberThreshold"], 1))
    clamp(
        "attentionRedThreshold",
        max(values["attentionRedThreshold"], values["attentionAmberThreshold"] + 1),
    )

    clamp("growthCollapseRedDrop", max(values["growthCollapseRedDrop"], values["growthCollapseAmberDrop"]))
    clamp("completionRedFloor", min(values["completionRedFloor"], values["completionAmberFloor"]))
    clamp("inactiveShareRed", max(values["inactiveShareRed"], values["inactiveShareAmber"]))

    if not adjustments:
        return settings

    logger.warning(f"Clamped inconsistent system settings: {'; '.join(adjustments)}")
    return SystemSettings.model_validate(values)


# =============================================================================
# Signals
# =============================================================================


@dataclass(frozen=True)
class Signal:
    """One triggered signal: its weight, reason and suggested action."""
    weight: int
    reason: str
    action: str


# Suggested actions per signal and entity type
_INACTIVITY_ACTIONS: Dict[EntityType, str] = {
    EntityType.CLIENT: "Contact client to check engagement",
    EntityType.COACH: "Check in with coach about their cohorts",
    EntityType.COHORT: "Review cohort activity with its coach",
}

_ENGAGEMENT_ACTIONS: Dict[EntityType, str] = {
    EntityType.CLIENT: "Send engagement reminder",
    EntityType.COACH: "Review client engagement strategies",
    EntityType.COHORT: "Review cohort engagement",
}

_COVERAGE_REASONS: Dict[EntityType, str] = {
    EntityType.CLIENT: "Not assigned to any cohort",
    EntityType.COACH: "No cohorts assigned",
    EntityType.COHORT: "No coach assigned",
}

_COVERAGE_ACTIONS: Dict[EntityType, str] = {
    EntityType.CLIENT: "Assign client to a cohort",
    EntityType.COACH: "Assign coach to cohorts",
    EntityType.COHORT: "Assign a coach to this cohort",
}


def days_since(moment: datetime, now: datetime) -> int:
    """Whole days elapsed between moment and now (never negative). Naive values are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(math.floor((now - moment).total_seconds() / 86400), 0)


def _non_red_weight(weight: int, settings: SystemSettings) -> int:
    """Cap a weight so the signal alone never reaches the red threshold."""
    return max(min(weight, settings.attentionRedThreshold - 1), 0)


def inactivity_signal(facts: EntityFacts, settings: SystemSettings, now: datetime) -> Optional[Signal]:
    action = _INACTIVITY_ACTIONS[facts.entityType]

    if facts.lastActivityAt is None:
        return Signal(settings.weightCriticalInactivity, "No activity recorded", action)

    idle_days = days_since(facts.lastActivityAt, now)
    if idle_days > settings.criticalNoActivityDays:
        return Signal(settings.weightCriticalInactivity, f"No activity in {idle_days} days", action)
    if idle_days > settings.noActivityDays:
        return Signal(settings.weightInactivity, f"No activity in {idle_days} days", action)
    return None


def engagement_signal(facts: EntityFacts, settings: SystemSettings, now: datetime) -> Optional[Signal]:
    if facts.entityType != EntityType.CLIENT and facts.loadCount == 0:
        raise DataUnavailable("recentEntryCount", "entity has no members")

    if facts.recentEntryCount >= settings.lowEngagementEntries:
        return None

    window = settings.recentActivityDays
    if facts.entityType == EntityType.CLIENT:
        reason = f"Only {facts.recentEntryCount} check-ins in the last {window} days"
    else:
        reason = f"Only {facts.recentEntryCount} check-ins per client in the last {window} days"
    return Signal(settings.weightLowEngagement, reason, _ENGAGEMENT_ACTIONS[facts.entityType])


def completeness_signal(facts: EntityFacts, settings: SystemSettings, now: datetime) -> Optional[Signal]:
    if facts.completenessRatio is None:
        raise DataUnavailable("completenessRatio", "no recent check-ins")

    ratio = min(max(facts.completenessRatio, 0.0), 1.0)
    # Rounded so ratios like 6/7 land exactly on the boundary
    adherence = round(ratio * settings.adherenceScale, 6)
    green = settings.adherenceGreenMinimum

    if adherence >= green:
        return None

    shortfall = (green - adherence) / green
    weight = math.ceil(settings.weightCompleteness * shortfall)

    if adherence >= settings.adherenceAmberMinimum:
        reason = (
            f"Check-in completeness in amber band "
            f"({adherence:.1f}/{settings.adherenceScale}, target {green})"
        )
    else:
        reason = (
            f"Check-in completeness below minimum "
            f"({adherence:.1f}/{settings.adherenceScale}, minimum {settings.adherenceAmberMinimum})"
        )
    return Signal(weight, reason, "Encourage complete check-ins")


def load_signal(facts: EntityFacts, settings: SystemSettings, now: datetime) -> Optional[Signal]:
    if facts.entityType == EntityType.CLIENT:
        return None

    noun = "clients" if facts.entityType == EntityType.COACH else "members"
    weight = _non_red_weight(settings.weightLoadImbalance, settings)

    if facts.loadCount > settings.maxClientsPerCoach:
        return Signal(
            weight,
            f"Overloaded: {facts.loadCount} {noun} (recommended max: {settings.maxClientsPerCoach})",
            "Reassign some clients to other coaches",
        )
    if 0 < facts.loadCount < settings.minClientsPerCoach:
        return Signal(
            weight,
            f"Underutilized: only {facts.loadCount} {noun} (recommended min: {settings.minClientsPerCoach})",
            "Assign more clients to optimize capacity",
        )
    return None


def coverage_signal(facts: EntityFacts, settings: SystemSettings, now: datetime) -> Optional[Signal]:
    if facts.hasAssignment:
        return None
    return Signal(
        _non_red_weight(settings.weightCoverage, settings),
        _COVERAGE_REASONS[facts.entityType],
        _COVERAGE_ACTIONS[facts.entityType],
    )


SignalFn = Callable[[EntityFacts, SystemSettings, datetime], Optional[Signal]]

# Evaluation order is part of the output contract
SIGNALS: List[SignalFn] = [
    inactivity_signal,
    engagement_signal,
    completeness_signal,
    load_signal,
    coverage_signal,
]


# =============================================================================
# Scoring
# =============================================================================


def priority_for_score(score: int, settings: SystemSettings) -> Priority:
    if score >= settings.attentionRedThreshold:
        return Priority.RED
    if score >= settings.attentionAmberThreshold:
        return Priority.AMBER
    return Priority.GREEN


def score_entity(
    facts: EntityFacts,
    settings: SystemSettings,
    now: datetime,
) -> AttentionQueueItem:
    """
    Score one entity against an already sanitized settings snapshot.

    Used by the queue builder, which sanitizes once per pass.
    """
    total = 0
    reasons: List[str] = []
    actions: List[str] = []

    for signal_fn in SIGNALS:
        try:
            signal = signal_fn(facts, settings, now)
        except DataUnavailable as e:
            logger.debug(f"Skipping {signal_fn.__name__} for {facts.entityId}: {e}")
            continue

        if signal is None or signal.weight <= 0:
            continue

        total += signal.weight
        reasons.append(signal.reason)
        if signal.action not in actions:
            actions.append(signal.action)

    return AttentionQueueItem(
        entityId=facts.entityId,
        entityType=facts.entityType,
        entityName=facts.entityName,
        entityEmail=facts.entityEmail,
        priority=priority_for_score(total, settings),
        score=total,
        reasons=reasons,
        suggestedActions=actions,
    )


def score(
    facts: EntityFacts,
    settings: SystemSettings,
    now: Optional[datetime] = None,
) -> AttentionQueueItem:
    """
    Score a single entity and assign its priority tier.

    Args:
        facts: Immutable snapshot of the entity.
        settings: Thresholds and weights; clamped before use.
        now: Reference time (aware). Defaults to the current UTC time.

    Returns:
        AttentionQueueItem with the summed score, tier, and the reasons and
        suggested actions of every triggered signal in evaluation order.

    Example:
        >>> item = score(facts, SystemSettings())
        >>> item.priority, item.reasons
        (<Priority.RED: 'red'>, ['No activity in 40 days'])
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return score_entity(facts, sanitize_settings(settings), now)


__all__ = [
    "Signal",
    "SIGNALS",
    "sanitize_settings",
    "days_since",
    "inactivity_signal",
    "engagement_signal",
    "completeness_signal",
    "load_signal",
    "coverage_signal",
    "priority_for_score",
    "score_entity",
    "score",
]
