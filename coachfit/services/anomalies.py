"""
Platform Anomaly Detection Service

Evaluates a fixed catalogue of platform-wide checks against a
MetricsSnapshot. Each check emits zero or one Anomaly, tagged red when the
severe threshold is crossed and amber for the milder one.

Catalogue (output follows this order):
1. growth_collapse: week-over-week new-user signups dropped
   (prior - current) / prior >= growthCollapseRedDrop -> red,
   >= growthCollapseAmberDrop -> amber
2. completion_drop: entriesLast7Days / (totalClients x window days) below
   completionRedFloor -> red, below completionAmberFloor -> amber
3. load_imbalance: any coach above maxClientsPerCoach -> red; otherwise the
   average load of coaches with clients outside
   [minClientsPerCoach, maxClientsPerCoach] -> amber
4. inactive_clients: share of clients without a recent check-in
   >= inactiveShareRed -> red, >= inactiveShareAmber -> amber
5. unassigned_coaches: coaches without any cohort -> amber

Failure Policy:
    A check whose data is missing (None) or degenerate (e.g. zero clients)
    raises DataUnavailable and is skipped. Any other error inside a check is
    logged and that check alone is skipped. Detection never raises.

Detection is deterministic: entity lists are sorted by id before use, and
detectedAt is the snapshot's asOf.
"""

import logging
from typing import Callable, List, Optional

import numpy as np

from coachfit.core.exceptions import DataUnavailable
from coachfit.models.enums import AnomalyKind, Priority
from coachfit.models.schemas import (
    Anomaly,
    CompletionDropDetails,
    GrowthCollapseDetails,
    InactiveClientsDetails,
    LoadImbalanceDetails,
    MetricsSnapshot,
    SystemSettings,
    UnassignedCoachesDetails,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def anomaly_id(kind: AnomalyKind, snapshot: MetricsSnapshot) -> str:
    """Stable id: one anomaly per kind per snapshot day."""
    return f"{kind.value}:{snapshot.asOf:%Y-%m-%d}"


def require(value, metric: str):
    """Return value, or raise DataUnavailable when the read was unavailable."""
    if value is None:
        raise DataUnavailable(metric)
    return value


# =============================================================================
# Checks
# =============================================================================


def check_growth_collapse(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Anomaly]:
    current = require(snapshot.newUsersLast7Days, "newUsersLast7Days")
    prior = require(snapshot.newUsersPrior7Days, "newUsersPrior7Days")
    if prior <= 0:
        raise DataUnavailable("newUsersPrior7Days", "no signups in the prior week")

    drop = (prior - current) / prior
    if drop >= settings.growthCollapseRedDrop:
        priority = Priority.RED
    elif drop >= settings.growthCollapseAmberDrop:
        priority = Priority.AMBER
    else:
        return None

    return Anomaly(
        id=anomaly_id(AnomalyKind.GROWTH_COLLAPSE, snapshot),
        kind=AnomalyKind.GROWTH_COLLAPSE,
        priority=priority,
        metric="user_growth",
        description=(
            f"New signups fell {drop:.0%} week over week "
            f"({prior} -> {current})"
        ),
        detectedAt=snapshot.asOf,
        details=GrowthCollapseDetails(
            newUsersLast7Days=current,
            newUsersPrior7Days=prior,
            dropRatio=round(drop, 4),
        ),
    )


def check_completion_drop(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Anomaly]:
    total_clients = require(snapshot.totalClients, "totalClients")
    entries = require(snapshot.entriesLast7Days, "entriesLast7Days")
    window_days = max(settings.shortTermWindowDays, 1)
    if total_clients <= 0:
        raise DataUnavailable("totalClients", "no clients")

    expected = total_clients * window_days
    rate = entries / expected
    if rate < settings.completionRedFloor:
        priority, floor = Priority.RED, settings.completionRedFloor
    elif rate < settings.completionAmberFloor:
        priority, floor = Priority.AMBER, settings.completionAmberFloor
    else:
        return None

    return Anomaly(
        id=anomaly_id(AnomalyKind.COMPLETION_DROP, snapshot),
        kind=AnomalyKind.COMPLETION_DROP,
        priority=priority,
        metric="entry_completion",
        description=(
            f"Check-in completion at {rate:.0%} over the last {window_days} days "
            f"(floor {floor:.0%})"
        ),
        detectedAt=snapshot.asOf,
        details=CompletionDropDetails(
            entriesLast7Days=entries,
            expectedEntries=expected,
            completionRate=round(rate, 4),
            floor=floor,
        ),
    )


def check_load_imbalance(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Anomaly]:
    loads = sorted(require(snapshot.coachLoads, "coachLoads"), key=lambda c: c.coachId)
    if not loads:
        raise DataUnavailable("coachLoads", "no coaches")

    active_counts = np.array([c.clientCount for c in loads if c.clientCount > 0], dtype=float)
    average = float(np.mean(active_counts)) if active_counts.size else 0.0

    overloaded = [c for c in loads if c.clientCount > settings.maxClientsPerCoach]
    if overloaded:
        names = ", ".join(c.coachName for c in overloaded)
        priority = Priority.RED
        description = (
            f"{len(overloaded)} coach(es) above {settings.maxClientsPerCoach} clients: {names}"
        )
    else:
        if not active_counts.size:
            raise DataUnavailable("coachLoads", "no coach has clients")
        if settings.minClientsPerCoach <= average <= settings.maxClientsPerCoach:
            return None
        priority = Priority.AMBER
        description = (
            f"Average load of {average:.1f} clients per coach is outside "
            f"{settings.minClientsPerCoach}-{settings.maxClientsPerCoach}"
        )

    overloaded_ids = [c.coachId for c in overloaded]
    return Anomaly(
        id=anomaly_id(AnomalyKind.LOAD_IMBALANCE, snapshot),
        kind=AnomalyKind.LOAD_IMBALANCE,
        priority=priority,
        metric="coach_load",
        description=description,
        detectedAt=snapshot.asOf,
        affectedEntityIds=overloaded_ids,
        details=LoadImbalanceDetails(
            overloadedCoachIds=overloaded_ids,
            averageClientsPerCoach=round(average, 2),
            minClientsPerCoach=settings.minClientsPerCoach,
            maxClientsPerCoach=settings.maxClientsPerCoach,
        ),
    )


def check_inactive_clients(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Anomaly]:
    total_clients = require(snapshot.totalClients, "totalClients")
    active = require(snapshot.activeClients, "activeClients")
    if total_clients <= 0:
        raise DataUnavailable("totalClients", "no clients")

    inactive = int(np.clip(total_clients - active, 0, total_clients))
    share = inactive / total_clients
    if share >= settings.inactiveShareRed:
        priority = Priority.RED
    elif share >= settings.inactiveShareAmber:
        priority = Priority.AMBER
    else:
        return None

    return Anomaly(
        id=anomaly_id(AnomalyKind.INACTIVE_CLIENTS, snapshot),
        kind=AnomalyKind.INACTIVE_CLIENTS,
        priority=priority,
        metric="client_activity",
        description=(
            f"{inactive} of {total_clients} clients ({share:.0%}) have not checked in "
            f"for {settings.recentActivityDays} days"
        ),
        detectedAt=snapshot.asOf,
        details=InactiveClientsDetails(
            inactiveClients=inactive,
            totalClients=total_clients,
            inactiveShare=round(share, 4),
            windowDays=settings.recentActivityDays,
        ),
    )


def check_unassigned_coaches(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Anomaly]:
    loads = require(snapshot.coachLoads, "coachLoads")
    coach_ids = sorted(c.coachId for c in loads if c.cohortCount == 0)
    if not coach_ids:
        return None

    return Anomaly(
        id=anomaly_id(AnomalyKind.UNASSIGNED_COACHES, snapshot),
        kind=AnomalyKind.UNASSIGNED_COACHES,
        priority=Priority.AMBER,
        metric="coach_coverage",
        description=f"{len(coach_ids)} coach(es) have no cohorts assigned",
        detectedAt=snapshot.asOf,
        affectedEntityIds=coach_ids,
        details=UnassignedCoachesDetails(coachIds=coach_ids),
    )


AnomalyCheck = Callable[[MetricsSnapshot, SystemSettings], Optional[Anomaly]]

ANOMALY_CHECKS: List[AnomalyCheck] = [
    check_growth_collapse,
    check_completion_drop,
    check_load_imbalance,
    check_inactive_clients,
    check_unassigned_coaches,
]


# =============================================================================
# Main Entry Point
# =============================================================================


def detect_anomalies(snapshot: MetricsSnapshot, settings: SystemSettings) -> List[Anomaly]:
    """
    Run every anomaly check against the snapshot.

    Args:
        snapshot: Aggregates read once for this computation.
        settings: Thresholds (sanitize beforehand when read from the table).

    Returns:
        Anomalies in catalogue order; at most one per check.
    """
    anomalies: List[Anomaly] = []

    for check in ANOMALY_CHECKS:
        try:
            anomaly = check(snapshot, settings)
        except DataUnavailable as e:
            logger.debug(f"Skipping {check.__name__}: {e}")
            continue
        except Exception as e:
            logger.error(f"Anomaly check {check.__name__} failed: {e}", exc_info=True)
            continue

        if anomaly is not None:
            anomalies.append(anomaly)

    return anomalies


__all__ = [
    "ANOMALY_CHECKS",
    "anomaly_id",
    "check_growth_collapse",
    "check_completion_drop",
    "check_load_imbalance",
    "check_inactive_clients",
    "check_unassigned_coaches",
    "detect_anomalies",
]
