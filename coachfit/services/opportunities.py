"""
Opportunity Finder Service

Surfaces actionable, non-urgent suggestions from a MetricsSnapshot. Same
failure policy as the anomaly detector: a check without usable data is
skipped, and an unexpected error in one check never aborts the others.

Catalogue (output follows this order):
1. coach_capacity: coaches with 0 < clients < minClientsPerCoach
2. archive_empty_cohorts: cohorts without members whose last activity (or
   creation) is older than emptyCohortArchiveDays
3. rebalance_load: overloaded and under-utilized coaches both exist
4. unassigned_clients: clients with no cohort membership
"""

import logging
from datetime import timedelta
from typing import Callable, List, Optional

from coachfit.core.exceptions import DataUnavailable
from coachfit.models.enums import Level, OpportunityKind
from coachfit.models.schemas import (
    ArchiveEmptyCohortsDetails,
    CoachCapacityDetails,
    MetricsSnapshot,
    Opportunity,
    RebalanceLoadDetails,
    SystemSettings,
    UnassignedClientsDetails,
)
from coachfit.services.anomalies import require

logger = logging.getLogger(__name__)


def opportunity_id(kind: OpportunityKind, snapshot: MetricsSnapshot) -> str:
    return f"{kind.value}:{snapshot.asOf:%Y-%m-%d}"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


# =============================================================================
# Checks
# =============================================================================


def find_coach_capacity(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Opportunity]:
    loads = sorted(require(snapshot.coachLoads, "coachLoads"), key=lambda c: c.coachId)
    underutilized = [c for c in loads if 0 < c.clientCount < settings.minClientsPerCoach]
    if not underutilized:
        return None

    spare = sum(settings.minClientsPerCoach - c.clientCount for c in underutilized)
    average = sum(c.clientCount for c in underutilized) / len(underutilized)
    count = len(underutilized)

    return Opportunity(
        id=opportunity_id(OpportunityKind.COACH_CAPACITY, snapshot),
        kind=OpportunityKind.COACH_CAPACITY,
        title="Coach capacity available",
        description=(
            f"{count} {_plural(count, 'coach has', 'coaches have')} capacity for more clients "
            f"(room for at least {spare} more)"
        ),
        affectedEntityIds=[c.coachId for c in underutilized],
        impact=Level.MEDIUM,
        effort=Level.LOW,
        details=CoachCapacityDetails(
            coachCount=count,
            spareCapacity=spare,
            averageClientsPerCoach=round(average, 2),
        ),
    )


def find_empty_cohorts(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Opportunity]:
    cohorts = sorted(require(snapshot.cohorts, "cohorts"), key=lambda c: c.cohortId)
    cutoff = snapshot.asOf - timedelta(days=settings.emptyCohortArchiveDays)

    stale = []
    for cohort in cohorts:
        if cohort.memberCount > 0:
            continue
        last_seen = cohort.lastActivityAt or cohort.createdAt
        if last_seen is None:
            logger.debug(f"Cohort {cohort.cohortId} has no timestamps, not archivable")
            continue
        if last_seen < cutoff:
            stale.append(cohort)

    if not stale:
        return None

    count = len(stale)
    return Opportunity(
        id=opportunity_id(OpportunityKind.ARCHIVE_EMPTY_COHORTS, snapshot),
        kind=OpportunityKind.ARCHIVE_EMPTY_COHORTS,
        title="Archive empty cohorts",
        description=(
            f"{count} {_plural(count, 'cohort has', 'cohorts have')} had no members for "
            f"over {settings.emptyCohortArchiveDays} days and can be archived"
        ),
        affectedEntityIds=[c.cohortId for c in stale],
        impact=Level.LOW,
        effort=Level.LOW,
        details=ArchiveEmptyCohortsDetails(
            cohortCount=count,
            emptyForDays=settings.emptyCohortArchiveDays,
        ),
    )


def find_rebalance_load(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Opportunity]:
    loads = sorted(require(snapshot.coachLoads, "coachLoads"), key=lambda c: c.coachId)
    overloaded = [c for c in loads if c.clientCount > settings.maxClientsPerCoach]
    underutilized = [c for c in loads if 0 < c.clientCount < settings.minClientsPerCoach]
    if not overloaded or not underutilized:
        return None

    excess = sum(c.clientCount - settings.maxClientsPerCoach for c in overloaded)
    room = sum(settings.minClientsPerCoach - c.clientCount for c in underutilized)
    to_move = min(excess, room)

    return Opportunity(
        id=opportunity_id(OpportunityKind.REBALANCE_LOAD, snapshot),
        kind=OpportunityKind.REBALANCE_LOAD,
        title="Rebalance coach load",
        description=(
            f"Move {to_move} {_plural(to_move, 'client', 'clients')} from "
            f"{len(overloaded)} overloaded to {len(underutilized)} under-utilized "
            f"{_plural(len(underutilized), 'coach', 'coaches')}"
        ),
        affectedEntityIds=[c.coachId for c in overloaded + underutilized],
        impact=Level.HIGH,
        effort=Level.MEDIUM,
        details=RebalanceLoadDetails(
            overloadedCoachIds=[c.coachId for c in overloaded],
            underutilizedCoachIds=[c.coachId for c in underutilized],
            clientsToMove=to_move,
        ),
    )


def find_unassigned_clients(snapshot: MetricsSnapshot, settings: SystemSettings) -> Optional[Opportunity]:
    client_ids = sorted(require(snapshot.unassignedClientIds, "unassignedClientIds"))
    if not client_ids:
        return None

    count = len(client_ids)
    return Opportunity(
        id=opportunity_id(OpportunityKind.UNASSIGNED_CLIENTS, snapshot),
        kind=OpportunityKind.UNASSIGNED_CLIENTS,
        title="Assign clients to cohorts",
        description=(
            f"{count} {_plural(count, 'client is', 'clients are')} not in any cohort"
        ),
        affectedEntityIds=client_ids,
        impact=Level.HIGH,
        effort=Level.LOW,
        details=UnassignedClientsDetails(clientCount=count),
    )


OpportunityCheck = Callable[[MetricsSnapshot, SystemSettings], Optional[Opportunity]]

OPPORTUNITY_CHECKS: List[OpportunityCheck] = [
    find_coach_capacity,
    find_empty_cohorts,
    find_rebalance_load,
    find_unassigned_clients,
]


def find_opportunities(snapshot: MetricsSnapshot, settings: SystemSettings) -> List[Opportunity]:
    """
    Run every opportunity check against the snapshot.

    Returns:
        Opportunities in catalogue order; at most one per check.
    """
    opportunities: List[Opportunity] = []

    for check in OPPORTUNITY_CHECKS:
        try:
            opportunity = check(snapshot, settings)
        except DataUnavailable as e:
            logger.debug(f"Skipping {check.__name__}: {e}")
            continue
        except Exception as e:
            logger.error(f"Opportunity check {check.__name__} failed: {e}", exc_info=True)
            continue

        if opportunity is not None:
            opportunities.append(opportunity)

    return opportunities


__all__ = [
    "OPPORTUNITY_CHECKS",
    "opportunity_id",
    "find_coach_capacity",
    "find_empty_cohorts",
    "find_rebalance_load",
    "find_unassigned_clients",
    "find_opportunities",
]
