"""
Attention Queue Builder

Scores every entity and partitions the results into red/amber/green tiers
for the admin attention page.

The settings snapshot is sanitized once per pass so a single queue never
mixes thresholds. Within each tier items are ordered by score descending,
then entityName ascending, then entityId ascending, which keeps pagination
stable for identical input.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from coachfit.models.enums import Priority
from coachfit.models.schemas import (
    AttentionQueue,
    AttentionQueueItem,
    AttentionQueueSummary,
    EntityFacts,
    SystemSettings,
)
from coachfit.services.attention import sanitize_settings, score_entity

logger = logging.getLogger(__name__)


def _sort_key(item: AttentionQueueItem):
    return (-item.score, item.entityName, item.entityId)


def build_queue(
    entities: Iterable[EntityFacts],
    settings: SystemSettings,
    now: Optional[datetime] = None,
) -> AttentionQueue:
    """
    Build the tiered attention queue.

    Args:
        entities: Facts for every client, coach and cohort to score.
        settings: Thresholds and weights for this pass.
        now: Reference time (aware). Defaults to the current UTC time.

    Returns:
        AttentionQueue with sorted tiers and their summary counts.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    effective = sanitize_settings(settings)

    tiers = {
        Priority.RED: [],
        Priority.AMBER: [],
        Priority.GREEN: [],
    }
    for facts in entities:
        item = score_entity(facts, effective, now)
        tiers[item.priority].append(item)

    for items in tiers.values():
        items.sort(key=_sort_key)

    red: List[AttentionQueueItem] = tiers[Priority.RED]
    amber: List[AttentionQueueItem] = tiers[Priority.AMBER]
    green: List[AttentionQueueItem] = tiers[Priority.GREEN]

    summary = AttentionQueueSummary(
        red=len(red),
        amber=len(amber),
        green=len(green),
        total=len(red) + len(amber) + len(green),
    )
    logger.info(
        f"Attention queue built: {summary.red} red, {summary.amber} amber, "
        f"{summary.green} green"
    )

    return AttentionQueue(red=red, amber=amber, green=green, summary=summary)


__all__ = ["build_queue"]
