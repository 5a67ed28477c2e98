"""
FastAPI router for the admin attention queue.

Endpoint:
- GET /admin/attention: every client, coach and cohort scored and
  partitioned into red/amber/green tiers

The queue is derived fresh on every request (never cached) so it reflects
near-real-time state. Authorization is enforced upstream by the Next.js
admin proxy.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from coachfit.core.dependencies import MetricsRepositoryDep
from coachfit.models import AttentionQueue
from coachfit.services.attention_queue import build_queue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["attention"])


@router.get(
    "/attention",
    response_model=AttentionQueue,
    summary="Get Attention Queue",
    description="""
    Score every client, coach and cohort and group them by priority tier.

    Each tier is sorted by score (highest first), then by name. On any
    internal failure the endpoint still answers 200 with empty tiers so the
    dashboard keeps rendering.
    """,
)
async def get_attention_queue(repository: MetricsRepositoryDep) -> AttentionQueue:
    """
    Build the attention queue from current platform data.

    Args:
        repository: Read-only access to the platform tables.

    Returns:
        AttentionQueue with red, amber and green tiers plus summary counts.
    """
    try:
        settings = await repository.get_system_settings()
        now = datetime.now(timezone.utc)
        facts = await repository.fetch_entity_facts(settings, now)
        return build_queue(facts, settings, now)
    except Exception as e:
        logger.error(f"Error building attention queue: {str(e)}", exc_info=True)
        return AttentionQueue.empty()
