"""
CoachFit Services Module

This module contains the business logic of the attention scoring and insight
engine.

Services:
- metrics_repository: read-only access to the platform tables
- attention: per-entity attention scoring and settings clamping
- attention_queue: tiered attention queue builder
- snapshot: concurrent, timeout-bounded metrics snapshot collection
- anomalies: platform-wide anomaly checks
- opportunities: non-urgent improvement suggestions
- trends: gap-free trend series (pandas)
- insight_cache: single-flight TTL cache
- insight_bundle: the overview compute function
- platform_metrics: overview counters

Architecture:
- Repository Pattern: only metrics_repository touches the database
- Scoring, detection and metrics derivation are pure functions of their inputs
- The InsightCache is the only mutable shared state

All services are designed to be consumed by the API layer (coachfit/api/).
"""

# =============================================================================
# Data Access
# =============================================================================

from coachfit.services.metrics_repository import MetricsRepository

# =============================================================================
# Attention Scoring
# =============================================================================

from coachfit.services.attention import (
    sanitize_settings,
    score,
    score_entity,
    priority_for_score,
)
from coachfit.services.attention_queue import build_queue

# =============================================================================
# Insights
# =============================================================================

from coachfit.services.snapshot import collect_metrics_snapshot
from coachfit.services.anomalies import detect_anomalies
from coachfit.services.opportunities import find_opportunities
from coachfit.services.trends import TrendGenerator, build_series
from coachfit.services.insight_cache import InsightCache
from coachfit.services.insight_bundle import build_insight_bundle, make_insight_compute_fn
from coachfit.services.platform_metrics import build_platform_metrics


__all__ = [
    # Data access
    "MetricsRepository",
    # Attention scoring
    "sanitize_settings",
    "score",
    "score_entity",
    "priority_for_score",
    "build_queue",
    # Insights
    "collect_metrics_snapshot",
    "detect_anomalies",
    "find_opportunities",
    "TrendGenerator",
    "build_series",
    "InsightCache",
    "build_insight_bundle",
    "make_insight_compute_fn",
    "build_platform_metrics",
]
