"""
Unit tests for the attention queue builder.

Tests cover:
- Partitioning into red/amber/green with matching summary counts
- Ordering within a tier: score desc, entityName asc, entityId asc
- Determinism regardless of input order
- A single settings sanitization per pass
"""

import random
from datetime import timedelta
from unittest.mock import patch

from coachfit.models import AttentionQueue, EntityType, SystemSettings
from coachfit.services import attention
from coachfit.services.attention_queue import build_queue


class TestBuildQueue:
    """Tests for build_queue()."""

    def test_empty_input_gives_empty_queue(self, default_settings, fixed_now):
        queue = build_queue([], default_settings, fixed_now)

        assert queue == AttentionQueue.empty()
        assert queue.summary.total == 0

    def test_partitions_and_counts(self, make_facts, default_settings, fixed_now):
        entities = [
            make_facts("client-red", idle_days=40),
            make_facts("client-amber", recentEntryCount=0),
            make_facts("client-green"),
            make_facts("coach-amber", EntityType.COACH, loadCount=70),
            make_facts("cohort-green", EntityType.COHORT),
        ]

        queue = build_queue(entities, default_settings, fixed_now)

        assert [i.entityId for i in queue.red] == ["client-red"]
        assert {i.entityId for i in queue.amber} == {"client-amber", "coach-amber"}
        assert {i.entityId for i in queue.green} == {"client-green", "cohort-green"}
        assert queue.summary.red == 1
        assert queue.summary.amber == 2
        assert queue.summary.green == 2
        assert queue.summary.total == len(entities)

    def test_sorted_by_score_then_name_then_id(self, make_facts, default_settings, fixed_now):
        entities = [
            make_facts("c-3", name="Avery", recentEntryCount=0),
            make_facts("c-2", name="Blake", idle_days=20),
            make_facts("c-1", name="Avery", recentEntryCount=0),
            make_facts("c-4", name="Alex", recentEntryCount=0),
        ]

        queue = build_queue(entities, default_settings, fixed_now)

        # Blake scores 25, the rest tie at 20
        assert [i.entityId for i in queue.amber] == ["c-2", "c-4", "c-1", "c-3"]

    def test_output_independent_of_input_order(self, make_facts, default_settings, fixed_now):
        entities = [
            make_facts(f"client-{n}", name=f"Client {n % 3}", idle_days=n * 3, recentEntryCount=n % 8)
            for n in range(15)
        ]
        shuffled = list(entities)
        random.Random(7).shuffle(shuffled)

        first = build_queue(entities, default_settings, fixed_now)
        second = build_queue(shuffled, default_settings, fixed_now)

        assert first.model_dump() == second.model_dump()

    def test_settings_sanitized_once_per_pass(self, make_facts, fixed_now):
        entities = [make_facts(f"client-{n}") for n in range(5)]
        settings = SystemSettings(attentionAmberThreshold=0)

        with patch(
            "coachfit.services.attention_queue.sanitize_settings",
            wraps=attention.sanitize_settings,
        ) as sanitize:
            build_queue(entities, settings, fixed_now)

        sanitize.assert_called_once_with(settings)

    def test_naive_and_aware_timestamps_scored_together(self, make_facts, default_settings, fixed_now):
        naive_idle = fixed_now.replace(tzinfo=None) - timedelta(days=40)
        entities = [
            make_facts("client-aware", idle_days=40),
            make_facts("client-naive", lastActivityAt=naive_idle),
        ]

        queue = build_queue(entities, default_settings, fixed_now)

        assert [i.entityId for i in queue.red] == ["client-aware", "client-naive"]
        assert queue.red[1].reasons == ["No activity in 40 days"]
