"""
Unit tests for the attention scoring service.

Tests cover:
- Tier assignment for the canonical client scenarios (inactive, low
  engagement, healthy)
- Each signal: thresholds, boundaries, reason text and suggested actions
- Skipping signals whose inputs are unavailable
- Load and coverage weights capped below the red threshold
- Monotonicity: triggering more signals never lowers score or tier
- Settings clamping (sanitize_settings)

All tests use the fixed reference time from conftest.
"""

import itertools
import logging
from datetime import datetime, timedelta, timezone

import pytest

from coachfit.models import EntityFacts, EntityType, Priority, SystemSettings
from coachfit.services.attention import (
    days_since,
    priority_for_score,
    sanitize_settings,
    score,
)


TIER_RANK = {Priority.GREEN: 0, Priority.AMBER: 1, Priority.RED: 2}


# ============================================================
# Canonical scenarios
# ============================================================

class TestClientScenarios:
    """Tests for the three reference client scenarios."""

    def test_client_inactive_forty_days_is_red(self, make_facts, default_settings, fixed_now):
        """A client idle for 40 days triggers critical inactivity."""
        facts = make_facts(idle_days=40, recentEntryCount=10, completenessRatio=1.0)

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.RED
        assert item.score == 50
        assert item.reasons == ["No activity in 40 days"]
        assert item.suggestedActions == ["Contact client to check engagement"]

    def test_recently_active_client_without_checkins_is_amber(
        self, make_facts, default_settings, fixed_now
    ):
        """Active 2 days ago but zero check-ins: low engagement only."""
        facts = make_facts(idle_days=2, recentEntryCount=0, completenessRatio=None)

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.AMBER
        assert item.score == 20
        assert item.reasons == ["Only 0 check-ins in the last 14 days"]
        assert item.suggestedActions == ["Send engagement reminder"]

    def test_healthy_client_is_green_without_reasons(self, make_facts, default_settings, fixed_now):
        facts = make_facts(idle_days=1, recentEntryCount=10, completenessRatio=1.0)

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.GREEN
        assert item.score == 0
        assert item.reasons == []
        assert item.suggestedActions == []

    def test_never_active_client_is_red(self, make_facts, default_settings, fixed_now):
        facts = make_facts(idle_days=None)

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.RED
        assert item.reasons[0] == "No activity recorded"

    def test_identity_fields_copied_from_facts(self, make_facts, default_settings, fixed_now):
        facts = make_facts("client-42", name="Sam Rivera")

        item = score(facts, default_settings, fixed_now)

        assert item.entityId == "client-42"
        assert item.entityType == EntityType.CLIENT
        assert item.entityName == "Sam Rivera"
        assert item.entityEmail == "client-42@example.com"


# ============================================================
# Individual signals
# ============================================================

class TestInactivitySignal:
    """Tests for the inactivity thresholds."""

    def test_idle_exactly_no_activity_days_does_not_fire(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(idle_days=14), default_settings, fixed_now)

        assert item.score == 0

    def test_idle_between_thresholds_uses_normal_weight(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(idle_days=20), default_settings, fixed_now)

        assert item.score == 25
        assert item.priority == Priority.AMBER
        assert item.reasons == ["No activity in 20 days"]

    def test_idle_beyond_critical_uses_critical_weight(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(idle_days=31), default_settings, fixed_now)

        assert item.score == 50

    def test_future_activity_counts_as_zero_days(self, fixed_now):
        assert days_since(fixed_now.replace(year=2027), fixed_now) == 0

    def test_naive_activity_timestamp_read_as_utc(self, fixed_now):
        naive = datetime(2026, 9, 9, 12, 0)

        facts = EntityFacts(
            entityId="client-n", entityType=EntityType.CLIENT, entityName="N", lastActivityAt=naive,
        )

        assert facts.lastActivityAt == datetime(2026, 9, 9, 12, 0, tzinfo=timezone.utc)
        assert days_since(naive, fixed_now) == 40

    def test_naive_reference_time_read_as_utc(self, fixed_now):
        moment = fixed_now - timedelta(days=3)

        assert days_since(moment, fixed_now.replace(tzinfo=None)) == 3


class TestEngagementSignal:
    """Tests for low engagement."""

    def test_at_threshold_does_not_fire(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(recentEntryCount=7), default_settings, fixed_now)

        assert item.score == 0

    def test_coach_reason_is_per_client(self, make_facts, default_settings, fixed_now):
        facts = make_facts("coach-1", EntityType.COACH, recentEntryCount=3)

        item = score(facts, default_settings, fixed_now)

        assert item.reasons == ["Only 3 check-ins per client in the last 14 days"]
        assert item.suggestedActions == ["Review client engagement strategies"]

    def test_skipped_for_coach_without_members(self, make_facts, default_settings, fixed_now):
        """A coach with no clients has no engagement to measure."""
        facts = make_facts(
            "coach-1", EntityType.COACH,
            recentEntryCount=0, loadCount=0, completenessRatio=None,
        )

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.GREEN
        assert item.reasons == []

    def test_coach_with_clients_and_no_checkins_is_amber(self, default_settings, fixed_now):
        """Engagement is gated on the client count carried in loadCount."""
        facts = EntityFacts(
            entityId="coach-2",
            entityType=EntityType.COACH,
            entityName="Coach Two",
            lastActivityAt=fixed_now - timedelta(days=2),
            recentEntryCount=0,
            completenessRatio=1.0,
            loadCount=20,
            hasAssignment=True,
        )

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.AMBER
        assert item.score == 20
        assert item.reasons == ["Only 0 check-ins per client in the last 14 days"]


class TestCompletenessSignal:
    """Tests for adherence derived from check-in completeness."""

    def test_missing_completeness_is_skipped(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(completenessRatio=None), default_settings, fixed_now)

        assert item.score == 0

    def test_at_green_minimum_does_not_fire(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(completenessRatio=6 / 7), default_settings, fixed_now)

        assert item.score == 0

    def test_amber_band_scales_weight_by_shortfall(self, make_facts, default_settings, fixed_now):
        """Adherence 5/7 is one sixth short of green: ceil(20 / 6) = 4."""
        item = score(make_facts(completenessRatio=5 / 7), default_settings, fixed_now)

        assert item.score == 4
        assert item.priority == Priority.GREEN
        assert item.reasons == ["Check-in completeness in amber band (5.0/7, target 6)"]
        assert item.suggestedActions == ["Encourage complete check-ins"]

    def test_zero_completeness_uses_full_weight(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(completenessRatio=0.0), default_settings, fixed_now)

        assert item.score == 20
        assert item.priority == Priority.AMBER
        assert item.reasons[0].startswith("Check-in completeness below minimum")


class TestLoadSignal:
    """Tests for coach and cohort load imbalance."""

    def test_overloaded_coach(self, make_facts, default_settings, fixed_now):
        facts = make_facts("coach-1", EntityType.COACH, loadCount=60)

        item = score(facts, default_settings, fixed_now)

        assert item.priority == Priority.AMBER
        assert item.reasons == ["Overloaded: 60 clients (recommended max: 50)"]
        assert item.suggestedActions == ["Reassign some clients to other coaches"]

    def test_underutilized_coach(self, make_facts, default_settings, fixed_now):
        facts = make_facts("coach-1", EntityType.COACH, loadCount=5)

        item = score(facts, default_settings, fixed_now)

        assert item.reasons == ["Underutilized: only 5 clients (recommended min: 10)"]

    def test_cohort_uses_member_wording(self, make_facts, default_settings, fixed_now):
        facts = make_facts("cohort-1", EntityType.COHORT, loadCount=4)

        item = score(facts, default_settings, fixed_now)

        assert item.reasons == ["Underutilized: only 4 members (recommended min: 10)"]

    def test_client_load_is_ignored(self, make_facts, default_settings, fixed_now):
        item = score(make_facts(loadCount=100), default_settings, fixed_now)

        assert item.score == 0

    def test_load_weight_alone_never_reaches_red(self, make_facts, fixed_now):
        settings = SystemSettings(weightLoadImbalance=80)
        facts = make_facts("coach-1", EntityType.COACH, loadCount=60)

        item = score(facts, settings, fixed_now)

        assert item.score == 49
        assert item.priority == Priority.AMBER


class TestCoverageSignal:
    """Tests for missing assignments."""

    @pytest.mark.parametrize("entity_type,reason", [
        (EntityType.CLIENT, "Not assigned to any cohort"),
        (EntityType.COACH, "No cohorts assigned"),
        (EntityType.COHORT, "No coach assigned"),
    ])
    def test_reason_per_entity_type(self, make_facts, default_settings, fixed_now, entity_type, reason):
        facts = make_facts(f"{entity_type.value}-1", entity_type, hasAssignment=False)

        item = score(facts, default_settings, fixed_now)

        assert item.reasons == [reason]
        assert item.priority == Priority.AMBER

    def test_coverage_weight_alone_never_reaches_red(self, make_facts, fixed_now):
        settings = SystemSettings(weightCoverage=500)

        item = score(make_facts(hasAssignment=False), settings, fixed_now)

        assert item.score == settings.attentionRedThreshold - 1
        assert item.priority == Priority.AMBER


# ============================================================
# Aggregate properties
# ============================================================

class TestScoreProperties:
    """Tests for ordering, tiers and monotonicity."""

    def test_reasons_follow_signal_order(self, make_facts, default_settings, fixed_now):
        facts = make_facts(
            idle_days=20, recentEntryCount=0, completenessRatio=0.0, hasAssignment=False,
        )

        item = score(facts, default_settings, fixed_now)

        assert item.score == 25 + 20 + 20 + 20
        assert item.priority == Priority.RED
        assert item.reasons == [
            "No activity in 20 days",
            "Only 0 check-ins in the last 14 days",
            "Check-in completeness below minimum (0.0/7, minimum 3)",
            "Not assigned to any cohort",
        ]

    @pytest.mark.parametrize("settings", [
        SystemSettings(),
        SystemSettings(weightInactivity=5, weightLowEngagement=40, attentionAmberThreshold=10),
        SystemSettings(weightCoverage=0, attentionRedThreshold=30),
    ])
    def test_more_signals_never_lower_score_or_tier(self, make_facts, fixed_now, settings):
        """Triggering a superset of signals never lowers score or tier."""
        flags = ["idle", "low_engagement", "incomplete", "unassigned"]

        def facts_for(active):
            return make_facts(
                idle_days=40 if "idle" in active else 1,
                recentEntryCount=0 if "low_engagement" in active else 10,
                completenessRatio=0.0 if "incomplete" in active else 1.0,
                hasAssignment="unassigned" not in active,
            )

        combos = [
            frozenset(f for f, on in zip(flags, bits) if on)
            for bits in itertools.product([False, True], repeat=len(flags))
        ]
        items = {combo: score(facts_for(combo), settings, fixed_now) for combo in combos}

        for larger, smaller in itertools.product(combos, combos):
            if smaller <= larger:
                assert items[larger].score >= items[smaller].score
                assert TIER_RANK[items[larger].priority] >= TIER_RANK[items[smaller].priority]

    def test_non_green_items_always_have_reasons(self, make_facts, default_settings, fixed_now):
        samples = [
            make_facts(idle_days=None),
            make_facts(idle_days=16),
            make_facts(recentEntryCount=2),
            make_facts(hasAssignment=False),
            make_facts("coach-9", EntityType.COACH, loadCount=70),
            make_facts("cohort-9", EntityType.COHORT, hasAssignment=False, loadCount=0),
        ]

        for facts in samples:
            item = score(facts, default_settings, fixed_now)
            if item.priority != Priority.GREEN:
                assert item.reasons

    def test_priority_thresholds_are_inclusive(self, default_settings):
        assert priority_for_score(50, default_settings) == Priority.RED
        assert priority_for_score(49, default_settings) == Priority.AMBER
        assert priority_for_score(20, default_settings) == Priority.AMBER
        assert priority_for_score(19, default_settings) == Priority.GREEN


# ============================================================
# Settings clamping
# ============================================================

class TestSanitizeSettings:
    """Tests for clamping contradictory settings."""

    def test_consistent_settings_returned_unchanged(self, default_settings):
        assert sanitize_settings(default_settings) is default_settings

    def test_red_threshold_raised_above_amber(self):
        result = sanitize_settings(SystemSettings(attentionAmberThreshold=60, attentionRedThreshold=50))

        assert result.attentionRedThreshold == 61
        assert result.attentionAmberThreshold == 60

    def test_adherence_bands_kept_apart(self):
        result = sanitize_settings(SystemSettings(adherenceAmberMinimum=6, adherenceGreenMinimum=6))

        assert result.adherenceAmberMinimum == 5

    def test_negative_values_clamped_to_zero(self):
        result = sanitize_settings(SystemSettings(weightInactivity=-5, lowEngagementEntries=-1))

        assert result.weightInactivity == 0
        assert result.lowEngagementEntries == 0

    def test_critical_window_not_shorter_than_normal(self):
        result = sanitize_settings(SystemSettings(criticalNoActivityDays=10, noActivityDays=14))

        assert result.criticalNoActivityDays == 14

    def test_min_clients_not_above_max(self):
        result = sanitize_settings(SystemSettings(minClientsPerCoach=60, maxClientsPerCoach=50))

        assert result.minClientsPerCoach == 50

    def test_adjustments_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="coachfit.services.attention"):
            sanitize_settings(SystemSettings(attentionAmberThreshold=0))

        assert "attentionAmberThreshold" in caplog.text

    def test_scoring_with_broken_settings_does_not_raise(self, make_facts, fixed_now):
        settings = SystemSettings(
            attentionAmberThreshold=0, attentionRedThreshold=-10, adherenceGreenMinimum=0,
        )

        item = score(make_facts(idle_days=40), settings, fixed_now)

        assert item.priority == Priority.RED
