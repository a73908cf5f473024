"""Tests for crisis risk assessment and therapy approach selection.

A crisis lexicon match must always produce CRITICAL risk.
"""
import itertools

import pytest

from calmpath.shared.models import CrisisRiskLevel, Sentiment, TherapyApproach
from calmpath.services.analysis_service.risk import (
    assess_crisis_risk,
    reconcile_reported_risk,
    select_therapy_approach,
)


class TestAssessCrisisRisk:
    def test_crisis_match_is_critical_regardless_of_level(self):
        assert assess_crisis_risk(1, True) == CrisisRiskLevel.CRITICAL

    @pytest.mark.parametrize("level,expected", [
        (10, CrisisRiskLevel.HIGH),
        (8, CrisisRiskLevel.HIGH),
        (7, CrisisRiskLevel.MODERATE),
        (6, CrisisRiskLevel.MODERATE),
        (5, CrisisRiskLevel.LOW),
        (1, CrisisRiskLevel.LOW),
    ])
    def test_level_thresholds(self, level, expected):
        assert assess_crisis_risk(level, False) == expected

    def test_idempotent(self):
        for level, crisis in itertools.product(range(1, 11), (True, False)):
            assert assess_crisis_risk(level, crisis) == assess_crisis_risk(level, crisis)


class TestReconcileReportedRisk:
    """Tests for merging a model-reported tier with the assessor."""

    def test_never_below_assessor(self):
        result = reconcile_reported_risk(CrisisRiskLevel.LOW, 9, False, Sentiment.NEGATIVE)

        assert result == CrisisRiskLevel.HIGH

    def test_reported_higher_tier_kept(self):
        result = reconcile_reported_risk(CrisisRiskLevel.CRITICAL, 2, False, Sentiment.NEGATIVE)

        assert result == CrisisRiskLevel.CRITICAL

    def test_crisis_match_forces_critical(self):
        result = reconcile_reported_risk(CrisisRiskLevel.LOW, 2, True, Sentiment.NEUTRAL)

        assert result == CrisisRiskLevel.CRITICAL

    def test_crisis_sentiment_floors_at_high(self):
        result = reconcile_reported_risk(CrisisRiskLevel.LOW, 2, False, Sentiment.CRISIS)

        assert result == CrisisRiskLevel.HIGH


class TestSelectTherapyApproach:
    def test_distortions_win(self):
        approach = select_therapy_approach(
            ("Catastrophizing",), CrisisRiskLevel.CRITICAL, ("anxiety",), ("work",)
        )

        assert approach == TherapyApproach.CBT

    def test_high_risk_is_trauma_informed(self):
        approach = select_therapy_approach((), CrisisRiskLevel.HIGH, ("sadness",), ())

        assert approach == TherapyApproach.TRAUMA_INFORMED

    def test_anxiety_with_trigger_is_mindfulness(self):
        approach = select_therapy_approach((), CrisisRiskLevel.MODERATE, ("anxiety",), ("work",))

        assert approach == TherapyApproach.MINDFULNESS

    def test_anxiety_without_trigger_is_supportive(self):
        approach = select_therapy_approach((), CrisisRiskLevel.MODERATE, ("anxiety",), ())

        assert approach == TherapyApproach.SUPPORTIVE

    def test_dbt_never_selected(self):
        for distortions, risk, emotions, triggers in itertools.product(
            ((), ("Should statements",)),
            list(CrisisRiskLevel),
            ((), ("anxiety",), ("sadness",)),
            ((), ("work",)),
        ):
            approach = select_therapy_approach(distortions, risk, emotions, triggers)
            assert approach != TherapyApproach.DBT
