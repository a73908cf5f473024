"""Tests for trigger, distortion and advisory-list extraction."""
from calmpath.shared.models import CrisisRiskLevel
from calmpath.services.analysis_service.extractors import (
    BASE_INTERVENTIONS,
    CRISIS_INTERVENTIONS,
    beck_anxiety_categories,
    dsm5_indicators,
    extract_distortions,
    extract_triggers,
    recommend_interventions,
)


class TestTriggers:
    """Trigger tagging is additive across categories."""

    def test_multiple_triggers(self):
        assert extract_triggers("my job and my friends") == ("work", "social")

    def test_financial(self):
        assert extract_triggers("worried about money") == ("financial",)

    def test_no_triggers(self):
        assert extract_triggers("it rained today") == ()


class TestDistortions:
    def test_multiple_distortions(self):
        distortions = extract_distortions("i always mess up and i should try harder")

        assert distortions == ("All-or-nothing thinking", "Should statements")

    def test_catastrophizing(self):
        assert extract_distortions("this is the worst") == ("Catastrophizing",)


class TestAdvisoryLists:
    """Tests for interventions, Beck categories and DSM-5 indicators."""

    def test_crisis_interventions_come_first(self):
        interventions = recommend_interventions(CrisisRiskLevel.CRITICAL)

        assert interventions[:2] == CRISIS_INTERVENTIONS
        assert interventions[2:] == BASE_INTERVENTIONS

    def test_non_critical_interventions(self):
        assert recommend_interventions(CrisisRiskLevel.HIGH) == BASE_INTERVENTIONS

    def test_beck_categories(self):
        categories = beck_anxiety_categories(("anxiety",), "my heart is racing")

        assert categories == ("Subjective anxiety", "Physical symptoms")

    def test_beck_categories_empty(self):
        assert beck_anxiety_categories(("sadness",), "i feel low") == ()

    def test_dsm5_indicators(self):
        indicators = dsm5_indicators(6, ("work", "social"))

        assert indicators == (
            "Excessive anxiety present",
            "Multiple anxiety triggers identified",
        )

    def test_dsm5_indicators_below_threshold(self):
        assert dsm5_indicators(5, ("work",)) == ()
