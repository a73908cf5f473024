"""Tests for the Analysis contract."""
import pytest

from calmpath.shared.models import (
    Analysis,
    ClassificationInput,
    CrisisRiskLevel,
    Sentiment,
    TherapyApproach,
    clamp_anxiety_level,
    clamp_gad7,
    describe_anxiety_level,
    describe_gad7_score,
    describe_therapy_approach,
)


def wire(**overrides):
    data = {
        "anxietyLevel": 5,
        "gad7Score": 9,
        "beckAnxietyCategories": ["Cognitive symptoms"],
        "dsm5Indicators": [],
        "triggers": ["work", "work", " social "],
        "emotions": ["anxiety"],
        "cognitiveDistortions": [],
        "recommendedInterventions": ["Box breathing"],
        "therapyApproach": "CBT",
        "crisisRiskLevel": "moderate",
        "sentiment": "negative",
        "escalationDetected": False,
        "personalizedResponse": "I hear you.",
    }
    data.update(overrides)
    return data


class TestCrisisRiskLevel:
    def test_rank_order(self):
        ranks = [level.rank for level in (
            CrisisRiskLevel.LOW,
            CrisisRiskLevel.MODERATE,
            CrisisRiskLevel.HIGH,
            CrisisRiskLevel.CRITICAL,
        )]

        assert ranks == [0, 1, 2, 3]


class TestClamping:
    @pytest.mark.parametrize("raw,expected", [(-3, 1), (0, 1), (5.4, 5), (10, 10), (42, 10)])
    def test_anxiety_level(self, raw, expected):
        assert clamp_anxiety_level(raw) == expected

    @pytest.mark.parametrize("raw,expected", [(-1, 0), (7, 7), (30, 21)])
    def test_gad7(self, raw, expected):
        assert clamp_gad7(raw) == expected

    @pytest.mark.parametrize("clamp", [clamp_anxiety_level, clamp_gad7])
    def test_infinity_rejected(self, clamp):
        with pytest.raises(ValueError):
            clamp(float("inf"))


class TestAnalysisValidation:
    def test_anxiety_level_out_of_range(self):
        with pytest.raises(ValueError):
            Analysis(
                anxiety_level=0,
                gad7_score=0,
                therapy_approach=TherapyApproach.SUPPORTIVE,
                crisis_risk_level=CrisisRiskLevel.LOW,
                sentiment=Sentiment.NEUTRAL,
                personalized_response="",
            )

    def test_crisis_sentiment_needs_high_risk(self):
        with pytest.raises(ValueError):
            Analysis(
                anxiety_level=5,
                gad7_score=10,
                therapy_approach=TherapyApproach.SUPPORTIVE,
                crisis_risk_level=CrisisRiskLevel.MODERATE,
                sentiment=Sentiment.CRISIS,
                personalized_response="",
            )

    def test_input_history_becomes_tuple(self):
        request = ClassificationInput(message="hi", history=["a", "b"])

        assert request.history == ("a", "b")
        assert request.user_id is None


class TestWireForm:
    def test_from_dict(self):
        analysis = Analysis.from_dict(wire(anxietyLevel="7", gad7Score=25.0))

        assert analysis.anxiety_level == 7
        assert analysis.gad7_score == 21
        assert analysis.therapy_approach == TherapyApproach.CBT
        assert analysis.triggers == ("work", "social")

    def test_to_dict_camel_case(self):
        data = Analysis.from_dict(wire()).to_dict()

        assert data["crisisRiskLevel"] == "moderate"
        assert data["therapyApproach"] == "CBT"
        assert data["recommendedInterventions"] == ["Box breathing"]
        assert set(data) == set(wire())

    def test_emotions_optional(self):
        data = wire()
        del data["emotions"]

        assert Analysis.from_dict(data).emotions == ()

    def test_missing_field(self):
        data = wire()
        del data["sentiment"]

        with pytest.raises(ValueError, match="sentiment"):
            Analysis.from_dict(data)

    @pytest.mark.parametrize("overrides", [
        {"therapyApproach": "Hypnosis"},
        {"crisisRiskLevel": "severe"},
        {"anxietyLevel": True},
        {"escalationDetected": "maybe"},
        {"triggers": "work"},
    ])
    def test_bad_values(self, overrides):
        with pytest.raises(ValueError):
            Analysis.from_dict(wire(**overrides))

    @pytest.mark.parametrize("anxiety,gad7,expected", [
        (1e6, 1e6, (10, 21)),
        (-50, -50, (1, 0)),
        ("9.6", "20.4", (10, 20)),
    ])
    def test_scores_bounded(self, anxiety, gad7, expected):
        analysis = Analysis.from_dict(wire(anxietyLevel=anxiety, gad7Score=gad7))

        assert (analysis.anxiety_level, analysis.gad7_score) == expected

    @pytest.mark.parametrize("field", ["anxietyLevel", "gad7Score"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "Infinity", 10 ** 400])
    def test_non_finite_scores_rejected(self, field, value):
        with pytest.raises(ValueError):
            Analysis.from_dict(wire(**{field: value}))

    def test_string_boolean(self):
        assert Analysis.from_dict(wire(escalationDetected="TRUE")).escalation_detected is True


class TestDescriptions:
    def test_anxiety_bands(self):
        assert describe_anxiety_level(2) == "Very Low"
        assert describe_anxiety_level(6) == "Moderate"
        assert describe_anxiety_level(9) == "Very High"

    def test_gad7_bands(self):
        assert describe_gad7_score(4) == "Minimal Anxiety"
        assert describe_gad7_score(10) == "Moderate Anxiety"
        assert describe_gad7_score(15) == "Severe Anxiety"

    def test_therapy_approach(self):
        assert describe_therapy_approach(TherapyApproach.DBT).startswith("Dialectical")
