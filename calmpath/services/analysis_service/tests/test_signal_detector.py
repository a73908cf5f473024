"""Tests for the priority-ordered signal detector.

Crisis phrases must be flagged even when a higher-priority category wins.
"""
import logging

import pytest

from calmpath.shared.models import Sentiment
from calmpath.shared.utils import configure_pii_salt
from calmpath.services.analysis_service.config import DEFAULT_LEXICON, Lexicon
from calmpath.services.analysis_service.signal_detector import (
    SignalCategory,
    SignalDetector,
    detect_signal,
    normalize_message,
)


@pytest.fixture(autouse=True)
def setup_pii_salt():
    """Configure PII salt before each test."""
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def detector():
    return SignalDetector(DEFAULT_LEXICON)


class TestCategoryOrder:
    """Tests for the fixed evaluation order."""

    def test_order(self, detector):
        assert detector.order == (
            SignalCategory.NEGATION,
            SignalCategory.CRISIS,
            SignalCategory.ANXIETY,
            SignalCategory.DEPRESSION,
            SignalCategory.POSITIVE,
            SignalCategory.NEUTRAL,
        )

    def test_negation_beats_anxiety(self, detector):
        match = detector.detect("I'm not anxious today")

        assert match.category == SignalCategory.NEGATION
        assert match.sentiment == Sentiment.POSITIVE
        assert match.emotions == ("calm", "okay")

    def test_anxiety_beats_depression(self, detector):
        match = detector.detect("I'm so anxious and sad")

        assert match.category == SignalCategory.ANXIETY
        assert match.emotions == ("anxiety",)

    def test_depression(self, detector):
        match = detector.detect("Feeling hopeless lately")

        assert match.category == SignalCategory.DEPRESSION
        assert match.sentiment == Sentiment.NEGATIVE

    def test_positive(self, detector):
        match = detector.detect("What a great afternoon")

        assert match.category == SignalCategory.POSITIVE
        assert match.emotions == ("positive",)

    def test_neutral_default(self, detector):
        match = detector.detect("The bus was late")

        assert match.category == SignalCategory.NEUTRAL
        assert match.matched_phrase is None
        assert match.crisis_matched is False


class TestCrisisFlag:
    """Tests for crisis detection independent of the winning category."""

    def test_crisis_category(self, detector):
        match = detector.detect("I want to kill myself")

        assert match.category == SignalCategory.CRISIS
        assert match.sentiment == Sentiment.CRISIS
        assert match.crisis_matched is True
        assert "kill myself" in match.crisis_phrases

    def test_crisis_flag_survives_negation_win(self, detector):
        match = detector.detect("I'm fine but I want to end it")

        assert match.category == SignalCategory.NEGATION
        assert match.crisis_matched is True
        assert match.crisis_phrases == ("end it",)

    def test_crisis_logs_critical(self, detector, caplog):
        with caplog.at_level(logging.CRITICAL):
            detector.detect("thinking about suicide")

        assert any(r.message == "CRISIS_LEXICON_MATCHED" for r in caplog.records)


class TestNormalization:
    """Tests for message normalization."""

    def test_lowercases_and_strips(self):
        assert normalize_message("  Hello THERE ") == "hello there"

    def test_folds_curly_apostrophe(self, detector):
        match = detector.detect("I’m okay")

        assert match.category == SignalCategory.NEGATION


class TestInjectedLexicon:
    """Tests for lexicons supplied at construction time."""

    def test_custom_lexicon(self):
        lexicon = Lexicon(
            crisis=frozenset({"Goodbye Forever"}),
            anxiety=frozenset({"jittery"}),
            depression=frozenset(),
            positive=frozenset(),
            negation=frozenset(),
        )

        match = detect_signal("goodbye forever everyone", lexicon)

        assert match.category == SignalCategory.CRISIS
        assert match.crisis_phrases == ("goodbye forever",)

    def test_empty_phrase_rejected(self):
        with pytest.raises(ValueError):
            Lexicon(
                crisis=frozenset({""}),
                anxiety=frozenset(),
                depression=frozenset(),
                positive=frozenset(),
                negation=frozenset(),
            )
