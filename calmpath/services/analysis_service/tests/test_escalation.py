"""Tests for the two escalation definitions."""
from calmpath.services.analysis_service.config import EscalationThresholds
from calmpath.services.analysis_service.escalation import (
    escalation_from_history,
    escalation_from_level,
)


class TestHistoryEscalation:
    """Trend over the trailing history window; current message excluded."""

    def test_two_intense_entries_in_window(self):
        history = ["I'm overwhelmed", "it keeps getting worse", "hello"]

        assert escalation_from_history(history) is True

    def test_single_intense_entry(self):
        history = ["I'm overwhelmed", "fine", "fine"]

        assert escalation_from_history(history) is False

    def test_only_trailing_window_counts(self):
        history = ["panic", "terrible night", "fine", "fine", "fine"]

        assert escalation_from_history(history) is False

    def test_empty_history(self):
        assert escalation_from_history([]) is False

    def test_custom_thresholds(self):
        thresholds = EscalationThresholds(history_window=5, history_min_hits=2)
        history = ["panic", "terrible night", "fine", "fine", "fine"]

        assert escalation_from_history(history, thresholds=thresholds) is True


class TestLevelEscalation:
    def test_above_threshold(self):
        assert escalation_from_level(8) is True

    def test_at_threshold(self):
        assert escalation_from_level(7) is False
