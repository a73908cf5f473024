"""Escalation detection.

Two definitions exist and are deliberately not merged:

- escalation_from_history(): trend over the trailing conversation turns.
  The current message is not part of the check. The local tier uses this.
- escalation_from_level(): the current message's anxiety level alone.
  The regex extraction fallback of the remote tier uses this.
"""
from typing import Sequence

from .config import DEFAULT_LEXICON, EscalationThresholds, Lexicon
from .signal_detector import normalize_message

DEFAULT_ESCALATION_THRESHOLDS = EscalationThresholds()


def escalation_from_history(
    history: Sequence[str],
    lexicon: Lexicon = DEFAULT_LEXICON,
    thresholds: EscalationThresholds = DEFAULT_ESCALATION_THRESHOLDS,
) -> bool:
    """True iff enough of the trailing history entries read as intense.

    Args:
        history: Prior user utterances, oldest to newest
    """
    window = list(history)[-thresholds.history_window:] if thresholds.history_window > 0 else []
    hits = sum(
        1 for entry in window
        if any(phrase in normalize_message(entry) for phrase in lexicon.intensity)
    )
    return hits >= thresholds.history_min_hits


def escalation_from_level(
    anxiety_level: int,
    thresholds: EscalationThresholds = DEFAULT_ESCALATION_THRESHOLDS,
) -> bool:
    return anxiety_level > thresholds.level_threshold
