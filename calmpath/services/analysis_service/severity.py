"""Severity scoring strategies.

Two distinct algorithms, kept separate on purpose:

- score_exclusive(): local tier. One assignment per winning signal
  category, no accumulation.
- score_additive(): regex extraction fallback of the remote tier. Every
  matched phrase adds to a running total (+3 high / +2 medium / +1 low),
  positive phrases subtract, and the total is clamped to 1-10.

Both return values already inside the Analysis ranges.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from calmpath.shared.models import clamp_anxiety_level, clamp_gad7
from .config import SeverityRule
from .signal_detector import SignalCategory, find_phrases

BASE_ANXIETY_LEVEL = 1
BASE_GAD7 = 0

# GAD-7 points per anxiety level step when only a level is known
GAD7_PER_LEVEL = 2.1

EXCLUSIVE_RULES: Mapping[SignalCategory, SeverityRule] = MappingProxyType({
    SignalCategory.CRISIS: SeverityRule(level_bump=8, level_ceiling=9, gad7_bump=18, gad7_ceiling=18),
    SignalCategory.ANXIETY: SeverityRule(level_bump=5, level_ceiling=8, gad7_bump=10, gad7_ceiling=15),
    SignalCategory.DEPRESSION: SeverityRule(level_bump=3, level_ceiling=7, gad7_bump=6, gad7_ceiling=12),
    SignalCategory.POSITIVE: SeverityRule(level_bump=0, level_ceiling=1, gad7_bump=0, gad7_ceiling=0),
    SignalCategory.NEGATION: SeverityRule(level_bump=0, level_ceiling=1, gad7_bump=0, gad7_ceiling=0),
    SignalCategory.NEUTRAL: SeverityRule(level_bump=1, level_ceiling=2, gad7_bump=2, gad7_ceiling=2),
})


@dataclass(frozen=True)
class SeverityScore:
    anxiety_level: int
    gad7_score: int


def score_exclusive(category: SignalCategory) -> SeverityScore:
    """Severity for the local tier, decided by the winning category alone.

    crisis -> (9, 18), anxiety -> (6, 10), depression -> (4, 6),
    positive/negation -> (1, 0), neutral -> (2, 2).
    """
    rule = EXCLUSIVE_RULES[category]
    level = min(BASE_ANXIETY_LEVEL + rule.level_bump, rule.level_ceiling)
    gad7 = min(BASE_GAD7 + rule.gad7_bump, rule.gad7_ceiling)
    return SeverityScore(anxiety_level=clamp_anxiety_level(level), gad7_score=clamp_gad7(gad7))


HIGH_SEVERITY_PHRASES: FrozenSet[str] = frozenset({
    "panic", "terrified", "overwhelmed", "can't breathe", "heart racing",
    "dying", "losing control", "going crazy", "disaster", "catastrophe",
})

MEDIUM_SEVERITY_PHRASES: FrozenSet[str] = frozenset({
    "worried", "anxious", "stressed", "nervous", "scared", "afraid",
    "concerned", "uneasy", "tense", "restless", "agitated",
})

LOW_SEVERITY_PHRASES: FrozenSet[str] = frozenset({
    "uncertain", "unsure", "bothered", "troubled", "uncomfortable",
    "hesitant", "cautious", "apprehensive",
})

RELIEF_PHRASES: FrozenSet[str] = frozenset({
    "good", "better", "happy", "calm", "relaxed", "peaceful",
    "confident", "grateful", "hopeful", "improving",
})

TIER_WEIGHTS: Tuple[Tuple[FrozenSet[str], int], ...] = (
    (HIGH_SEVERITY_PHRASES, 3),
    (MEDIUM_SEVERITY_PHRASES, 2),
    (LOW_SEVERITY_PHRASES, 1),
)


@dataclass(frozen=True)
class AdditiveScore:
    """Result of the additive strategy."""
    anxiety_level: int
    raw_score: int
    matched_phrases: Tuple[str, ...]
    relief_phrases: Tuple[str, ...]


def score_additive(text: str) -> AdditiveScore:
    """Accumulate severity over all tiers of phrases found in text.

    Args:
        text: Lowercased message text
    """
    raw = 0
    matched = []
    for phrases, weight in TIER_WEIGHTS:
        found = find_phrases(text, phrases)
        raw += weight * len(found)
        matched.extend(found)

    relief = find_phrases(text, RELIEF_PHRASES)
    for _ in relief:
        raw = max(0, raw - 1)

    return AdditiveScore(
        anxiety_level=clamp_anxiety_level(BASE_ANXIETY_LEVEL + raw),
        raw_score=raw,
        matched_phrases=tuple(matched),
        relief_phrases=relief,
    )


def estimate_gad7(anxiety_level: int) -> int:
    """Approximate a GAD-7 score from a 1-10 anxiety level."""
    return clamp_gad7(anxiety_level * GAD7_PER_LEVEL)
