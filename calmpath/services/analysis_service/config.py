"""Lexicons and rule tables for the local (offline) analysis tier.

Everything here is read-only configuration. Analyzers receive a Lexicon
at construction time; DEFAULT_LEXICON is only the default argument.
Matching is literal substring search on the lowercased message.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple


@dataclass(frozen=True)
class Lexicon:
    """Literal phrase sets per signal category."""
    crisis: FrozenSet[str]
    anxiety: FrozenSet[str]
    depression: FrozenSet[str]
    positive: FrozenSet[str]
    negation: FrozenSet[str]
    # Used by the history-window escalation check only
    intensity: FrozenSet[str] = frozenset()

    def __post_init__(self):
        for name in ("crisis", "anxiety", "depression", "positive", "negation", "intensity"):
            phrases = frozenset(p.lower() for p in getattr(self, name))
            if "" in phrases:
                raise ValueError(f"Lexicon category '{name}' contains an empty phrase")
            object.__setattr__(self, name, phrases)


DEFAULT_LEXICON = Lexicon(
    crisis=frozenset({
        "hurt myself",
        "end it",
        "suicide",
        "kill myself",
        "die",
        "not worth living",
        "want to commit suicide",
    }),
    anxiety=frozenset({
        "anxious", "worried", "scared", "panic", "stress", "nervous", "fear",
    }),
    depression=frozenset({
        "sad", "depressed", "hopeless", "tired", "empty", "worthless",
    }),
    positive=frozenset({
        "okay", "good", "better", "fine", "great", "happy", "calm", "peaceful",
        "not anxious", "not worried",
    }),
    # Explicit "I'm not anxious" / "I'm okay" statements
    negation=frozenset({
        "not anxious", "not worried", "not scared", "not nervous",
        "i am okay", "i'm okay", "i am fine", "i'm fine",
        "feeling better", "feeling good", "feeling okay",
        "no anxiety", "not feeling anxious",
    }),
    intensity=frozenset({
        "panic", "overwhelmed", "can't", "worse", "terrible",
    }),
)


# Local trigger taxonomy (4 categories). The regex extraction fallback
# keeps its own 5-category table.
LOCAL_TRIGGER_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "work": ("work", "job"),
    "social": ("social", "people", "friends"),
    "health": ("health", "sick", "pain"),
    "financial": ("money", "financial"),
})

DISTORTION_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "All-or-nothing thinking": ("always", "never", "everything"),
    "Should statements": ("should", "must", "have to"),
    "Catastrophizing": ("worst", "terrible", "awful"),
})

PHYSICAL_SYMPTOM_KEYWORDS: Tuple[str, ...] = ("heart", "breathing")


@dataclass(frozen=True)
class SeverityRule:
    """Exclusive severity assignment for one signal category.

    Level/score are base + bump, capped at the category ceiling.
    """
    level_bump: int
    level_ceiling: int
    gad7_bump: int
    gad7_ceiling: int


@dataclass(frozen=True)
class EscalationThresholds:
    history_window: int = 3
    history_min_hits: int = 2
    # escalation_from_level fires strictly above this
    level_threshold: int = 7


@dataclass(frozen=True)
class RiskThresholds:
    """Anxiety-level floors for the non-crisis risk tiers."""
    high_min_level: int = 8
    moderate_min_level: int = 6
