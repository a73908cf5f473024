"""Analysis contract shared by every classification tier.

One Analysis is produced per user message, whichever tier computed it.
The UI reads it for display, storage appends it to the user's history.
Instances are frozen: once returned they are never edited in place.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

ANXIETY_LEVEL_MIN = 1
ANXIETY_LEVEL_MAX = 10
GAD7_MIN = 0
GAD7_MAX = 21


class TherapyApproach(Enum):
    """Recommended intervention modality (advisory only)."""
    CBT = "CBT"
    DBT = "DBT"
    MINDFULNESS = "Mindfulness"
    TRAUMA_INFORMED = "Trauma-Informed"
    SUPPORTIVE = "Supportive"


class CrisisRiskLevel(Enum):
    """Coarse triage tier gating response urgency."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = (
    CrisisRiskLevel.LOW,
    CrisisRiskLevel.MODERATE,
    CrisisRiskLevel.HIGH,
    CrisisRiskLevel.CRITICAL,
)


class Sentiment(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    CRISIS = "crisis"


def clamp_anxiety_level(value: float) -> int:
    """Clamp a raw score onto the 1-10 anxiety scale.

    Raises:
        ValueError: If value is NaN or infinite
    """
    _require_finite(value)
    return int(min(ANXIETY_LEVEL_MAX, max(ANXIETY_LEVEL_MIN, round(value))))


def clamp_gad7(value: float) -> int:
    """Clamp a raw score onto the 0-21 GAD-7 scale."""
    _require_finite(value)
    return int(min(GAD7_MAX, max(GAD7_MIN, round(value))))


@dataclass(frozen=True)
class ClassificationInput:
    """One submitted user message plus its recent context.

    History is ordered oldest to newest and never includes the message itself.
    """
    message: str
    history: Tuple[str, ...] = ()
    user_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.message, str):
            raise ValueError("message must be a string")
        object.__setattr__(self, "history", tuple(str(h) for h in self.history))


@dataclass(frozen=True)
class Analysis:
    """Structured risk/severity assessment plus the therapeutic reply.

    Immutable - analyses are append-only history once persisted.
    """
    anxiety_level: int
    gad7_score: int
    therapy_approach: TherapyApproach
    crisis_risk_level: CrisisRiskLevel
    sentiment: Sentiment
    personalized_response: str
    escalation_detected: bool = False
    triggers: Tuple[str, ...] = ()
    emotions: Tuple[str, ...] = ()
    cognitive_distortions: Tuple[str, ...] = ()
    recommended_interventions: Tuple[str, ...] = ()
    beck_anxiety_categories: Tuple[str, ...] = ()
    dsm5_indicators: Tuple[str, ...] = ()

    def __post_init__(self):
        if not ANXIETY_LEVEL_MIN <= self.anxiety_level <= ANXIETY_LEVEL_MAX:
            raise ValueError(f"Anxiety level must be 1-10, got {self.anxiety_level}")
        if not GAD7_MIN <= self.gad7_score <= GAD7_MAX:
            raise ValueError(f"GAD-7 score must be 0-21, got {self.gad7_score}")
        if self.sentiment is Sentiment.CRISIS and self.crisis_risk_level not in (
            CrisisRiskLevel.HIGH, CrisisRiskLevel.CRITICAL
        ):
            raise ValueError(
                f"Crisis sentiment requires high or critical risk, got {self.crisis_risk_level.value}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire form consumed by the UI."""
        return {
            "anxietyLevel": self.anxiety_level,
            "gad7Score": self.gad7_score,
            "beckAnxietyCategories": list(self.beck_anxiety_categories),
            "dsm5Indicators": list(self.dsm5_indicators),
            "triggers": list(self.triggers),
            "emotions": list(self.emotions),
            "cognitiveDistortions": list(self.cognitive_distortions),
            "recommendedInterventions": list(self.recommended_interventions),
            "therapyApproach": self.therapy_approach.value,
            "crisisRiskLevel": self.crisis_risk_level.value,
            "sentiment": self.sentiment.value,
            "escalationDetected": self.escalation_detected,
            "personalizedResponse": self.personalized_response,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Analysis":
        """Build an Analysis from its wire form.

        Scores are coerced to int and clamped; enum values are validated.

        Raises:
            ValueError: If a required field is missing or has the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Analysis payload must be an object, got {type(data).__name__}")
        try:
            return cls(
                anxiety_level=clamp_anxiety_level(_as_number(data["anxietyLevel"])),
                gad7_score=clamp_gad7(_as_number(data["gad7Score"])),
                therapy_approach=TherapyApproach(data["therapyApproach"]),
                crisis_risk_level=CrisisRiskLevel(data["crisisRiskLevel"]),
                sentiment=Sentiment(data["sentiment"]),
                personalized_response=str(data.get("personalizedResponse") or ""),
                escalation_detected=_as_bool(data["escalationDetected"]),
                triggers=_as_tags(data["triggers"]),
                emotions=_as_tags(data.get("emotions", [])),
                cognitive_distortions=_as_tags(data["cognitiveDistortions"]),
                recommended_interventions=_as_tags(data["recommendedInterventions"]),
                beck_anxiety_categories=_as_tags(data["beckAnxietyCategories"]),
                dsm5_indicators=_as_tags(data["dsm5Indicators"]),
            )
        except KeyError as e:
            raise ValueError(f"Missing required field: {e.args[0]}") from e


@dataclass(frozen=True)
class AnalysisRecord:
    """One persisted row: the analysis plus the message it was computed from."""
    record_id: str
    user_id: str
    message: str
    analysis: Analysis
    created_at: datetime = field(default_factory=datetime.utcnow)


def _require_finite(value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"Expected a finite number, got {value!r}")


def _as_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"Expected a finite number, got {value!r}") from e
    _require_finite(number)
    return number


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"Expected a boolean, got {value!r}")


def _as_tags(value: Iterable[Any]) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list of strings, got {value!r}")
    tags = []
    for item in value:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def describe_anxiety_level(level: int) -> str:
    if level <= 2:
        return "Very Low"
    if level <= 4:
        return "Low"
    if level <= 6:
        return "Moderate"
    if level <= 8:
        return "High"
    return "Very High"


def describe_gad7_score(score: int) -> str:
    """Map a GAD-7 score onto the published severity bands."""
    if score <= 4:
        return "Minimal Anxiety"
    if score <= 9:
        return "Mild Anxiety"
    if score <= 14:
        return "Moderate Anxiety"
    return "Severe Anxiety"


THERAPY_APPROACH_DESCRIPTIONS: Dict[TherapyApproach, str] = {
    TherapyApproach.CBT: "Cognitive Behavioral Therapy - Focus on thought patterns",
    TherapyApproach.DBT: "Dialectical Behavior Therapy - Emotion regulation skills",
    TherapyApproach.MINDFULNESS: "Mindfulness-based approach - Present moment awareness",
    TherapyApproach.TRAUMA_INFORMED: "Trauma-informed care - Safety and healing focus",
    TherapyApproach.SUPPORTIVE: "Supportive therapy - Validation and encouragement",
}


def describe_therapy_approach(approach: TherapyApproach) -> str:
    return THERAPY_APPROACH_DESCRIPTIONS[approach]
