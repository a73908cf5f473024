"""Response synthesizer for the local tier.

Replies come from hand-authored templates chosen by a fixed fallthrough
cascade. Templates are typed:

- FixedResponse: exactly one text, never randomized.
- CrisisResponse: a FixedResponse reserved for the critical-risk branch.
- RandomizedResponse: a uniform pick over a fixed candidate tuple, made
  through an injectable UniformChoice so tests can pin the selection.

The crisis branch can only ever return CRISIS_RESPONSE.
"""
import logging
import random
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from calmpath.shared.models import CrisisRiskLevel, Sentiment
from .signal_detector import normalize_message

logger = logging.getLogger(__name__)


class UniformChoice:
    """Uniform choice over a fixed candidate list."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def choose(self, candidates: Sequence[str]) -> str:
        return self._rng.choice(list(candidates))


@dataclass(frozen=True)
class FixedResponse:
    text: str

    def render(self, message: str, chooser: UniformChoice) -> str:
        return self.text.format(message=message)


@dataclass(frozen=True)
class CrisisResponse(FixedResponse):
    """Safety-fixed crisis resource text. Ignores the chooser entirely."""

    def render(self, message: str, chooser: UniformChoice) -> str:
        return self.text


@dataclass(frozen=True)
class RandomizedResponse:
    candidates: Tuple[str, ...]

    def __post_init__(self):
        if len(self.candidates) < 2:
            raise ValueError("RandomizedResponse needs at least two candidates")

    def render(self, message: str, chooser: UniformChoice) -> str:
        return chooser.choose(self.candidates).format(message=message)


ResponseTemplate = Union[FixedResponse, RandomizedResponse]


CRISIS_RESPONSE = CrisisResponse(
    "I'm deeply concerned about what you're sharing with me right now. Your life has "
    "immense value, and I want you to know that you don't have to face this alone. "
    "Please reach out to a crisis helpline (988 in the US) or emergency services "
    "immediately. There are people trained to help you through this exact situation."
)

CLARIFYING_RESPONSES = RandomizedResponse((
    "I'm here and listening. Would you like to share more about how you're feeling right now?",
    "I notice you might be hesitant to share. That's completely okay. Take your time - "
    "I'm here when you're ready.",
    "Sometimes it's hard to find the words. Would it help if I asked you some questions "
    "to get started?",
    "I'm with you. You don't have to say much right now - just know that I'm here to "
    "support you.",
))

AFFIRMING_RESPONSES = RandomizedResponse((
    "That's wonderful to hear! I'm so glad you're feeling okay right now. It's great that "
    "you're checking in and being mindful of your emotional state. What's been helping "
    "you feel this way?",
    "I'm really happy to hear that you're not feeling anxious at the moment. That's a "
    "positive sign! It's good that you're aware of how you're feeling. Is there anything "
    "specific that's been contributing to this sense of being okay?",
    "It's fantastic that you're feeling alright! Sometimes it's just as important to "
    "acknowledge when we're doing well as when we're struggling. What does 'okay' feel "
    "like for you right now?",
    "That's great news! I appreciate you sharing that you're feeling okay. It shows good "
    "self-awareness to check in with yourself like this. How has your day been treating you?",
))

GREETING_RESPONSE = FixedResponse(
    "Hello! I'm so glad you're here. It takes courage to reach out, and I want you to know "
    "that this is a safe space where you can share whatever is on your mind. How are you "
    "feeling today?"
)

CHECK_IN_RESPONSES = RandomizedResponse((
    "Thank you for sharing that with me. I'm here to listen and support you however you "
    "need. Is there anything particular on your mind today?",
    "I appreciate you checking in. It's good to touch base with how you're feeling. What "
    "brought you here today?",
    "Thanks for letting me know how you're doing. I'm here if you want to talk about "
    "anything - big or small. What's on your heart today?",
    "I'm glad you reached out. Sometimes it's nice just to have someone to talk to. How "
    "can I best support you right now?",
))

ANXIETY_VALIDATION = FixedResponse(
    "I hear that you're feeling anxious right now, and I want you to know that those "
    "feelings are completely valid. Anxiety can feel overwhelming, but you've taken an "
    "important step by reaching out. What's been weighing on your mind most today?"
)

SADNESS_VALIDATION = FixedResponse(
    "Thank you for trusting me with how you're feeling. Sadness can feel so heavy, and "
    "it's brave of you to acknowledge it. You don't have to carry this alone - I'm here "
    "to support you through this. What's been contributing to these feelings?"
)

TRIGGER_RESPONSES = (
    ("work", FixedResponse(
        "Work stress can feel so consuming, especially when it starts affecting other "
        "areas of your life. It sounds like your job is creating a lot of pressure for you "
        "right now. Have you been able to take any breaks for yourself lately?"
    )),
    ("social", FixedResponse(
        "Social situations can feel incredibly challenging, and what you're experiencing "
        "is more common than you might think. Many people struggle with similar feelings "
        "around others. You're being brave by reaching out and talking about this."
    )),
    ("health", FixedResponse(
        "Health concerns can create such intense worry, especially when our minds start "
        "imagining worst-case scenarios. It's completely understandable that you're "
        "feeling anxious about this. Have you been able to speak with a healthcare "
        "provider about your concerns?"
    )),
)

HIGH_SEVERITY_VALIDATION = FixedResponse(
    "I can feel the intensity of what you're going through right now, and I want you to "
    "know that your feelings are completely valid. When anxiety feels this overwhelming, "
    "it can seem like it will never end, but you've gotten through difficult moments "
    "before, and you can get through this one too."
)

ECHO_RESPONSES = RandomizedResponse((
    'Thank you for sharing "{message}" with me. I can sense that there\'s more behind '
    "those words, and I'm here to listen and support you through whatever you're "
    "experiencing.",
    'I hear you saying "{message}" and I want you to know that whatever brought you here '
    "today, you don't have to face it alone. I'm here to help you work through this step "
    "by step.",
    '"{message}" - I appreciate you sharing that with me. I\'m here to listen and '
    "understand what you're going through. How are you feeling right now?",
))

POSITIVE_LITERALS: Tuple[str, ...] = (
    "not anxious", "i am okay", "i'm okay", "feeling better", "feeling good", "not worried",
)

_GREETING_PATTERN = re.compile(r"\b(hello|hi|hey)\b")

SHORT_MESSAGE_MAX_CHARS = 3


@dataclass(frozen=True)
class ResponseContext:
    """The analysis fields the cascade branches on."""
    crisis_risk_level: CrisisRiskLevel
    sentiment: Sentiment
    anxiety_level: int
    triggers: Tuple[str, ...] = ()


def select_template(message: str, context: ResponseContext) -> ResponseTemplate:
    """Walk the cascade and return the first matching template."""
    text = normalize_message(message)

    if len(text) <= SHORT_MESSAGE_MAX_CHARS:
        return CLARIFYING_RESPONSES

    if context.crisis_risk_level is CrisisRiskLevel.CRITICAL:
        return CRISIS_RESPONSE

    if context.sentiment is Sentiment.POSITIVE or any(p in text for p in POSITIVE_LITERALS):
        return AFFIRMING_RESPONSES

    is_greeting = bool(_GREETING_PATTERN.search(text)) or text == "here"
    if is_greeting and context.sentiment is not Sentiment.POSITIVE and context.anxiety_level > 2:
        return GREETING_RESPONSE

    if context.sentiment is Sentiment.NEUTRAL and context.anxiety_level <= 3:
        return CHECK_IN_RESPONSES

    if "anxious" in text or "worried" in text:
        return ANXIETY_VALIDATION
    if "sad" in text or "depressed" in text:
        return SADNESS_VALIDATION

    for trigger, template in TRIGGER_RESPONSES:
        if trigger in context.triggers:
            return template

    if context.anxiety_level >= 7:
        return HIGH_SEVERITY_VALIDATION

    return ECHO_RESPONSES


class ResponseSynthesizer:
    """Renders the cascade's template into reply text."""

    def __init__(self, chooser: Optional[UniformChoice] = None):
        self.chooser = chooser or UniformChoice()

    def synthesize(self, message: str, context: ResponseContext) -> str:
        template = select_template(message, context)
        return template.render(message.strip(), self.chooser)
