"""Deterministic reply used when a parsed model reply lacks a usable response.

Selection runs its own priority cascade, separate from the local tier's
template cascade, and never randomizes:

    critical risk -> anxiety level >= 7 -> work/social/health trigger
        -> positive sentiment -> distortion type -> supportive default
"""
from typing import Sequence

from calmpath.shared.models import Analysis, CrisisRiskLevel, Sentiment
from calmpath.services.analysis_service.responses import CRISIS_RESPONSE

HIGH_ANXIETY_LEVEL = 7

HIGH_ANXIETY_REPLY = (
    "It sounds like you're carrying a lot of anxiety right now, and I want you to know "
    "that what you're feeling is real and valid. Let's slow things down together. Try "
    "taking a slow breath in for four counts, holding for four, and breathing out for "
    "six. I'm right here with you."
)

TRIGGER_REPLIES = (
    ("work", (
        "Work pressure can build up until it feels like it's everywhere. It makes sense "
        "that you're feeling stretched thin. What part of work feels heaviest for you "
        "right now?"
    )),
    ("social", (
        "Being around other people can bring up a lot of difficult feelings, and you're "
        "not alone in that. It takes strength to talk about it. What happens for you in "
        "those social moments?"
    )),
    ("health", (
        "Worrying about your health can be so frightening, and it's natural for your mind "
        "to jump ahead. You're doing the right thing by talking about it. Would it help to "
        "think through what you know so far?"
    )),
)

POSITIVE_REPLY = (
    "I'm really glad to hear that things feel a bit lighter right now. Noticing the good "
    "moments matters just as much as working through the hard ones. What do you think "
    "has been helping?"
)

DISTORTION_REPLIES = (
    ("All-or-nothing thinking", (
        "I notice some all-or-nothing words in what you shared. When things feel like "
        "'always' or 'never', it can help to look for the in-between. Can you think of a "
        "time when things went even a little differently?"
    )),
    ("Should statements", (
        "It sounds like you're putting a lot of 'shoulds' on yourself. Those expectations "
        "can add so much pressure. What would you say to a friend who was holding "
        "themselves to the same standard?"
    )),
    ("Catastrophizing", (
        "When we're anxious our minds often jump to the worst possible outcome. That's a "
        "very human response. Let's gently look at what is most likely to happen, rather "
        "than what feels most frightening."
    )),
)

GENERIC_DISTORTION_REPLY = (
    "I'm noticing a thinking pattern that might be making things feel harder than they "
    "are. We can look at it together, one thought at a time. What feels most true to "
    "you right now?"
)

SUPPORTIVE_REPLY = (
    "Thank you for sharing that with me. I'm here to listen and support you through "
    "whatever you're experiencing. How are you feeling right now?"
)


def compose_fallback_response(
    crisis_risk_level: CrisisRiskLevel,
    anxiety_level: int,
    triggers: Sequence[str],
    sentiment: Sentiment,
    cognitive_distortions: Sequence[str],
) -> str:
    """Choose one fixed reply by walking the fallback cascade."""
    if crisis_risk_level is CrisisRiskLevel.CRITICAL:
        return CRISIS_RESPONSE.text

    if anxiety_level >= HIGH_ANXIETY_LEVEL:
        return HIGH_ANXIETY_REPLY

    for trigger, reply in TRIGGER_REPLIES:
        if trigger in triggers:
            return reply

    if sentiment is Sentiment.POSITIVE:
        return POSITIVE_REPLY

    if cognitive_distortions:
        for distortion, reply in DISTORTION_REPLIES:
            if distortion in cognitive_distortions:
                return reply
        return GENERIC_DISTORTION_REPLY

    return SUPPORTIVE_REPLY


def fallback_response_for(analysis: Analysis) -> str:
    return compose_fallback_response(
        crisis_risk_level=analysis.crisis_risk_level,
        anxiety_level=analysis.anxiety_level,
        triggers=analysis.triggers,
        sentiment=analysis.sentiment,
        cognitive_distortions=analysis.cognitive_distortions,
    )
