"""Every crisis phrase forces critical risk on every classification path.

Each phrase is embedded in text that would otherwise win as negation,
positive or anxiety, and run through the local analyzer, the extraction
fallback and the remote adapter with a model that reports low risk.
"""
import asyncio
import json

import pytest

from calmpath.shared.models import ClassificationInput, CrisisRiskLevel
from calmpath.shared.utils import configure_pii_salt
from calmpath.services.analysis_service import DEFAULT_LEXICON, LocalAnalyzer
from calmpath.services.llm_service import (
    BaseLLM,
    ExtractionFallback,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    RemoteClassificationAdapter,
)

CONTEXTS = (
    "I'm fine, not worried at all, but {phrase}",
    "feeling good and calm today, still {phrase}",
    "so anxious and scared, I panic and {phrase}",
)

CASES = [
    (phrase, context.format(phrase=phrase))
    for phrase in sorted(DEFAULT_LEXICON.crisis)
    for context in CONTEXTS
]

LOW_RISK_REPLY = json.dumps({
    "anxietyLevel": 2,
    "gad7Score": 3,
    "beckAnxietyCategories": [],
    "dsm5Indicators": [],
    "triggers": [],
    "emotions": ["calm"],
    "cognitiveDistortions": [],
    "recommendedInterventions": [],
    "therapyApproach": "Supportive",
    "crisisRiskLevel": "low",
    "sentiment": "positive",
    "escalationDetected": False,
    "personalizedResponse": "It's good to hear you're feeling steady today.",
})


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


class LowRiskLLM(BaseLLM):
    def __init__(self):
        super().__init__(LLMConfig(provider=LLMProvider.ANTHROPIC))

    async def generate(self, prompt, system_prompt=None, **kwargs):
        return LLMResponse(text=LOW_RISK_REPLY, model="stub", provider="anthropic")


@pytest.mark.parametrize("phrase,message", CASES)
class TestCrisisDominance:
    def test_local_analyzer(self, phrase, message):
        analysis = LocalAnalyzer().analyze(ClassificationInput(message=message))

        assert analysis.crisis_risk_level == CrisisRiskLevel.CRITICAL

    def test_extraction_fallback(self, phrase, message):
        analysis = ExtractionFallback().extract(message)

        assert analysis.crisis_risk_level == CrisisRiskLevel.CRITICAL

    def test_remote_adapter_overrides_model(self, phrase, message):
        adapter = RemoteClassificationAdapter(LowRiskLLM())

        analysis = asyncio.run(adapter.classify(ClassificationInput(message=message)))

        assert analysis.crisis_risk_level == CrisisRiskLevel.CRITICAL
