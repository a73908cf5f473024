"""Remote classification adapter.

Wraps one model call per message:

    Sent -> {ParsedOK, ParseFailed}
         -> (ParsedOK and reply too short -> personalized fallback)
         -> Persist -> Return

Provider failures propagate as UpstreamUnavailableError so the caller can
switch to the local tier. Malformed output never escapes: it is recovered
by the regex extraction fallback. Parsed model output is reconciled with
the crisis lexicon so a lexicon hit always lands on critical risk.
"""
import dataclasses
import json
import logging
import re
import time
import uuid
from typing import Any, Dict, Optional

from calmpath.shared.database import AnalysisRepository, RepositoryError
from calmpath.shared.models import (
    Analysis,
    AnalysisRecord,
    ClassificationInput,
    CrisisRiskLevel,
    Sentiment,
    clamp_anxiety_level,
)
from calmpath.shared.utils import hash_pii, hash_text_for_audit, require_pii_salt
from calmpath.services.analysis_service.config import DEFAULT_LEXICON, Lexicon
from calmpath.services.analysis_service.risk import reconcile_reported_risk
from calmpath.services.analysis_service.signal_detector import find_phrases, normalize_message
from .base_llm import BaseLLM
from .extraction_fallback import ExtractionFallback
from .personalized_fallback import fallback_response_for
from .prompts import HISTORY_CONTEXT_LIMIT, SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)

MIN_RESPONSE_LENGTH = 20

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


class ClassificationError(Exception):
    """Base class for classification failures."""
    pass


class UpstreamUnavailableError(ClassificationError):
    """The external model could not be reached or returned an error."""
    pass


class MalformedOutputError(ClassificationError):
    """The model reply does not match the Analysis contract.

    Raised and recovered inside the adapter; never surfaced to callers.
    """
    pass


class PersistenceError(ClassificationError):
    """Storing the analysis failed. The computed analysis is still attached."""

    def __init__(self, message: str, analysis: Analysis):
        super().__init__(message)
        self.analysis = analysis


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if present."""
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text.strip()


class RemoteClassificationAdapter:
    """Classifies messages through an external generative model."""

    def __init__(
        self,
        llm: BaseLLM,
        repository: Optional[AnalysisRepository] = None,
        lexicon: Lexicon = DEFAULT_LEXICON,
        min_response_length: int = MIN_RESPONSE_LENGTH,
        history_limit: int = HISTORY_CONTEXT_LIMIT,
    ):
        """Initialize the adapter.

        Args:
            llm: Provider used for the model call
            repository: Where analyses are appended; None disables persistence
            lexicon: Crisis phrases reconciled against the model's risk tier
            min_response_length: Shorter model replies are replaced
            history_limit: Prior messages included in the prompt
        """
        if repository is not None:
            require_pii_salt()
        self.llm = llm
        self.repository = repository
        self.lexicon = lexicon
        self.min_response_length = min_response_length
        self.history_limit = history_limit
        self.extraction_fallback = ExtractionFallback(lexicon)

    async def classify(self, request: ClassificationInput) -> Analysis:
        """Classify one message through the model.

        Raises:
            UpstreamUnavailableError: If the provider call fails
            PersistenceError: If the analysis could not be stored
        """
        start_time = time.perf_counter()
        prompt = build_user_prompt(request.message, request.history, self.history_limit)

        try:
            reply = await self.llm.generate(prompt, system_prompt=SYSTEM_PROMPT)
        except Exception as e:
            logger.error(
                "REMOTE_MODEL_UNAVAILABLE",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise UpstreamUnavailableError(str(e)) from e

        try:
            analysis = self.parse_reply(reply.text, request.message)
            source = "model"
        except MalformedOutputError as e:
            logger.warning(
                "REMOTE_OUTPUT_MALFORMED",
                extra={
                    "reason": str(e),
                    "text_hash": hash_text_for_audit(request.message),
                }
            )
            analysis = self.extraction_fallback.extract(request.message, request.history)
            source = "extraction_fallback"

        if request.user_id is not None:
            self._persist(request, analysis)

        logger.info(
            "REMOTE_ANALYSIS_COMPLETED",
            extra={
                "source": source,
                "anxiety_level": analysis.anxiety_level,
                "crisis_risk_level": analysis.crisis_risk_level.value,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )
        return analysis

    def parse_reply(self, text: str, message: str) -> Analysis:
        """Turn the model's reply into a reconciled Analysis.

        Raises:
            MalformedOutputError: If the reply is not a valid Analysis object
        """
        try:
            data = json.loads(strip_code_fences(text or ""))
        except json.JSONDecodeError as e:
            raise MalformedOutputError(f"Reply is not JSON: {e.msg}") from e
        if not isinstance(data, dict):
            raise MalformedOutputError("Reply is not a JSON object")

        try:
            data = self._reconcile_risk(data, message)
            analysis = Analysis.from_dict(data)
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            raise MalformedOutputError(str(e)) from e

        reply_text = data.get("personalizedResponse")
        if not isinstance(reply_text, str) or len(reply_text.strip()) < self.min_response_length:
            logger.info(
                "PERSONALIZED_FALLBACK_USED",
                extra={"reply_length": len(reply_text.strip()) if isinstance(reply_text, str) else 0}
            )
            analysis = dataclasses.replace(
                analysis, personalized_response=fallback_response_for(analysis)
            )
        return analysis

    def _reconcile_risk(self, data: Dict[str, Any], message: str) -> Dict[str, Any]:
        crisis_phrases = find_phrases(normalize_message(message), self.lexicon.crisis)
        reported = CrisisRiskLevel(data["crisisRiskLevel"])
        sentiment = Sentiment(data["sentiment"])
        level = clamp_anxiety_level(float(data["anxietyLevel"]))

        final = reconcile_reported_risk(reported, level, bool(crisis_phrases), sentiment)
        if final is not reported:
            log = logger.critical if final is CrisisRiskLevel.CRITICAL else logger.warning
            log(
                "REMOTE_RISK_RECONCILED",
                extra={
                    "reported": reported.value,
                    "final": final.value,
                    "crisis_phrase_count": len(crisis_phrases),
                }
            )
        return dict(data, crisisRiskLevel=final.value)

    def _persist(self, request: ClassificationInput, analysis: Analysis) -> None:
        if self.repository is None:
            return
        record = AnalysisRecord(
            record_id=str(uuid.uuid4()),
            user_id=request.user_id,
            message=request.message,
            analysis=analysis,
        )
        try:
            self.repository.append(record)
        except RepositoryError as e:
            logger.error(
                "ANALYSIS_PERSIST_FAILED",
                extra={
                    "user_id_hash": hash_pii(request.user_id),
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise PersistenceError(str(e), analysis) from e
