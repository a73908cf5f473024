"""Tier selection for message classification.

The remote tier runs when configured. If the model cannot be reached the
local tier answers instead. Persistence failures are not a tier problem
and propagate to the caller with the computed analysis attached.
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional

from calmpath.shared.database import AnalysisRepository, get_connection_manager
from calmpath.shared.models import Analysis, ClassificationInput
from calmpath.services.analysis_service import LocalAnalyzer, UniformChoice
from calmpath.services.llm_service import (
    RemoteClassificationAdapter,
    UpstreamUnavailableError,
    create_llm,
)
from .config import EngineConfig

logger = logging.getLogger(__name__)

TIER_REMOTE = "remote"
TIER_LOCAL = "local"


@dataclass(frozen=True)
class ClassificationOutcome:
    analysis: Analysis
    tier: str


class ClassificationEngine:
    """Runs the remote tier with the local tier as its fallback."""

    def __init__(
        self,
        local_analyzer: LocalAnalyzer,
        remote_adapter: Optional[RemoteClassificationAdapter] = None,
    ):
        self.local_analyzer = local_analyzer
        self.remote_adapter = remote_adapter

    @property
    def remote_enabled(self) -> bool:
        return self.remote_adapter is not None

    async def classify(self, request: ClassificationInput) -> ClassificationOutcome:
        """Classify one message.

        Raises:
            PersistenceError: If the remote tier could not store its analysis
        """
        if self.remote_adapter is not None:
            try:
                analysis = await self.remote_adapter.classify(request)
                return ClassificationOutcome(analysis=analysis, tier=TIER_REMOTE)
            except UpstreamUnavailableError as e:
                logger.warning(
                    "REMOTE_TIER_UNAVAILABLE",
                    extra={"error": str(e), "fallback_tier": TIER_LOCAL}
                )

        analysis = self.local_analyzer.analyze(request)
        return ClassificationOutcome(analysis=analysis, tier=TIER_LOCAL)


def create_engine(
    config: Optional[EngineConfig] = None,
    repository: Optional[AnalysisRepository] = None,
) -> ClassificationEngine:
    """Build an engine from configuration.

    Args:
        config: Engine settings; read from the environment when omitted
        repository: Storage for remote analyses; PostgreSQL-backed when
            omitted and persistence is enabled. The pool and the table are
            created here so /ready reflects the database from startup.

    Raises:
        RuntimeError: If persistence is configured before the PII salt
    """
    config = config or EngineConfig.from_env()

    chooser = None
    if config.response_random_seed is not None:
        chooser = UniformChoice(random.Random(config.response_random_seed))
    local_analyzer = LocalAnalyzer(chooser=chooser)

    remote_adapter = None
    if config.remote_configured:
        try:
            llm = create_llm(config.llm_config())
        except ValueError as e:
            logger.error(
                "LLM_CONFIG_INVALID",
                extra={"provider": config.llm_provider.value, "error": str(e)}
            )
        else:
            if repository is None and config.persistence_enabled:
                connection_manager = get_connection_manager()
                repository = AnalysisRepository(connection_manager)
                connection_manager.initialize()
                repository.ensure_schema()
            remote_adapter = RemoteClassificationAdapter(llm, repository=repository)

    logger.info(
        "CLASSIFICATION_ENGINE_CREATED",
        extra={
            "remote_enabled": remote_adapter is not None,
            "persistence_enabled": repository is not None,
            "provider": config.llm_provider.value,
        }
    )
    return ClassificationEngine(local_analyzer, remote_adapter)
