"""Append-only storage for per-message analyses.

One row per classified message in the anxiety_analyses table. Rows are
never updated or re-classified; consumers sort by created_at because
concurrent writes for one user may land out of order.

Without a connection manager the repository keeps rows in memory, which
is what local development and the test-suite use.
"""
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from calmpath.shared.models import (
    Analysis,
    AnalysisRecord,
    CrisisRiskLevel,
    Sentiment,
    TherapyApproach,
)
from calmpath.shared.utils import hash_pii, require_pii_salt
from .connection import ConnectionManager
from .repository import AppendOnlyRepository, DuplicateError

logger = logging.getLogger(__name__)

ANALYSIS_TABLE = "anxiety_analyses"

ANALYSIS_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS {ANALYSIS_TABLE} (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    message TEXT NOT NULL,
    anxiety_level SMALLINT NOT NULL CHECK (anxiety_level BETWEEN 1 AND 10),
    gad7_score SMALLINT NOT NULL CHECK (gad7_score BETWEEN 0 AND 21),
    triggers TEXT[] NOT NULL,
    emotions TEXT[] NOT NULL,
    cognitive_distortions TEXT[] NOT NULL,
    recommended_interventions TEXT[] NOT NULL,
    beck_anxiety_categories TEXT[] NOT NULL,
    dsm5_indicators TEXT[] NOT NULL,
    therapy_approach TEXT NOT NULL,
    crisis_risk_level TEXT NOT NULL,
    sentiment TEXT NOT NULL,
    escalation_detected BOOLEAN NOT NULL,
    personalized_response TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_{ANALYSIS_TABLE}_user_created
    ON {ANALYSIS_TABLE} (user_id, created_at);
"""

_COLUMNS = (
    "id",
    "user_id",
    "message",
    "anxiety_level",
    "gad7_score",
    "triggers",
    "emotions",
    "cognitive_distortions",
    "recommended_interventions",
    "beck_anxiety_categories",
    "dsm5_indicators",
    "therapy_approach",
    "crisis_risk_level",
    "sentiment",
    "escalation_detected",
    "personalized_response",
    "created_at",
)


class AnalysisRepository(AppendOnlyRepository[AnalysisRecord]):
    """Append-only repository for AnalysisRecord rows."""

    def __init__(self, connection_manager: Optional[ConnectionManager] = None):
        require_pii_salt()
        super().__init__(connection_manager, ANALYSIS_TABLE)
        self._memory_store: List[AnalysisRecord] = []
        self._memory_lock = threading.Lock()

    @property
    def columns(self) -> Sequence[str]:
        return _COLUMNS

    @property
    def backend(self) -> str:
        return "postgresql" if self.connection_manager else "memory"

    def ensure_schema(self) -> None:
        """Create the table and index if they do not exist (PostgreSQL only)."""
        if self.connection_manager is None:
            return
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(ANALYSIS_TABLE_DDL)
            conn.commit()

    def append(self, record: AnalysisRecord) -> None:
        """Append one analysis row.

        Raises:
            DuplicateError: If record_id was already stored
            RepositoryError: If the database write fails
        """
        if self.connection_manager is None:
            self._append_memory(record)
        else:
            self.insert(record)

        logger.info(
            "ANALYSIS_RECORD_APPENDED",
            extra={
                "record_id": record.record_id,
                "user_id_hash": hash_pii(record.user_id),
                "backend": self.backend,
                "crisis_risk_level": record.analysis.crisis_risk_level.value,
            }
        )

    def find_by_user(self, user_id: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        """Read back a user's analyses, oldest first."""
        if self.connection_manager is None:
            with self._memory_lock:
                rows = [r for r in self._memory_store if r.user_id == user_id]
            rows.sort(key=lambda r: r.created_at)
            return rows[:limit] if limit is not None else rows
        return self.select_where("user_id", user_id, order_by="created_at", limit=limit)

    def _append_memory(self, record: AnalysisRecord) -> None:
        with self._memory_lock:
            if any(r.record_id == record.record_id for r in self._memory_store):
                raise DuplicateError(f"Duplicate row in {self.table_name}: {record.record_id}")
            self._memory_store.append(record)

    def _entity_to_params(self, entity: AnalysisRecord) -> Dict[str, Any]:
        analysis = entity.analysis
        return {
            "id": entity.record_id,
            "user_id": entity.user_id,
            "message": entity.message,
            "anxiety_level": analysis.anxiety_level,
            "gad7_score": analysis.gad7_score,
            "triggers": list(analysis.triggers),
            "emotions": list(analysis.emotions),
            "cognitive_distortions": list(analysis.cognitive_distortions),
            "recommended_interventions": list(analysis.recommended_interventions),
            "beck_anxiety_categories": list(analysis.beck_anxiety_categories),
            "dsm5_indicators": list(analysis.dsm5_indicators),
            "therapy_approach": analysis.therapy_approach.value,
            "crisis_risk_level": analysis.crisis_risk_level.value,
            "sentiment": analysis.sentiment.value,
            "escalation_detected": analysis.escalation_detected,
            "personalized_response": analysis.personalized_response,
            "created_at": entity.created_at,
        }

    def _row_to_entity(self, row: tuple) -> AnalysisRecord:
        data = dict(zip(_COLUMNS, row))
        analysis = Analysis(
            anxiety_level=data["anxiety_level"],
            gad7_score=data["gad7_score"],
            therapy_approach=TherapyApproach(data["therapy_approach"]),
            crisis_risk_level=CrisisRiskLevel(data["crisis_risk_level"]),
            sentiment=Sentiment(data["sentiment"]),
            personalized_response=data["personalized_response"],
            escalation_detected=data["escalation_detected"],
            triggers=tuple(data["triggers"] or ()),
            emotions=tuple(data["emotions"] or ()),
            cognitive_distortions=tuple(data["cognitive_distortions"] or ()),
            recommended_interventions=tuple(data["recommended_interventions"] or ()),
            beck_anxiety_categories=tuple(data["beck_anxiety_categories"] or ()),
            dsm5_indicators=tuple(data["dsm5_indicators"] or ()),
        )
        return AnalysisRecord(
            record_id=data["id"],
            user_id=data["user_id"],
            message=data["message"],
            analysis=analysis,
            created_at=data["created_at"],
        )
