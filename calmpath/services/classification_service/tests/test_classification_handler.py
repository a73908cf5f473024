"""Tests for the Classification Service HTTP handler."""
import json
import random
from unittest.mock import MagicMock, patch

import pytest

from calmpath.shared.database import ConnectionManager, DatabaseConfig, RepositoryError
from calmpath.shared.utils import configure_pii_salt
from calmpath.services.analysis_service import CRISIS_RESPONSE, LocalAnalyzer, UniformChoice
from calmpath.services.llm_service import (
    BaseLLM,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    RemoteClassificationAdapter,
)
from calmpath.services.classification_service import handler
from calmpath.services.classification_service.config import EngineConfig
from calmpath.services.classification_service.engine import ClassificationEngine, create_engine

REPLY = json.dumps({
    "anxietyLevel": 4,
    "gad7Score": 7,
    "beckAnxietyCategories": [],
    "dsm5Indicators": [],
    "triggers": [],
    "emotions": [],
    "cognitiveDistortions": [],
    "recommendedInterventions": [],
    "therapyApproach": "Supportive",
    "crisisRiskLevel": "low",
    "sentiment": "negative",
    "escalationDetected": False,
    "personalizedResponse": "Thank you for telling me. Let's take this one step at a time.",
})


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


class StubLLM(BaseLLM):
    def __init__(self):
        super().__init__(LLMConfig(provider=LLMProvider.ANTHROPIC))

    async def generate(self, prompt, system_prompt=None, **kwargs):
        return LLMResponse(text=REPLY, model="stub", provider="anthropic")


def local_engine():
    return ClassificationEngine(LocalAnalyzer(chooser=UniformChoice(random.Random(1))))


@pytest.fixture
def use_engine(monkeypatch):
    def _use(engine):
        monkeypatch.setattr(handler, "engine", engine)
        return engine
    return _use


@pytest.fixture
def client(use_engine):
    use_engine(local_engine())
    handler.app.config["TESTING"] = True
    with handler.app.test_client() as client:
        yield client


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"
        assert response.get_json()["service"] == "classification-service"

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.get_json()["status"] == "ready"

    def test_not_ready_when_database_down(self, client, use_engine):
        repository = MagicMock()
        repository.connection_manager.health_check.return_value = {"healthy": False}
        use_engine(ClassificationEngine(
            LocalAnalyzer(), RemoteClassificationAdapter(StubLLM(), repository=repository)
        ))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.get_json()["reason"] == "database_unavailable"

    def test_ready_with_persistence_enabled(self, client, use_engine):
        manager = ConnectionManager(DatabaseConfig(host="localhost"))
        config = EngineConfig(llm_api_key="sk-ant-key", persistence_enabled=True)

        with patch("psycopg2.pool.ThreadedConnectionPool"), patch(
            "calmpath.services.classification_service.engine.get_connection_manager",
            return_value=manager,
        ):
            use_engine(create_engine(config))

            response = client.get("/ready")

        assert manager.initialized is True
        assert response.status_code == 200
        assert response.get_json()["status"] == "ready"


class TestClassifyEndpoint:
    def test_local_classification(self, client):
        response = client.post("/classify", json={
            "message": "I want to kill myself",
            "history": ["I can't sleep"],
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["tier"] == "local"
        assert data["analysis"]["crisisRiskLevel"] == "critical"
        assert data["analysis"]["personalizedResponse"] == CRISIS_RESPONSE.text

    def test_wire_keys_are_camel_case(self, client):
        response = client.post("/classify", json={"message": "I feel anxious about work"})

        analysis = response.get_json()["analysis"]
        assert analysis["anxietyLevel"] == 6
        assert analysis["gad7Score"] == 10
        assert analysis["therapyApproach"] == "Mindfulness"
        assert analysis["escalationDetected"] is False

    def test_remote_classification(self, client, use_engine):
        use_engine(ClassificationEngine(LocalAnalyzer(), RemoteClassificationAdapter(StubLLM())))

        response = client.post("/classify", json={"message": "a tough day", "userId": "user_1"})

        assert response.status_code == 200
        assert response.get_json()["tier"] == "remote"

    def test_missing_message(self, client):
        response = client.post("/classify", json={"history": []})

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_non_json_body(self, client):
        response = client.post("/classify", data="not json", content_type="text/plain")

        assert response.status_code == 400

    def test_invalid_history(self, client):
        response = client.post("/classify", json={"message": "hi there", "history": "nope"})

        assert response.status_code == 400

    def test_invalid_user_id(self, client):
        response = client.post("/classify", json={"message": "hi there", "userId": 42})

        assert response.status_code == 400

    def test_persistence_failure_returns_analysis(self, client, use_engine):
        repository = MagicMock()
        repository.append.side_effect = RepositoryError("database unavailable")
        use_engine(ClassificationEngine(
            LocalAnalyzer(), RemoteClassificationAdapter(StubLLM(), repository=repository)
        ))

        response = client.post("/classify", json={"message": "a tough day", "userId": "user_1"})

        assert response.status_code == 500
        data = response.get_json()
        assert data["success"] is False
        assert data["analysis"]["anxietyLevel"] == 4
