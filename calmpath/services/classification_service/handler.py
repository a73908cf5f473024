"""Classification Service HTTP handler.

Every user chat message is posted to /classify and answered with an
Analysis plus the tier that produced it.

User identifiers are never logged raw; hash_pii() is applied first.
"""
import asyncio
import logging
import os

from flask import Flask, request, jsonify

from calmpath.shared.models import ClassificationInput, CrisisRiskLevel
from calmpath.shared.utils import hash_pii, configure_pii_salt
from calmpath.services.llm_service import PersistenceError
from .config import EngineConfig
from .engine import create_engine

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configure PII salt from environment
pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

config = EngineConfig.from_env()
engine = create_engine(config)


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint for ECS/ALB."""
    return jsonify({
        "status": "healthy",
        "service": "classification-service",
        "remote_enabled": engine.remote_enabled,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - verifies the engine and its storage.

    Returns:
        200 if ready, 503 if not
    """
    repository = engine.remote_adapter.repository if engine.remote_adapter else None
    if repository is not None and repository.connection_manager is not None:
        db_status = repository.connection_manager.health_check()
        if not db_status["healthy"]:
            return jsonify({"status": "not_ready", "reason": "database_unavailable"}), 503

    return jsonify({"status": "ready"}), 200


@app.route("/classify", methods=["POST"])
def classify():
    """Classify one chat message.

    Request Body:
        {
            "message": "User message text",
            "history": ["earlier message", ...] (optional, oldest first),
            "userId": "user_123" (optional, enables persistence)
        }

    Response:
        {
            "success": true,
            "tier": "remote" | "local",
            "analysis": {...}
        }

    Error Handling:
        400 on an invalid body. 500 when storage fails, with the computed
        analysis still included so the reply can be shown.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": "body_not_object"})
        return _error("Request body must be a JSON object", 400)

    message = data.get("message")
    if not message or not isinstance(message, str):
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": "missing_message"})
        return _error("Message field is required and must be a string", 400)

    history = data.get("history", data.get("conversationHistory", []))
    if not isinstance(history, list) or not all(isinstance(h, str) for h in history):
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": "invalid_history"})
        return _error("History must be a list of strings", 400)

    user_id = data.get("userId")
    if user_id is not None and not isinstance(user_id, str):
        logger.warning("CLASSIFY_REQUEST_INVALID", extra={"reason": "invalid_user_id"})
        return _error("userId must be a string", 400)

    user_id_hash = hash_pii(user_id) if user_id else None
    logger.info(
        "CLASSIFY_REQUESTED",
        extra={
            "user_id_hash": user_id_hash,
            "message_length": len(message),
            "history_length": len(history),
        }
    )

    classification_input = ClassificationInput(
        message=message, history=tuple(history), user_id=user_id
    )

    try:
        outcome = asyncio.run(engine.classify(classification_input))
    except PersistenceError as e:
        logger.error(
            "CLASSIFY_PERSIST_FAILED",
            extra={"user_id_hash": user_id_hash, "error": str(e), "error_type": type(e).__name__}
        )
        return jsonify({
            "success": False,
            "error": "Failed to store analysis",
            "analysis": e.analysis.to_dict(),
        }), 500
    except Exception as e:
        logger.error(
            "CLASSIFY_FAILED",
            extra={"user_id_hash": user_id_hash, "error": str(e), "error_type": type(e).__name__}
        )
        return _error("Internal server error", 500)

    analysis = outcome.analysis
    log = logger.critical if analysis.crisis_risk_level is CrisisRiskLevel.CRITICAL else logger.info
    log(
        "CLASSIFY_COMPLETED",
        extra={
            "user_id_hash": user_id_hash,
            "tier": outcome.tier,
            "anxiety_level": analysis.anxiety_level,
            "crisis_risk_level": analysis.crisis_risk_level.value,
        }
    )

    return jsonify({
        "success": True,
        "tier": outcome.tier,
        "analysis": analysis.to_dict(),
    }), 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8003"))
    app.run(host="0.0.0.0", port=port)
