"""
API routes (service endpoints).

Handles:
- /api/get-token - Issue a client bearer token
- /api/health    - Health check endpoint
"""

from flask import Blueprint, current_app

from core.document_store import DocumentStoreError
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.route("/get-token", methods=["POST"])
def get_token():
    """Issue a token for a new anonymous client."""
    issuer = current_app.config["TOKEN_ISSUER"]
    client_id, token = issuer.issue()
    logger.info(f"Token issued for client {client_id[:8]}")
    return {"success": True, "token": token}, 200


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with storage status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    for check_name, key in (("catalog", "CATALOG_SERVICE"), ("orders", "ORDER_STORE")):
        service = current_app.config.get(key)
        if service is None:
            health_status["checks"][check_name] = "not_available"
            health_status["status"] = "degraded"
            continue
        try:
            service.count()
            health_status["checks"][check_name] = "ok"
        except DocumentStoreError as e:
            logger.warning(f"Health check for {check_name} failed: {e}")
            health_status["checks"][check_name] = "unreadable"
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
