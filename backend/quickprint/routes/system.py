# backend/quickprint/routes/system.py
"""
System health and shop status endpoints.

- GET  /health              - Database connectivity check
- GET  /api/system/status   - Is the shop online?
- POST /api/system/status   - Set {"online": true/false} or {"toggle": true}
"""

import time
from flask import Blueprint, jsonify, current_app
from ..extensions import db
from ..models import JobGroup, DailySummary
from ..services import system_status_service
from ..validation import ValidationError
from quickprint.time_utils import utcnow
from .orders import json_object, validation_response

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        open_orders = db.session.query(JobGroup).count()
        summary_days = db.session.query(DailySummary).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "orders": open_orders,
                "summary_days": summary_days,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: Database reachable
    - 503: Database unhealthy
    """
    database_health = check_database_health()
    http_status = 200 if database_health["status"] == "healthy" else 503

    response = {
        "status": database_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
        }
    }

    return response, http_status


@system_bp.get("/api/system/status")
def get_status():
    status = system_status_service.get_system_status()
    return jsonify({"system_status": status.to_dict()}), 200


@system_bp.post("/api/system/status")
def set_status():
    try:
        data = json_object()
    except ValidationError as e:
        return validation_response(e)

    if data.get("toggle"):
        status = system_status_service.toggle()
    elif isinstance(data.get("online"), bool):
        status = system_status_service.set_online(data["online"])
    else:
        return jsonify({"error": "Provide \"online\": true/false or \"toggle\": true"}), 400

    return jsonify({"system_status": status.to_dict()}), 200
