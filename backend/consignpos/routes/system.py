# backend/consignpos/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_textgen_config() -> dict:
    # Not a live call: drafting degrades to a placeholder when unconfigured
    configured = bool(current_app.config.get("GEMINI_API_KEY"))
    return {"status": "healthy" if configured else "degraded", "configured": configured}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable (text generation may be "degraded")
    - 503: database unreachable
    """
    database_health = check_database_health()
    textgen_health = check_textgen_config()

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    elif textgen_health["status"] == "degraded":
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "database": database_health,
            "text_generation": textgen_health,
        },
    }, http_status
