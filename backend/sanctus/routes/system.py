# backend/sanctus/routes/system.py
"""
System health endpoint.

Reports database reachability for load balancers and deployment checks.
"""

import time

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..logging_setup import get_logger

system_bp = Blueprint("system", __name__)
logger = get_logger(__name__)


def check_database_health() -> dict:
    """
    Run a trivial query against the database.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        logger.exception("database_health_check_failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health_route():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "checks": {"database": database},
    }
    return jsonify(body), 200 if healthy else 503
