# backend/liquor_pos/routes/system.py
"""
System health endpoint.

Probes the record store (catalog, customers, sales) and the session table so
a load balancer or the register UI can tell a dead backend from an empty one.
"""

import time
from typing import Callable

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import POSError
from ..extensions import db
from ..models import SessionToken
from ..repositories import get_record_store
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def _timed(name: str, probe: Callable[[], dict]) -> dict:
    started = time.perf_counter()
    try:
        details = probe()
        result = {"status": "healthy", "details": details}
    except (POSError, SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Health check %s failed", name)
        result = {"status": "unhealthy", "error": f"{name} unavailable"}
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return result


def _record_store_probe() -> dict:
    store = get_record_store()
    return {
        "items": len(store.select("items")),
        "customers": len(store.select("customers")),
        "open_sales": len(store.select("transactions", [("status", "eq", "pending")])),
    }


def _session_probe() -> dict:
    live = db.session.query(SessionToken).filter(SessionToken.is_revoked.is_(False))
    return {
        "active_sessions": live.count(),
        "expired_pending_cleanup": live.filter(SessionToken.expires_at < utcnow()).count(),
    }


@system_bp.get("/health")
def health():
    """
    200 when every probe passes, 503 otherwise.
    """
    started = time.perf_counter()
    checks = {
        "record_store": _timed("record_store", _record_store_probe),
        "session_service": _timed("session_service", _session_probe),
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "checks": checks,
    }
    return body, 200 if healthy else 503
