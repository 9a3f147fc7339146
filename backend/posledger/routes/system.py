# backend/posledger/routes/system.py
"""
System health endpoint.

Checks database connectivity and, optionally, the ledger invariants so a
deployment probe can tell a reachable database from a consistent one.
"""

import time
from flask import Blueprint, current_app, request
from ..extensions import db
from ..models import Customer, Product, Sale
from ..services import audit_service
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        customer_count = db.session.query(Customer).count()
        sale_count = db.session.query(Sale).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "customers": customer_count,
                "sales": sale_count,
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


def check_ledger_health() -> dict:
    """
    Run the invariant audit. Violations mark the ledger degraded, not down.
    """
    start_time = time.time()
    try:
        violations = audit_service.check_invariants()
        elapsed_ms = (time.time() - start_time) * 1000

        if violations:
            return {
                "status": "degraded",
                "latency_ms": round(elapsed_ms, 2),
                "warning": f"{len(violations)} ledger invariant violation(s)",
                "details": {"violations": [v.to_dict() for v in violations[:20]]},
            }

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Ledger audit failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Ledger audit error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Query params:
    - audit: "true" to include the ledger invariant audit (full table scan)

    Returns:
    - 200: Healthy or degraded
    - 503: One or more checks unhealthy
    """
    start_time = time.time()

    checks = {"database": check_database_health()}
    if request.args.get("audit", "false").lower() == "true":
        checks["ledger"] = check_ledger_health()

    unhealthy_count = sum(1 for check in checks.values() if check["status"] == "unhealthy")
    degraded_count = sum(1 for check in checks.values() if check["status"] == "degraded")

    if unhealthy_count > 0:
        overall_status = "unhealthy"
        http_status = 503
    elif degraded_count > 0:
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": checks,
    }

    return response, http_status
