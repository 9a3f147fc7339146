# Overview: Flask API routes for debt queries; read-only views over the sales ledger.

# backend/posledger/routes/debts.py
"""
Debt API Routes

Read-only. Managers see every customer's debts; salespeople see debts on the
sales they recorded.
"""

from flask import Blueprint, jsonify, g, current_app

from ..services import debt_service
from ..services.errors import LedgerError
from ..decorators import require_actor
from .errors import ledger_error_response


debts_bp = Blueprint("debts", __name__, url_prefix="/api/debts")


@debts_bp.get("/customers")
@require_actor
def customers_with_debt_route():
    """List customers with at least one pending sale."""
    try:
        customers = debt_service.list_customers_with_debt(g.actor)
        return jsonify({
            "items": [c.to_dict() for c in customers],
            "count": len(customers),
        }), 200
    except Exception:
        current_app.logger.exception("Failed to list customers with debt")
        return jsonify({"error": "Internal server error"}), 500


@debts_bp.get("/customers/<int:customer_id>/sales")
@require_actor
def outstanding_sales_route(customer_id: int):
    """
    Pending sales for a customer, oldest first.

    Returns each sale with owed_cents, plus the customer's total_owed_cents.
    """
    try:
        sales = debt_service.list_outstanding_sales(customer_id, g.actor)
        return jsonify({
            "customer_id": customer_id,
            "items": [s.to_dict() for s in sales],
            "count": len(sales),
            "total_owed_cents": sum(s.owed_cents for s in sales),
        }), 200
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list outstanding sales")
        return jsonify({"error": "Internal server error"}), 500


@debts_bp.get("/customers/<int:customer_id>/payments")
@require_actor
def customer_payments_route(customer_id: int):
    """Payment history for a customer, newest first."""
    try:
        payments = debt_service.list_payments(customer_id, g.actor)
        return jsonify({
            "customer_id": customer_id,
            "items": payments,
            "count": len(payments),
        }), 200
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list customer payments")
        return jsonify({"error": "Internal server error"}), 500
