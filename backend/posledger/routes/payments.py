# Overview: Flask API routes for payments operations; parses input and returns JSON responses.

# backend/posledger/routes/payments.py
"""
Payment API Routes

DESIGN:
- Pay one sale (overage clamped to what is owed)
- Pay a customer's debts, oldest sale first
- Permission-based access control

SECURITY:
- RECORD_PAYMENT permission required for both
- Salespeople may only pay sales they recorded
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import debt_service, ledger_service
from ..services.errors import LedgerError
from ..services.permission_service import PermissionDeniedError
from ..decorators import require_actor, require_permission
from .errors import ledger_error_response


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("/sales/<int:sale_id>")
@require_actor
@require_permission("RECORD_PAYMENT")
def pay_sale_route(sale_id: int):
    """
    Apply a payment to one sale.

    Request body:
    {
        "amount_cents": 1000
    }

    Returns:
        201: Payment recorded; "payment.applied_cents" may be lower than requested
        400: Invalid amount, sale already paid
        404: Sale not found
        409: Concurrent update, retry
    """
    try:
        data = request.get_json() or {}
        amount_cents = data.get("amount_cents")

        if amount_cents is None:
            return jsonify({"error": "amount_cents required"}), 400

        result = ledger_service.record_item_payment(sale_id, amount_cents, g.actor)
        summary = debt_service.get_sale_summary(sale_id, g.actor)

        return jsonify({
            "payment": result.to_dict(),
            "summary": summary,
        }), 201

    except (LedgerError, PermissionDeniedError) as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add payment")
        return jsonify({"error": "Internal server error"}), 500


@payments_bp.post("/customers/<int:customer_id>")
@require_actor
@require_permission("RECORD_PAYMENT")
def pay_customer_route(customer_id: int):
    """
    Apply a payment across a customer's pending sales, oldest first.

    Request body:
    {
        "amount_cents": 4000
    }

    Returns:
        201: Allocations; "unapplied_cents" is not stored anywhere
        400: Invalid amount, no outstanding debt
        404: Customer not found
        409: Concurrent update, retry
    """
    try:
        data = request.get_json() or {}
        amount_cents = data.get("amount_cents")

        if amount_cents is None:
            return jsonify({"error": "amount_cents required"}), 400

        result = ledger_service.record_customer_payment(customer_id, amount_cents, g.actor)

        return jsonify({"payment": result.to_dict()}), 201

    except (LedgerError, PermissionDeniedError) as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add customer payment")
        return jsonify({"error": "Internal server error"}), 500
