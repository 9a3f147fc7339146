# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/posledger/routes/sales.py
"""Sales API routes with permission enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import customer_service, debt_service, ledger_service
from ..services.errors import LedgerError
from ..services.permission_service import PermissionDeniedError
from ..decorators import require_actor, require_permission
from ..time_utils import parse_iso_date, utcnow
from .errors import ledger_error_response


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("/")
@require_actor
@require_permission("CREATE_SALE")
def record_sale_route():
    """
    Record a cash or credit sale.

    Requires: CREATE_SALE permission
    Available to: manager, salesperson

    Request body:
    {
        "product_id": 1,
        "quantity": 2,
        "amount_tendered_cents": 500,
        "unit_price_cents": 1000,               (optional, defaults to product price)
        "customer_id": 7,                       (optional)
        "new_customer": {"name": "...", "phone": "..."}  (optional, instead of customer_id)
    }

    Returns:
        201: Sale recorded
        400: Invalid input, insufficient stock, missing customer
        404: Product or customer not found
        409: Concurrent update, retry
    """
    try:
        data = request.get_json() or {}

        product_id = data.get("product_id")
        quantity = data.get("quantity")
        amount_tendered_cents = data.get("amount_tendered_cents")

        if product_id is None or quantity is None or amount_tendered_cents is None:
            return jsonify({"error": "product_id, quantity, and amount_tendered_cents required"}), 400

        customer_id = data.get("customer_id")
        new_customer = data.get("new_customer")
        if customer_id is None and new_customer:
            if not isinstance(new_customer, dict):
                return jsonify({"error": "new_customer must be an object with name and phone"}), 400
            customer = customer_service.find_or_create_customer(
                new_customer.get("name"),
                new_customer.get("phone"),
            )
            customer_id = customer.id

        sale = ledger_service.record_sale(
            product_id=product_id,
            quantity=quantity,
            amount_tendered_cents=amount_tendered_cents,
            unit_price_cents=data.get("unit_price_cents"),
            customer_id=customer_id,
            actor=g.actor,
        )

        return jsonify({"sale": sale.to_dict()}), 201

    except (LedgerError, PermissionDeniedError) as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/daily")
@require_actor
def daily_sales_route():
    """
    Sales recorded on one UTC day, newest first.

    Query params:
    - date: YYYY-MM-DD (default: today)

    Managers see every salesperson's sales; salespeople see their own.
    """
    try:
        day = parse_iso_date(request.args.get("date")) or utcnow().date()
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400

    try:
        items = debt_service.list_sales_for_day(day, g.actor)
        return jsonify({"date": day.isoformat(), "items": items, "count": len(items)}), 200
    except Exception:
        current_app.logger.exception("Failed to list daily sales")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
@require_actor
def get_sale_route(sale_id: int):
    """Get a sale with its payments."""
    try:
        summary = debt_service.get_sale_summary(sale_id, g.actor)
        if summary is None:
            return jsonify({"error": "Sale not found"}), 404
        return jsonify(summary), 200
    except Exception:
        current_app.logger.exception("Failed to load sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<int:sale_id>")
@require_actor
@require_permission("DELETE_SALE")
def delete_sale_route(sale_id: int):
    """
    Delete a sale, its payments, and return its stock.

    Requires: DELETE_SALE permission
    Available to: manager

    DESTRUCTIVE: No audit row survives.
    """
    try:
        deleted = ledger_service.delete_sale(sale_id, g.actor)
        return jsonify({"deleted": deleted.to_dict()}), 200

    except (LedgerError, PermissionDeniedError) as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500
