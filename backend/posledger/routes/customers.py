# Overview: Flask API routes for the customer directory.

# backend/posledger/routes/customers.py
from flask import Blueprint, request, jsonify, current_app

from ..services import customer_service
from ..services.errors import LedgerError
from ..decorators import require_actor, require_permission
from .errors import ledger_error_response


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("/")
@require_actor
def list_customers_route():
    try:
        customers = customer_service.list_customers()
        return jsonify({"items": [c.to_dict() for c in customers], "count": len(customers)}), 200
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/")
@require_actor
@require_permission("CREATE_SALE")
def find_or_create_customer_route():
    """
    Find a customer by name and phone, creating one if none matches.

    Request body:
    {
        "name": "Amina",
        "phone": "0700 000 000"   (optional)
    }

    Returns:
        200: Existing customer matched
        201: Customer created
        400: Missing name
    """
    try:
        data = request.get_json() or {}
        existing = customer_service.find_customer(data.get("name"), data.get("phone"))
        if existing:
            return jsonify({"customer": existing.to_dict()}), 200

        customer = customer_service.find_or_create_customer(data.get("name"), data.get("phone"))
        return jsonify({"customer": customer.to_dict()}), 201
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500
