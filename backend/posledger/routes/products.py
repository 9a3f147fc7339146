# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

# backend/posledger/routes/products.py
from flask import Blueprint, request, jsonify, current_app

from ..services import catalog_service
from ..services.errors import LedgerError
from ..decorators import require_actor, require_permission
from .errors import ledger_error_response


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("/")
@require_actor
def list_products_route():
    """List products with on-hand quantity and low-stock flag."""
    try:
        items = catalog_service.list_products()
        return jsonify({"items": items, "count": len(items)}), 200
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
@require_actor
def get_product_route(product_id: int):
    try:
        product = catalog_service.get_product(product_id)
        return jsonify({"product": product.to_dict()}), 200
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/")
@require_actor
@require_permission("MANAGE_CATALOG")
def create_product_route():
    """
    Create a product.

    Requires: MANAGE_CATALOG permission

    Request body:
    {
        "sku": "TEA-001",
        "name": "Green Tea",
        "price_cents": 450,
        "quantity": 24
    }
    """
    try:
        data = request.get_json() or {}
        product = catalog_service.create_product(
            sku=data.get("sku"),
            name=data.get("name"),
            price_cents=data.get("price_cents"),
            quantity=data.get("quantity", 0),
        )
        return jsonify({"product": product.to_dict()}), 201
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500
