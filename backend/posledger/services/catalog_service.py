# backend/posledger/services/catalog_service.py
"""
Catalog Service

The ledger only needs two things from the catalog: a product read and a
quantity adjustment it can run inside its own transaction. Product creation
and listing live here too so the catalog can be bootstrapped.

INVARIANT: Product.quantity never goes negative. adjust_quantity refuses a
delta that would take it below zero.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from .concurrency import lock_for_update
from .errors import InsufficientStock, ProductNotFound, ValidationError


def get_product(product_id: int) -> Product:
    """
    Fetch a product or raise ProductNotFound.
    """
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFound(f"Product {product_id} not found")
    return product


def adjust_quantity(product_id: int, delta: int) -> Product:
    """
    Change on-hand quantity by delta as part of the caller's transaction.

    Locks the product row and flushes, but never commits. Negative delta on
    sale, positive on sale delete.

    Raises:
        ProductNotFound: If product doesn't exist
        InsufficientStock: If the result would be negative
    """
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise ProductNotFound(f"Product {product_id} not found")

    new_quantity = product.quantity + delta
    if new_quantity < 0:
        raise InsufficientStock(
            "Insufficient stock for sale",
            details={
                "product_id": product_id,
                "requested_quantity": -delta,
                "on_hand": product.quantity,
            },
        )

    product.quantity = new_quantity
    db.session.flush()
    return product


def create_product(sku: str, name: str, price_cents: int, quantity: int = 0) -> Product:
    """Create a catalog entry with an opening stock level."""
    if not sku or not name:
        raise ValidationError("sku and name required")
    if not isinstance(price_cents, int) or isinstance(price_cents, bool) or price_cents < 0:
        raise ValidationError("price_cents must be a non-negative integer")
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer")

    if db.session.query(Product).filter_by(sku=sku).first():
        raise ValidationError(f"SKU {sku} already exists")

    product = Product(sku=sku, name=name, price_cents=price_cents, quantity=quantity)
    db.session.add(product)
    db.session.commit()
    return product


def list_products() -> list[dict]:
    """
    All products by name, each flagged when stock is at or below the
    configured low-stock threshold.
    """
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    products = db.session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()

    items = []
    for product in products:
        item = product.to_dict()
        item["low_stock"] = product.quantity <= threshold
        items.append(item)
    return items
