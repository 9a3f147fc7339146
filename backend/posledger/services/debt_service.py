# Overview: Read-only projections over the sales ledger (debts, payment history, daily sales).

"""
Debt Query Service

Read-side helpers built on the same session the ledger writes through, so a
caller sees its own committed writes immediately.

SCOPING:
- Actors with VIEW_ALL_SALES see every salesperson's rows
- Everyone else sees only sales they recorded (and payments on those sales)
"""

from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import Customer, Payment, Product, Sale
from ..time_utils import day_bounds
from .customer_service import get_customer
from .ledger_service import SALE_STATUS_PENDING
from .permission_service import Actor, scope_sales_query


def list_customers_with_debt(actor: Actor) -> list[Customer]:
    """
    Customers with at least one pending sale, one entry per customer.
    """
    query = (
        db.session.query(Customer)
        .join(Sale, Sale.customer_id == Customer.id)
        .filter(Sale.status == SALE_STATUS_PENDING)
    )
    return (
        scope_sales_query(query, actor)
        .distinct()
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )


def list_outstanding_sales(customer_id: int, actor: Actor) -> list[Sale]:
    """
    Pending sales for a customer, oldest first (the order payments settle them).

    Each Sale exposes owed_cents.
    """
    get_customer(customer_id)

    query = db.session.query(Sale).filter(
        Sale.customer_id == customer_id,
        Sale.status == SALE_STATUS_PENDING,
    )
    return (
        scope_sales_query(query, actor)
        .order_by(Sale.created_at.asc(), Sale.id.asc())
        .all()
    )


def get_total_debt(customer_id: int, actor: Actor) -> int:
    """Sum of owed_cents over the customer's visible pending sales."""
    return sum(sale.owed_cents for sale in list_outstanding_sales(customer_id, actor))


def list_payments(customer_id: int, actor: Actor) -> list[dict]:
    """
    Payments on a customer's sales, newest first.

    Returns:
        Payment dicts, each annotated with the product name of the sale it
        paid toward
    """
    get_customer(customer_id)

    query = (
        db.session.query(Payment, Product.name)
        .join(Sale, Payment.sale_id == Sale.id)
        .join(Product, Sale.product_id == Product.id)
        .filter(Sale.customer_id == customer_id)
    )
    rows = (
        scope_sales_query(query, actor)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .all()
    )

    items = []
    for payment, product_name in rows:
        item = payment.to_dict()
        item["product_name"] = product_name
        items.append(item)
    return items


def list_sales_for_day(day: date, actor: Actor) -> list[dict]:
    """
    Raw sale rows created on one UTC calendar day, newest first.

    Returns:
        Sale dicts annotated with the product sku
    """
    start, end = day_bounds(day)

    query = (
        db.session.query(Sale, Product.sku)
        .join(Product, Sale.product_id == Product.id)
        .filter(Sale.created_at >= start, Sale.created_at < end)
    )
    rows = (
        scope_sales_query(query, actor)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )

    items = []
    for sale, sku in rows:
        item = sale.to_dict()
        item["product_sku"] = sku
        items.append(item)
    return items


def get_sale_summary(sale_id: int, actor: Actor) -> dict | None:
    """
    One sale with its payments, oldest payment first, or None if the actor
    cannot see it.
    """
    sale = scope_sales_query(db.session.query(Sale).filter(Sale.id == sale_id), actor).first()
    if sale is None:
        return None

    payments = (
        db.session.query(Payment)
        .filter(Payment.sale_id == sale.id)
        .order_by(Payment.created_at.asc(), Payment.id.asc())
        .all()
    )
    return {
        "sale": sale.to_dict(),
        "payments": [p.to_dict() for p in payments],
    }
