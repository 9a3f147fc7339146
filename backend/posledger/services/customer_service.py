# Overview: Service-layer operations for the customer directory.

from __future__ import annotations

from ..extensions import db
from ..models import Customer
from .errors import CustomerNotFound, ValidationError


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise CustomerNotFound(f"Customer {customer_id} not found")
    return customer


def _normalize(name: str | None, phone: str | None) -> tuple[str, str | None]:
    name = (name or "").strip()
    phone = (phone or "").strip() or None
    if not name:
        raise ValidationError("Customer name required")
    return name, phone


def find_customer(name: str, phone: str | None = None) -> Customer | None:
    """Oldest customer with exactly this name and phone, or None."""
    name, phone = _normalize(name, phone)
    return (
        db.session.query(Customer)
        .filter(Customer.name == name, Customer.phone.is_(None) if phone is None else Customer.phone == phone)
        .order_by(Customer.id.asc())
        .first()
    )


def find_or_create_customer(name: str, phone: str | None = None) -> Customer:
    """
    Resolve a customer by exact name and phone, creating one if none matches.

    WHY: Credit sales create customers on demand; entering the same name and
    phone twice should not fork one person's debt across two records.
    """
    existing = find_customer(name, phone)
    if existing:
        return existing

    name, phone = _normalize(name, phone)

    customer = Customer(name=name, phone=phone)
    db.session.add(customer)
    db.session.commit()
    return customer


def list_customers() -> list[Customer]:
    return db.session.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()
