# Overview: Service-layer invariant checks over stored sales and payments.

"""
Ledger Audit

Re-derives what the ledger promises from the stored rows and reports every
sale that breaks it. Read-only.

CHECKS:
- PAYMENT_SUM_MISMATCH: amount_paid_cents != SUM(payments)
- PAID_OUT_OF_RANGE: amount_paid_cents outside [0, total_price_cents]
- STATUS_MISMATCH: status disagrees with amount_paid vs total
- TOTAL_MISMATCH: total_price_cents != quantity * unit_price_cents
- PENDING_WITHOUT_CUSTOMER: a debt nobody owes
- NEGATIVE_STOCK: product quantity below zero
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from ..extensions import db
from ..models import Payment, Product, Sale
from .ledger_service import SALE_STATUS_PENDING, status_for


@dataclass(frozen=True)
class Violation:
    code: str
    entity_type: str
    entity_id: int
    message: str

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "message": self.message,
        }


def check_invariants() -> list[Violation]:
    payment_sums = dict(
        db.session.query(Payment.sale_id, func.coalesce(func.sum(Payment.amount_cents), 0))
        .group_by(Payment.sale_id)
        .all()
    )

    violations: list[Violation] = []

    for sale in db.session.query(Sale).order_by(Sale.id.asc()).all():
        paid_total = int(payment_sums.get(sale.id, 0))

        if sale.amount_paid_cents != paid_total:
            violations.append(Violation(
                "PAYMENT_SUM_MISMATCH", "sale", sale.id,
                f"amount_paid_cents={sale.amount_paid_cents} but payments sum to {paid_total}",
            ))

        if not 0 <= sale.amount_paid_cents <= sale.total_price_cents:
            violations.append(Violation(
                "PAID_OUT_OF_RANGE", "sale", sale.id,
                f"amount_paid_cents={sale.amount_paid_cents} outside 0..{sale.total_price_cents}",
            ))

        expected_status = status_for(sale.amount_paid_cents, sale.total_price_cents)
        if sale.status != expected_status:
            violations.append(Violation(
                "STATUS_MISMATCH", "sale", sale.id,
                f"status={sale.status!r}, expected {expected_status!r}",
            ))

        if sale.total_price_cents != sale.quantity * sale.unit_price_cents:
            violations.append(Violation(
                "TOTAL_MISMATCH", "sale", sale.id,
                f"total_price_cents={sale.total_price_cents} != {sale.quantity} x {sale.unit_price_cents}",
            ))

        if sale.status == SALE_STATUS_PENDING and sale.customer_id is None:
            violations.append(Violation(
                "PENDING_WITHOUT_CUSTOMER", "sale", sale.id,
                "pending sale has no customer",
            ))

    for product in db.session.query(Product).filter(Product.quantity < 0).all():
        violations.append(Violation(
            "NEGATIVE_STOCK", "product", product.id,
            f"quantity={product.quantity}",
        ))

    return violations
