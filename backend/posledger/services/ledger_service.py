# Overview: Service-layer operations for the sales ledger; encapsulates business logic and database work.

"""
Ledger Service

The transactional core: sales, payments and the stock they move.

DESIGN PRINCIPLES:
- Every public operation is one DB transaction run through run_with_retry
- All validation happens before the first write; on any error the session is
  rolled back, so stock, sales and payments move together or not at all
- Lock units: product row (sale, delete), sale row (item payment),
  customer row (customer payment)
- Caller identity arrives as an explicit Actor

Ledger Invariants (authoritative)

1. sale.amount_paid_cents == SUM(payment.amount_cents) for that sale
2. 0 <= sale.amount_paid_cents <= sale.total_price_cents
3. sale.status == "paid"  <=>  amount_paid_cents == total_price_cents
4. product.quantity == opening stock - SUM(quantity) of its existing sales
5. A customer has debt <=> one of their sales is "pending"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import Customer, Payment, Product, Sale
from ..time_utils import utcnow
from . import catalog_service
from .allocation import Allocation, allocate_fifo
from .concurrency import begin_write, lock_for_update, run_with_retry
from .errors import (
    CustomerNotFound,
    MissingCustomer,
    NoOutstandingDebt,
    OverPayment,
    ProductNotFound,
    SaleNotFound,
    ValidationError,
)
from .permission_service import (
    Actor,
    PermissionDeniedError,
    can_view_all_sales,
    require_permission,
    scope_sales_query,
)


# =============================================================================
# SALE STATUS (CONSTANTS)
# =============================================================================

SALE_STATUS_PENDING = "pending"
SALE_STATUS_PAID = "paid"


# =============================================================================
# RESULT RECORDS
# =============================================================================

@dataclass(frozen=True)
class ItemPaymentResult:
    sale_id: int
    payment_id: int
    requested_cents: int
    applied_cents: int
    owed_cents: int
    sale_status: str

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "payment_id": self.payment_id,
            "requested_cents": self.requested_cents,
            "applied_cents": self.applied_cents,
            "owed_cents": self.owed_cents,
            "sale_status": self.sale_status,
        }


@dataclass(frozen=True)
class CustomerPaymentResult:
    """
    Outcome of a FIFO customer payment.

    unapplied_cents is what remained after every pending sale was cleared.
    It is reported here and logged but not stored anywhere (no customer
    credit balance exists).
    """
    customer_id: int
    requested_cents: int
    allocations: list[Allocation] = field(default_factory=list)
    unapplied_cents: int = 0

    @property
    def applied_cents(self) -> int:
        return sum(a.amount_cents for a in self.allocations)

    def to_dict(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "requested_cents": self.requested_cents,
            "applied_cents": self.applied_cents,
            "unapplied_cents": self.unapplied_cents,
            "allocations": [a.to_dict() for a in self.allocations],
        }


@dataclass(frozen=True)
class DeletedSale:
    sale_id: int
    product_id: int
    restored_quantity: int
    deleted_payment_count: int

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "restored_quantity": self.restored_quantity,
            "deleted_payment_count": self.deleted_payment_count,
        }


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _require_int(value, field_name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    return value


def _require_positive(value, field_name: str) -> int:
    if _require_int(value, field_name) <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return value


def _require_non_negative(value, field_name: str) -> int:
    if _require_int(value, field_name) < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return value


def status_for(amount_paid_cents: int, total_price_cents: int) -> str:
    return SALE_STATUS_PAID if amount_paid_cents == total_price_cents else SALE_STATUS_PENDING


def _apply_payment(sale: Sale, amount_cents: int, actor: Actor, paid_at: datetime) -> Payment:
    """
    Credit amount_cents to a locked sale and write its payment row.

    Caller guarantees 0 < amount_cents <= sale.owed_cents.
    """
    sale.amount_paid_cents = sale.amount_paid_cents + amount_cents
    sale.status = status_for(sale.amount_paid_cents, sale.total_price_cents)

    payment = Payment(
        sale_id=sale.id,
        amount_cents=amount_cents,
        received_by_user_id=actor.user_id,
        created_at=paid_at,
    )
    db.session.add(payment)
    db.session.flush()
    return payment


# =============================================================================
# SALES
# =============================================================================

def record_sale(
    *,
    product_id: int,
    quantity: int,
    amount_tendered_cents: int,
    actor: Actor,
    unit_price_cents: int | None = None,
    customer_id: int | None = None,
) -> Sale:
    """
    Record a sale, deducting stock and capturing any money tendered.

    Args:
        product_id: Product being sold
        quantity: Units sold (positive)
        amount_tendered_cents: Paid now; total for a cash sale, less for credit
        actor: Salesperson recording the sale
        unit_price_cents: Price charged per unit (defaults to current price)
        customer_id: Required when amount_tendered_cents < total

    Returns:
        The new Sale. If anything was paid, it carries one Payment for
        min(amount_tendered_cents, total).

    Raises:
        ValidationError: Non-positive quantity or negative amounts
        ProductNotFound / CustomerNotFound: Stale reference
        MissingCustomer: Underpaid sale with no customer
        InsufficientStock: quantity exceeds on-hand
        TransientConflict: Contention outlived the retry budget
    """
    require_permission(actor, "CREATE_SALE")
    _require_positive(quantity, "quantity")
    _require_non_negative(amount_tendered_cents, "amount_tendered_cents")
    if unit_price_cents is not None:
        _require_non_negative(unit_price_cents, "unit_price_cents")

    def _op():
        begin_write()

        # Serialize sales of the same product on its row
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")

        price = product.price_cents if unit_price_cents is None else unit_price_cents
        total = quantity * price
        amount_paid = min(amount_tendered_cents, total)

        if amount_paid < total and customer_id is None:
            raise MissingCustomer(
                "A customer is required for a credit sale",
                details={"total_price_cents": total, "amount_tendered_cents": amount_tendered_cents},
            )

        if customer_id is not None and db.session.get(Customer, customer_id) is None:
            raise CustomerNotFound(f"Customer {customer_id} not found")

        # Raises InsufficientStock before touching the row
        catalog_service.adjust_quantity(product.id, -quantity)

        # Inserted with its final paid amount and status; a cash sale is
        # never "pending", even before its payment row exists
        now = utcnow()
        sale = Sale(
            product_id=product.id,
            customer_id=customer_id,
            salesperson_id=actor.user_id,
            quantity=quantity,
            unit_price_cents=price,
            total_price_cents=total,
            amount_paid_cents=amount_paid,
            status=status_for(amount_paid, total),
            created_at=now,
        )
        db.session.add(sale)
        db.session.flush()  # Get sale ID

        if amount_paid > 0:
            db.session.add(Payment(
                sale_id=sale.id,
                amount_cents=amount_paid,
                received_by_user_id=actor.user_id,
                created_at=now,
            ))
            db.session.flush()

        db.session.commit()
        return sale

    return run_with_retry(_op)


def delete_sale(sale_id: int, actor: Actor) -> DeletedSale:
    """
    Remove a sale and its payments, returning its quantity to stock.

    WHY: Administrative correction of mis-entered sales.

    DESTRUCTIVE: This is a hard delete. No reversal entry is written and the
    sale's payment history is gone afterwards.

    Raises:
        PermissionDeniedError: Actor lacks DELETE_SALE
        SaleNotFound: Sale doesn't exist
    """
    require_permission(actor, "DELETE_SALE")

    def _op():
        begin_write()

        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise SaleNotFound(f"Sale {sale_id} not found")

        catalog_service.adjust_quantity(sale.product_id, sale.quantity)

        deleted = DeletedSale(
            sale_id=sale.id,
            product_id=sale.product_id,
            restored_quantity=sale.quantity,
            deleted_payment_count=len(sale.payments),
        )

        # Payments go with the sale (ORM cascade)
        db.session.delete(sale)
        db.session.commit()

        current_app.logger.info(
            "Sale %s deleted by user %s: restored %s units to product %s, removed %s payments",
            deleted.sale_id,
            actor.user_id,
            deleted.restored_quantity,
            deleted.product_id,
            deleted.deleted_payment_count,
        )
        return deleted

    return run_with_retry(_op)


# =============================================================================
# PAYMENTS
# =============================================================================

def record_item_payment(sale_id: int, amount_cents: int, actor: Actor) -> ItemPaymentResult:
    """
    Apply a payment to one sale.

    CLAMP POLICY: An amount above what is owed is reduced to the owed amount;
    the result reports both the requested and the applied figure. A sale
    with nothing owed raises OverPayment, since no positive payment fits.

    Raises:
        ValidationError: Non-positive amount
        SaleNotFound: Sale doesn't exist
        PermissionDeniedError: Restricted actor paying another salesperson's sale
        OverPayment: Sale already fully paid
    """
    require_permission(actor, "RECORD_PAYMENT")
    _require_positive(amount_cents, "amount_cents")

    def _op():
        begin_write()

        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise SaleNotFound(f"Sale {sale_id} not found")

        if not can_view_all_sales(actor) and sale.salesperson_id != actor.user_id:
            raise PermissionDeniedError("Permission denied: VIEW_ALL_SALES")

        owed = sale.owed_cents
        if owed <= 0:
            raise OverPayment(
                f"Sale {sale_id} has no remaining balance due",
                details={"sale_id": sale_id, "requested_cents": amount_cents},
            )

        applied = min(amount_cents, owed)
        payment = _apply_payment(sale, applied, actor, utcnow())

        result = ItemPaymentResult(
            sale_id=sale.id,
            payment_id=payment.id,
            requested_cents=amount_cents,
            applied_cents=applied,
            owed_cents=sale.owed_cents,
            sale_status=sale.status,
        )
        db.session.commit()
        return result

    return run_with_retry(_op)


def record_customer_payment(customer_id: int, amount_cents: int, actor: Actor) -> CustomerPaymentResult:
    """
    Distribute a customer's payment over their pending sales, oldest first.

    Each sale touched gets exactly one Payment for the portion applied to it.
    Whatever is left after all pending sales are cleared is returned as
    unapplied_cents and not stored.

    Restricted actors allocate only across sales they recorded.

    Raises:
        ValidationError: Non-positive amount
        CustomerNotFound: Customer doesn't exist
        NoOutstandingDebt: Customer has no pending sales
    """
    require_permission(actor, "RECORD_PAYMENT")
    _require_positive(amount_cents, "amount_cents")

    def _op():
        begin_write()

        # Serialize payments for the same customer so two of them cannot
        # both read the same stale list of pending sales
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found")

        query = db.session.query(Sale).filter(
            Sale.customer_id == customer_id,
            Sale.status == SALE_STATUS_PENDING,
        )
        pending = (
            lock_for_update(scope_sales_query(query, actor))
            .order_by(Sale.created_at.asc(), Sale.id.asc())
            .all()
        )
        if not pending:
            raise NoOutstandingDebt(f"Customer {customer_id} has no outstanding debt")

        allocations, unapplied = allocate_fifo(
            amount_cents, [(sale.id, sale.owed_cents) for sale in pending]
        )

        now = utcnow()
        sales_by_id = {sale.id: sale for sale in pending}
        for allocation in allocations:
            _apply_payment(sales_by_id[allocation.sale_id], allocation.amount_cents, actor, now)

        db.session.commit()

        if unapplied:
            current_app.logger.warning(
                "Customer %s payment of %s cents exceeded outstanding debt; %s cents not applied",
                customer_id,
                amount_cents,
                unapplied,
            )

        return CustomerPaymentResult(
            customer_id=customer_id,
            requested_cents=amount_cents,
            allocations=allocations,
            unapplied_cents=unapplied,
        )

    return run_with_retry(_op)
