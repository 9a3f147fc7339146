from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Sale(db.Model):
    """
    One product sold in one quantity, and the unit of debt.

    WHY: A sale carries both the stock it consumed and what is still owed on
    it. owed = total_price_cents - amount_paid_cents.

    CASH vs CREDIT:
    - customer_id NULL: cash sale, always fully paid at creation
    - customer_id set: may stay "pending" until payments cover the total
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint("amount_paid_cents >= 0", name="ck_sales_paid_non_negative"),
        db.CheckConstraint("amount_paid_cents <= total_price_cents", name="ck_sales_paid_within_total"),
        db.CheckConstraint("status IN ('pending', 'paid')", name="ck_sales_status"),
        # A debt must be attributable to a customer
        db.CheckConstraint("status = 'paid' OR customer_id IS NOT NULL", name="ck_sales_pending_has_customer"),
        # Debt lookups: pending sales per customer, oldest first
        db.Index("ix_sales_customer_status_created", "customer_id", "status", "created_at"),
        db.Index("ix_sales_salesperson_created", "salesperson_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)

    # Identity comes from the external auth layer; no users table here
    salesperson_id = db.Column(db.Integer, nullable=False)

    quantity = db.Column(db.Integer, nullable=False)

    # Captured at sale time (all amounts in cents)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)  # pending, paid

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product", backref=db.backref("sales", lazy=True))
    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    payments = db.relationship(
        "Payment",
        back_populates="sale",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def owed_cents(self) -> int:
        return self.total_price_cents - self.amount_paid_cents

    def __repr__(self) -> str:
        return (
            f"<Sale id={self.id} product_id={self.product_id} status={self.status!r} "
            f"paid={self.amount_paid_cents}/{self.total_price_cents}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "customer_id": self.customer_id,
            "salesperson_id": self.salesperson_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_price_cents": self.total_price_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "owed_cents": self.owed_cents,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "version_id": self.version_id,
        }


class Payment(db.Model):
    """
    Money received against exactly one sale.

    IMMUTABLE: Payments are never updated. They disappear only together with
    their sale (delete_sale cascade).

    INVARIANT: SUM(amount_cents) over a sale's payments == sale.amount_paid_cents
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_payments_amount_positive"),
        db.Index("ix_payments_sale_created", "sale_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)

    # Attribution
    received_by_user_id = db.Column(db.Integer, nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    sale = db.relationship("Sale", back_populates="payments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "amount_cents": self.amount_cents,
            "received_by_user_id": self.received_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
