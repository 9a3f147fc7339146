from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer a credit sale can be attributed to.

    Created on demand while recording a credit sale. Customers are never
    edited; a customer "has debt" while any of their sales is pending.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_name_phone", "name", "phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
        }
