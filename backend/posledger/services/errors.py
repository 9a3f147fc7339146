# Overview: Error taxonomy shared by the ledger services.

"""
Ledger error kinds.

PERMANENT (caller must change its input):
- ValidationError: malformed amount/quantity
- InsufficientStock: sale quantity exceeds on-hand
- MissingCustomer: credit sale without a customer
- OverPayment: payment against a sale with nothing owed
- ProductNotFound / CustomerNotFound / SaleNotFound: stale reference
- NoOutstandingDebt: customer payment with no pending sales

TRANSIENT (caller should retry with backoff):
- TransientConflict: lock contention or version conflict outlived the
  internal retry budget

All permanent errors are raised before any mutation is applied.
"""


class LedgerError(Exception):
    """Base class for ledger operation errors."""
    kind = "ledger_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self), "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(LedgerError):
    kind = "validation_error"


class ProductNotFound(LedgerError):
    kind = "product_not_found"


class CustomerNotFound(LedgerError):
    kind = "customer_not_found"


class SaleNotFound(LedgerError):
    kind = "sale_not_found"


class InsufficientStock(LedgerError):
    kind = "insufficient_stock"


class MissingCustomer(LedgerError):
    kind = "missing_customer"


class NoOutstandingDebt(LedgerError):
    kind = "no_outstanding_debt"


class OverPayment(LedgerError):
    kind = "over_payment"


class TransientConflict(LedgerError):
    kind = "transient_conflict"


NOT_FOUND_ERRORS = (ProductNotFound, CustomerNotFound, SaleNotFound)
