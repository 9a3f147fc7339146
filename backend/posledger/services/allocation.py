# Overview: FIFO distribution of one payment across outstanding debts.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Allocation:
    """Portion of a payment applied to one sale."""
    sale_id: int
    amount_cents: int

    def to_dict(self) -> dict:
        return {"sale_id": self.sale_id, "amount_cents": self.amount_cents}


def allocate_fifo(amount_cents: int, debts: Iterable[tuple[int, int]]) -> tuple[list[Allocation], int]:
    """
    Split amount_cents across debts in the order given.

    Args:
        amount_cents: Payment to distribute (positive)
        debts: (sale_id, owed_cents) pairs, oldest first

    Returns:
        (allocations, unapplied_cents). Each debt receives at most what it
        owes; debts with nothing owed are skipped. unapplied_cents is what is
        left once every debt is cleared.
    """
    remaining = amount_cents
    allocations: list[Allocation] = []

    for sale_id, owed_cents in debts:
        if remaining <= 0:
            break
        if owed_cents <= 0:
            continue
        applied = min(remaining, owed_cents)
        allocations.append(Allocation(sale_id=sale_id, amount_cents=applied))
        remaining -= applied

    return allocations, remaining
