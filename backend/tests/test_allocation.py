"""
FIFO allocation tests.

Pure function; no database.
"""

from posledger.services.allocation import Allocation, allocate_fifo


class TestAllocateFifo:
    def test_oldest_debt_settled_first(self):
        allocations, unapplied = allocate_fifo(4000, [(1, 3000), (2, 5000)])

        assert allocations == [Allocation(1, 3000), Allocation(2, 1000)]
        assert unapplied == 0

    def test_exact_amount_clears_everything(self):
        allocations, unapplied = allocate_fifo(8000, [(1, 3000), (2, 5000)])

        assert [a.amount_cents for a in allocations] == [3000, 5000]
        assert unapplied == 0

    def test_excess_is_reported_not_allocated(self):
        allocations, unapplied = allocate_fifo(10000, [(1, 3000), (2, 5000)])

        assert sum(a.amount_cents for a in allocations) == 8000
        assert unapplied == 2000

    def test_small_payment_touches_only_oldest(self):
        allocations, unapplied = allocate_fifo(500, [(1, 3000), (2, 5000)])

        assert allocations == [Allocation(1, 500)]
        assert unapplied == 0

    def test_settled_debts_are_skipped(self):
        allocations, _ = allocate_fifo(1000, [(1, 0), (2, 700), (3, 900)])

        assert allocations == [Allocation(2, 700), Allocation(3, 300)]

    def test_no_debts(self):
        allocations, unapplied = allocate_fifo(1000, [])

        assert allocations == []
        assert unapplied == 1000

    def test_each_sale_gets_one_allocation(self):
        debts = [(sale_id, 100) for sale_id in range(1, 6)]
        allocations, _ = allocate_fifo(450, debts)

        sale_ids = [a.sale_id for a in allocations]
        assert sale_ids == [1, 2, 3, 4, 5]
        assert len(set(sale_ids)) == len(sale_ids)
        assert allocations[-1].amount_cents == 50
