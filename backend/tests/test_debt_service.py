"""
Debt query tests.

Verifies:
- Debtor list has one entry per customer, regardless of how many debts
- Queries are read-only and repeatable
- Salespeople see only rows for sales they recorded
- Payment history is newest first and carries the product name
"""

from datetime import datetime, timedelta

import pytest

from posledger.extensions import db
from posledger.models import Sale
from posledger.services import debt_service, ledger_service
from posledger.services.errors import CustomerNotFound
from posledger.time_utils import utcnow


def _credit_sale(product, customer, actor, quantity=1, tendered=0):
    return ledger_service.record_sale(
        product_id=product.id,
        quantity=quantity,
        amount_tendered_cents=tendered,
        customer_id=customer.id,
        actor=actor,
    )


class TestListCustomersWithDebt:
    def test_one_entry_per_customer(self, product, customer, other_customer, manager):
        _credit_sale(product, customer, manager)
        _credit_sale(product, customer, manager)
        _credit_sale(product, other_customer, manager)

        debtors = debt_service.list_customers_with_debt(manager)

        assert [c.id for c in debtors] == [customer.id, other_customer.id]

    def test_settled_customer_drops_off(self, product, customer, manager):
        sale = _credit_sale(product, customer, manager)
        assert [c.id for c in debt_service.list_customers_with_debt(manager)] == [customer.id]

        ledger_service.record_item_payment(sale.id, 1000, manager)

        assert debt_service.list_customers_with_debt(manager) == []

    def test_repeatable(self, product, customer, manager):
        _credit_sale(product, customer, manager, tendered=300)

        first = [c.id for c in debt_service.list_customers_with_debt(manager)]
        second = [c.id for c in debt_service.list_customers_with_debt(manager)]

        assert first == second == [customer.id]
        assert db.session.query(Sale).one().amount_paid_cents == 300

    def test_salesperson_sees_only_own_debtors(self, product, customer, other_customer, salesperson, other_salesperson, manager):
        _credit_sale(product, customer, salesperson)
        _credit_sale(product, other_customer, other_salesperson)

        assert [c.id for c in debt_service.list_customers_with_debt(salesperson)] == [customer.id]
        assert [c.id for c in debt_service.list_customers_with_debt(other_salesperson)] == [other_customer.id]
        assert len(debt_service.list_customers_with_debt(manager)) == 2


class TestListOutstandingSales:
    def test_oldest_first_with_owed(self, make_product, customer, manager):
        first = _credit_sale(make_product(price_cents=3000), customer, manager, tendered=1000)
        second = _credit_sale(make_product(price_cents=5000), customer, manager)

        sales = debt_service.list_outstanding_sales(customer.id, manager)

        assert [s.id for s in sales] == [first.id, second.id]
        assert [s.owed_cents for s in sales] == [2000, 5000]
        assert debt_service.get_total_debt(customer.id, manager) == 7000

    def test_excludes_paid_sales(self, product, customer, manager):
        _credit_sale(product, customer, manager, tendered=1000)

        assert debt_service.list_outstanding_sales(customer.id, manager) == []

    def test_unknown_customer(self, manager):
        with pytest.raises(CustomerNotFound):
            debt_service.list_outstanding_sales(9999, manager)

    def test_salesperson_scope(self, product, customer, salesperson, other_salesperson):
        mine = _credit_sale(product, customer, salesperson)
        _credit_sale(product, customer, other_salesperson)

        assert [s.id for s in debt_service.list_outstanding_sales(customer.id, salesperson)] == [mine.id]


class TestListPayments:
    def test_newest_first_with_product_name(self, make_product, customer, manager):
        rice = make_product(price_cents=3000, name="Rice 5kg")
        oil = make_product(price_cents=5000, name="Cooking Oil 1L")
        _credit_sale(rice, customer, manager, tendered=500)
        _credit_sale(oil, customer, manager)

        ledger_service.record_customer_payment(customer.id, 4000, manager)

        payments = debt_service.list_payments(customer.id, manager)

        assert len(payments) == 3
        ids = [p["id"] for p in payments]
        assert ids == sorted(ids, reverse=True)
        assert payments[0]["product_name"] == "Cooking Oil 1L"
        assert payments[0]["amount_cents"] == 1500
        assert payments[1]["product_name"] == "Rice 5kg"
        assert payments[1]["amount_cents"] == 2500
        assert payments[2]["amount_cents"] == 500

    def test_empty_when_no_payments(self, product, customer, manager):
        _credit_sale(product, customer, manager)

        assert debt_service.list_payments(customer.id, manager) == []

    def test_unknown_customer(self, manager):
        with pytest.raises(CustomerNotFound):
            debt_service.list_payments(9999, manager)

    def test_salesperson_scope(self, product, customer, salesperson, other_salesperson, manager):
        _credit_sale(product, customer, salesperson, tendered=100)
        _credit_sale(product, customer, other_salesperson, tendered=200)

        assert [p["amount_cents"] for p in debt_service.list_payments(customer.id, salesperson)] == [100]
        assert len(debt_service.list_payments(customer.id, manager)) == 2


class TestListSalesForDay:
    def test_today_newest_first(self, product, customer, manager):
        first = _credit_sale(product, customer, manager)
        second = _credit_sale(product, customer, manager)

        items = debt_service.list_sales_for_day(utcnow().date(), manager)

        assert [i["id"] for i in items] == [second.id, first.id]
        assert items[0]["product_sku"] == product.sku

    def test_other_days_excluded(self, product, customer, manager):
        sale = _credit_sale(product, customer, manager)
        yesterday = utcnow() - timedelta(days=1)
        db.session.get(Sale, sale.id).created_at = yesterday
        db.session.commit()

        assert debt_service.list_sales_for_day(utcnow().date(), manager) == []
        items = debt_service.list_sales_for_day(yesterday.date(), manager)
        assert [i["id"] for i in items] == [sale.id]

    def test_day_boundaries(self, product, customer, manager):
        sale = _credit_sale(product, customer, manager)
        db.session.get(Sale, sale.id).created_at = datetime(2026, 3, 1, 0, 0, 0)
        db.session.commit()

        assert [i["id"] for i in debt_service.list_sales_for_day(datetime(2026, 3, 1).date(), manager)] == [sale.id]
        assert debt_service.list_sales_for_day(datetime(2026, 2, 28).date(), manager) == []


class TestGetSaleSummary:
    def test_includes_payments(self, product, customer, salesperson):
        sale = _credit_sale(product, customer, salesperson, quantity=2, tendered=500)
        ledger_service.record_item_payment(sale.id, 700, salesperson)

        summary = debt_service.get_sale_summary(sale.id, salesperson)

        assert summary["sale"]["id"] == sale.id
        assert summary["sale"]["owed_cents"] == 800
        assert [p["amount_cents"] for p in summary["payments"]] == [500, 700]

    def test_hidden_from_other_salesperson(self, product, customer, salesperson, other_salesperson):
        sale = _credit_sale(product, customer, salesperson)

        assert debt_service.get_sale_summary(sale.id, other_salesperson) is None
