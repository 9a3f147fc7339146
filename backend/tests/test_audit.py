"""
Ledger audit and CLI tests.
"""

from posledger.extensions import db
from posledger.models import Product, Sale
from posledger.services import audit_service, ledger_service


def _codes(violations):
    return sorted(v.code for v in violations)


class TestCheckInvariants:
    def test_clean_after_normal_operations(self, make_product, customer, salesperson, manager):
        rice = make_product(price_cents=3000)
        oil = make_product(price_cents=5000)
        ledger_service.record_sale(product_id=rice.id, quantity=1, amount_tendered_cents=3000, actor=salesperson)
        first = ledger_service.record_sale(
            product_id=rice.id, quantity=1, amount_tendered_cents=0, customer_id=customer.id, actor=salesperson,
        )
        ledger_service.record_sale(
            product_id=oil.id, quantity=1, amount_tendered_cents=1000, customer_id=customer.id, actor=salesperson,
        )
        ledger_service.record_customer_payment(customer.id, 4500, salesperson)
        ledger_service.delete_sale(first.id, manager)

        assert audit_service.check_invariants() == []

    def test_flags_paid_amount_without_payments(self, product, customer, salesperson):
        sale = ledger_service.record_sale(
            product_id=product.id, quantity=1, amount_tendered_cents=0, customer_id=customer.id, actor=salesperson,
        )
        db.session.get(Sale, sale.id).amount_paid_cents = 400
        db.session.commit()

        violations = audit_service.check_invariants()

        assert _codes(violations) == ["PAYMENT_SUM_MISMATCH"]
        assert violations[0].entity_id == sale.id

    def test_flags_status_mismatch(self, product, customer, salesperson):
        sale = ledger_service.record_sale(
            product_id=product.id, quantity=2, amount_tendered_cents=500, customer_id=customer.id, actor=salesperson,
        )
        db.session.get(Sale, sale.id).status = "paid"
        db.session.commit()

        assert _codes(audit_service.check_invariants()) == ["STATUS_MISMATCH"]

    def test_flags_total_mismatch(self, product, salesperson):
        sale = ledger_service.record_sale(
            product_id=product.id, quantity=2, amount_tendered_cents=2000, actor=salesperson,
        )
        db.session.get(Sale, sale.id).unit_price_cents = 900
        db.session.commit()

        violation = audit_service.check_invariants()[0]
        assert violation.code == "TOTAL_MISMATCH"
        assert violation.to_dict()["entity_type"] == "sale"


class TestLedgerCli:
    def test_init_db(self, app, db_session):
        result = app.test_cli_runner().invoke(args=['ledger', 'init-db'])

        assert result.exit_code == 0
        assert 'Tables created' in result.output

    def test_seed_demo_then_audit(self, app, db_session):
        runner = app.test_cli_runner()

        seeded = runner.invoke(args=['ledger', 'seed-demo'])
        assert seeded.exit_code == 0, seeded.output
        assert db.session.query(Product).count() == 3
        assert db.session.query(Sale).count() == 2

        audited = runner.invoke(args=['ledger', 'audit'])
        assert audited.exit_code == 0
        assert 'No ledger invariant violations' in audited.output

    def test_seed_demo_skips_existing_products(self, app, db_session):
        runner = app.test_cli_runner()
        runner.invoke(args=['ledger', 'seed-demo'])

        again = runner.invoke(args=['ledger', 'seed-demo'])

        assert again.exit_code == 0
        assert 'already exists' in again.output
        assert db.session.query(Product).count() == 3
        assert db.session.query(Sale).count() == 4

    def test_audit_exits_nonzero_on_violation(self, app, product, customer, salesperson):
        sale = ledger_service.record_sale(
            product_id=product.id, quantity=1, amount_tendered_cents=0, customer_id=customer.id, actor=salesperson,
        )
        db.session.get(Sale, sale.id).amount_paid_cents = 400
        db.session.commit()

        result = app.test_cli_runner().invoke(args=['ledger', 'audit'])

        assert result.exit_code == 1
        assert 'PAYMENT_SUM_MISMATCH' in result.output
