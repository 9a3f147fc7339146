"""
Pytest fixtures for posledger backend tests.

Provides test database setup, actors for each role, catalog and customer
factories, and a test client.
"""

import pytest
from sqlalchemy import func

from posledger import create_app
from posledger.extensions import db
from posledger.models import Customer, Payment, Product, Sale
from posledger.permissions import ROLE_MANAGER, ROLE_SALESPERSON
from posledger.services.permission_service import Actor


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LEDGER_RETRY_BACKOFF_SECONDS': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def manager():
    return Actor(user_id=1, role=ROLE_MANAGER)


@pytest.fixture(scope='function')
def salesperson():
    return Actor(user_id=2, role=ROLE_SALESPERSON)


@pytest.fixture(scope='function')
def other_salesperson():
    return Actor(user_id=3, role=ROLE_SALESPERSON)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create a product with a given price and stock."""
    counter = {"n": 0}

    def _make(price_cents=1000, quantity=10, name=None):
        counter["n"] += 1
        product = Product(
            sku=f"SKU-{counter['n']:03d}",
            name=name or f"Product {counter['n']}",
            price_cents=price_cents,
            quantity=quantity,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """Product priced at 1000 cents with 10 in stock."""
    return make_product(price_cents=1000, quantity=10, name="Rice 5kg")


@pytest.fixture(scope='function')
def customer(db_session):
    customer = Customer(name="Amina Yusuf", phone="0700111222")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def other_customer(db_session):
    customer = Customer(name="Brian Otieno", phone="0700333444")
    db_session.add(customer)
    db_session.commit()
    return customer


def payments_total(sale_id: int) -> int:
    """SUM(amount_cents) over a sale's payments."""
    return db.session.query(
        func.coalesce(func.sum(Payment.amount_cents), 0)
    ).filter(Payment.sale_id == sale_id).scalar()


def assert_sale_consistent(sale_id: int) -> Sale:
    """Reload a sale and check paid amount, bounds and status agree."""
    sale = db.session.get(Sale, sale_id)
    assert sale is not None
    assert sale.amount_paid_cents == payments_total(sale_id)
    assert 0 <= sale.amount_paid_cents <= sale.total_price_cents
    assert (sale.status == "paid") == (sale.amount_paid_cents == sale.total_price_cents)
    return sale


def actor_headers(actor: Actor) -> dict:
    """Helper to create identity headers as the upstream auth layer would."""
    return {'X-Actor-Id': str(actor.user_id), 'X-Actor-Role': actor.role}
