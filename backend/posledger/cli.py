# Overview: Flask CLI command group for bootstrap, demo data, and ledger audit.

# backend/posledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to posledger (PowerShell: $env:FLASK_APP="posledger").
# - Use: python -m flask <group> <command> [options]
#
# - python -m flask ledger init-db
#   Create any missing tables (idempotent).
# - python -m flask ledger reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask ledger seed-demo
#   Add a few products, a cash sale, and a partly paid credit sale.
# - python -m flask ledger audit
#   Check ledger invariants; exits 1 if any are violated.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .permissions import ROLE_MANAGER
from .services import audit_service, catalog_service, customer_service, ledger_service
from .services.permission_service import Actor


@click.group('ledger')
def ledger_group():
    """Ledger bootstrap, demo data, and audit commands."""


@ledger_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@ledger_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask ledger seed-demo' for sample data.")


@ledger_group.command('seed-demo')
@click.option('--user-id', default=1, type=int, help='Manager user id to attribute demo sales to')
@with_appcontext
def seed_demo(user_id):
    """
    Seed demo catalog and sales.

    Skips products whose SKU already exists; always records new sales.
    """
    actor = Actor(user_id=user_id, role=ROLE_MANAGER)

    demo_products = [
        ("RICE-5KG", "Rice 5kg", 1250, 40),
        ("OIL-1L", "Cooking Oil 1L", 480, 25),
        ("SOAP-BAR", "Soap Bar", 90, 8),
    ]

    for sku, name, price_cents, quantity in demo_products:
        if db.session.query(Product).filter_by(sku=sku).first():
            click.echo(f"WARN  Product '{sku}' already exists, skipping...")
            continue
        catalog_service.create_product(sku=sku, name=name, price_cents=price_cents, quantity=quantity)
        click.echo(f"PASS Created product: {name} ({sku}) x{quantity}")

    rice = db.session.query(Product).filter_by(sku="RICE-5KG").one()
    oil = db.session.query(Product).filter_by(sku="OIL-1L").one()
    customer = customer_service.find_or_create_customer("Demo Customer", "0000000000")

    cash_sale = ledger_service.record_sale(
        product_id=oil.id,
        quantity=2,
        amount_tendered_cents=2 * oil.price_cents,
        actor=actor,
    )
    click.echo(f"PASS Cash sale {cash_sale.id}: {cash_sale.total_price_cents} cents, {cash_sale.status}")

    credit_sale = ledger_service.record_sale(
        product_id=rice.id,
        quantity=1,
        amount_tendered_cents=500,
        customer_id=customer.id,
        actor=actor,
    )
    click.echo(
        f"PASS Credit sale {credit_sale.id}: {credit_sale.owed_cents} cents owed by {customer.name}"
    )


@ledger_group.command('audit')
@with_appcontext
def audit():
    """Check ledger invariants over all stored sales and products."""
    violations = audit_service.check_invariants()

    if not violations:
        click.echo("PASS No ledger invariant violations.")
        return

    for v in violations:
        click.echo(f"FAIL {v.code} {v.entity_type}#{v.entity_id}: {v.message}")
    click.echo(f"\n{len(violations)} violation(s) found.")
    raise SystemExit(1)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(ledger_group)
