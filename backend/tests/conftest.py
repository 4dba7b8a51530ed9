"""
Pytest fixtures for the POS back office tests.

Provides test database setup, test client, and factories for product
variations and orders.
"""

import pytest
from pos_backoffice import create_app
from pos_backoffice.extensions import db
from pos_backoffice.models import Order, ProductVariation
from pos_backoffice.services.order_line_service import LedgerLine, encode_ledger


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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
def runner(app):
    """Create CLI runner."""
    return app.test_cli_runner()


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
def make_variation(db_session):
    """Factory: create a committed ProductVariation."""
    def _make(barcode: str, quantity: int = 0, name: str | None = None) -> ProductVariation:
        variation = ProductVariation(barcode=barcode, quantity=quantity, name=name)
        db_session.add(variation)
        db_session.commit()
        return variation
    return _make


@pytest.fixture(scope='function')
def make_order(db_session):
    """
    Factory: create a committed Order.

    lines is a list of (barcode, price_cents, quantity); amount_cents
    defaults to the ledger total. raw_items stores the ledger text verbatim.
    """
    def _make(lines=(), amount_cents: int | None = None, raw_items: str | None = None) -> Order:
        ledger = [LedgerLine(barcode=b, price_cents=p, quantity=q) for b, p, q in lines]
        if amount_cents is None:
            amount_cents = sum(line.price_cents * line.quantity for line in ledger)
        items = raw_items if raw_items is not None else encode_ledger(ledger)
        order = Order(items=items, amount_cents=amount_cents)
        db_session.add(order)
        db_session.commit()
        return order
    return _make


@pytest.fixture(scope='function')
def mug_order(make_variation, make_order):
    """Order with A1 x3 @ 10.00 (amount 30.00) and variation A1 with 5 in stock."""
    variation = make_variation("A1", quantity=5, name="Blue Mug")
    order = make_order([("A1", 1000, 3)])
    return order, variation
