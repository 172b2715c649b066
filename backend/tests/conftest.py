"""
Pytest fixtures for PosGo backend tests.

Provides test database setup, catalog/shift fixtures, and test client.
"""

import pytest
from posgo import create_app
from posgo.extensions import db
from posgo.services import inventory_service, shift_service, settings_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'POS_TAX_RATE': 0.18,
        'POS_PRICES_INCLUDE_TAX': True,
        'POS_CURRENCY': 'S/.',
        'POS_STORE_NAME': 'PosGo Test',
        'POS_LOW_STOCK_THRESHOLD': 5,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
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
        db.session.remove()
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        db.session.remove()


@pytest.fixture(scope='function')
def tax_inclusive(db_session):
    """Store with prices that already include 18% tax."""
    return settings_service.update_settings({"tax_rate": 0.18, "prices_include_tax": True})


@pytest.fixture(scope='function')
def tax_exclusive(db_session):
    """Store that adds 18% tax on top of shelf prices."""
    return settings_service.update_settings({"tax_rate": 0.18, "prices_include_tax": False})


@pytest.fixture(scope='function')
def soda(db_session):
    """Simple product without variants."""
    return inventory_service.create_product(
        name="Gaseosa 500ml",
        category="Bebidas",
        price=10.0,
        cost=6.0,
        stock=10,
        barcode="7750000000011",
    )


@pytest.fixture(scope='function')
def shirt(db_session):
    """Product with size variants; product stock is the variant sum (12)."""
    return inventory_service.create_product(
        name="Polo Basico",
        category="Ropa",
        price=35.0,
        cost=18.0,
        variants=[
            {"name": "S", "price": 35.0, "stock": 4, "barcode": "7750000000042"},
            {"name": "M", "price": 38.0, "stock": 6, "cost": 20.0, "barcode": "7750000000059"},
            {"name": "L", "price": 38.0, "stock": 2},
        ],
    )


@pytest.fixture(scope='function')
def open_shift(db_session):
    """Open drawer with a 100.00 starting float."""
    return shift_service.open_shift(100)
