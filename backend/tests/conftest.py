"""
Pytest fixtures for the POS backend tests.

Provides a fresh in-memory database per test, users for each role, their
auth headers, a small catalog, and the in-memory record store.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from liquor_pos import create_app
from liquor_pos.config import TestingConfig
from liquor_pos.extensions import db
from liquor_pos.models import Customer, Item, Promotion
from liquor_pos.services.auth_service import create_user
from liquor_pos.time_utils import utcnow

from fakes import InMemoryRecordStore

PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

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
    return db.session


def _make_user(username: str, role: str):
    return create_user(username, PASSWORD, role=role, rounds=TestingConfig.BCRYPT_ROUNDS)


@pytest.fixture(scope='function')
def admin_user(db_session):
    return _make_user("admin", "admin")


@pytest.fixture(scope='function')
def manager_user(db_session):
    return _make_user("manager", "manager")


@pytest.fixture(scope='function')
def cashier_user(db_session):
    return _make_user("cashier", "cashier")


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.username))


@pytest.fixture(scope='function')
def manager_headers(client, manager_user):
    return auth_headers(get_auth_token(client, manager_user.username))


@pytest.fixture(scope='function')
def cashier_headers(client, cashier_user):
    return auth_headers(get_auth_token(client, cashier_user.username))


@pytest.fixture(scope='function')
def seed(db_session):
    """Two items, one customer and a promotion active today on the vodka."""
    today = utcnow().date()
    vodka = Item(
        barcode="082000727606", name="Smirnoff No. 21", quantity=10, price=Decimal("20.00"),
        average_cost=Decimal("12.00"), size="750ml", category="Vodka", supplier="Diageo",
        units_per_case=12, case_cost=Decimal("144.00"), rank=1,
    )
    wine = Item(
        barcode="085000024218", name="Kendall-Jackson Chardonnay", quantity=5, price=Decimal("15.00"),
        average_cost=Decimal("10.00"), size="750ml", category="Wine", supplier="Jackson Family",
        units_per_case=12, case_cost=Decimal("120.00"), rank=2,
    )
    customer = Customer(name="Dana Whitfield", phone="555-0142", email="dana@example.com")
    promo = Promotion(
        name="Vodka Week", type="percentage", value=Decimal("10"),
        start_date=today - timedelta(days=1), end_date=today + timedelta(days=1),
        applicable_items="Smirnoff No. 21",
    )
    db_session.add_all([vodka, wine, customer, promo])
    db_session.commit()
    return {"vodka": vodka.id, "wine": wine.id, "customer": customer.id, "promotion": promo.id}


@pytest.fixture(scope='function')
def memory_store():
    return InMemoryRecordStore()


def add_transaction(session, cashier_id, amount, *, date=None, customer_id=None,
                    type="sale", status="completed", payment_method="credit"):
    """Insert a transaction row directly, bypassing checkout."""
    from liquor_pos.models import Transaction

    txn = Transaction(
        date=date or utcnow(),
        type=type,
        amount=Decimal(str(amount)),
        status=status,
        payment_method=payment_method,
        items=[],
        customer_id=customer_id,
        cashier_id=cashier_id,
    )
    session.add(txn)
    session.commit()
    return txn.id
