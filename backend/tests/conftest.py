"""
Pytest fixtures for the bakery backend.

Tests run against an in-memory SQLite database. The schema is created fresh
for every test and the chart of accounts plus the default settings are
seeded, so each test starts from a clean shop with an empty ledger.
"""
import os
import tempfile

# Must be set before database.py is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "bakery-test-logs"))
os.environ.pop("SMTP_HOST", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine, get_db
from main import app
from models.categories import Category
from models.products import Product
from models.users import User, UserRole
from models.addresses import Address
from crud.chart_of_accounts import initialize_chart_of_accounts
from crud.settings import initialize_default_settings, SettingsCache
from crud.ledger import AccountResolver
from utils.auth_utils import create_access_token, hash_password

PASSWORD = "secret123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    initialize_chart_of_accounts(session)
    initialize_default_settings(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def resolver():
    return AccountResolver()


@pytest.fixture
def client(db, resolver):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.account_resolver = resolver
    app.state.settings_cache = SettingsCache()
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, email, role, name):
    user = User(email=email, name=name, hashed_password=hash_password(PASSWORD), role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers(user):
    token = create_access_token({"sub": user.email, "id": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db):
    """Create a user and return it with ready-made auth headers."""
    def _make(email, role=UserRole.CUSTOMER, name=None):
        user = _make_user(db, email, role, name)
        return user, _headers(user)

    return _make


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin@bakery.test", UserRole.ADMIN, "Admin")


@pytest.fixture
def staff_user(db):
    return _make_user(db, "staff@bakery.test", UserRole.STAFF, "Staff")


@pytest.fixture
def customer(db):
    return _make_user(db, "layla@example.com", UserRole.CUSTOMER, "Layla")


@pytest.fixture
def admin_headers(admin_user):
    return _headers(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return _headers(staff_user)


@pytest.fixture
def customer_headers(customer):
    return _headers(customer)


@pytest.fixture
def category(db):
    category = Category(name="Breads", slug="breads", display_order=1, is_active=True)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_product(db, category):
    def _make(name="Sourdough Loaf", price="50.00", cost=None, stock=20, tracking=True, slug=None):
        product = Product(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price=Decimal(price),
            cost=Decimal(cost) if cost is not None else None,
            category_id=category.id,
            is_active=True,
            inventory_tracking_enabled=tracking,
            stock_qty=stock,
            low_stock_threshold=5,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def address(db, customer):
    address = Address(customer_id=customer.id, label="Home", line1="12 Nile St", city="Cairo",
                      area="Zamalek", is_default=True)
    db.add(address)
    db.commit()
    db.refresh(address)
    return address


@pytest.fixture
def place_order(client, customer_headers, address):
    """Fill the customer's cart and check out through the API; returns the order JSON."""
    def _place(items, fulfillment_type="DELIVERY"):
        for product, quantity in items:
            response = client.post("/cart/items", json={"product_id": product.id, "quantity": quantity},
                                   headers=customer_headers)
            assert response.status_code == 200, response.text
        payload = {"fulfillment_type": fulfillment_type}
        if fulfillment_type == "DELIVERY":
            payload["address_id"] = address.id
        response = client.post("/checkout/", json=payload, headers=customer_headers)
        assert response.status_code == 201, response.text
        return response.json()["order"]

    return _place


@pytest.fixture
def advance_order(client, staff_headers):
    """Walk an order through the given statuses via the admin API."""
    def _advance(order_id, *statuses):
        response = None
        for status in statuses:
            response = client.patch(f"/admin/orders/{order_id}/status", json={"status": status},
                                    headers=staff_headers)
            assert response.status_code == 200, response.text
        return response.json() if response is not None else None

    return _advance
