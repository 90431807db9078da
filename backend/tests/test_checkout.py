"""Checkout: one order, its stock movements, COD tracking and placement entries in one go."""
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from models.cod_tracking import CODTracking
from models.ledger_entries import LedgerEntry
from models.orders import Order
from models.addresses import Address
from models.users import User, UserRole
from utils.clock import local_now
from utils import email_service


def test_delivery_order_is_placed(client, db, customer_headers, make_product, place_order):
    bread = make_product(price="50.00", stock=20)
    order = place_order([(bread, 3)])

    assert order["order_number"] == f"DBY-{local_now().year}-0001"
    assert order["status"] == "PENDING"
    assert order["payment_method"] == "COD"
    assert order["payment_status"] == "UNPAID"
    assert Decimal(order["sub_total"]) == Decimal("150.00")
    assert Decimal(order["delivery_fee"]) == Decimal("25.00")
    assert Decimal(order["total"]) == Decimal("175.00")
    assert order["delivery_address_snapshot"]["line1"] == "12 Nile St"
    assert [h["status"] for h in order["status_history"]] == ["PENDING"]
    assert order["items"][0]["quantity"] == 3

    db.expire_all()
    assert bread.stock_qty == 17

    tracking = db.query(CODTracking).filter(CODTracking.order_id == order["id"]).one()
    assert tracking.amount_due == Decimal("175.00")
    assert tracking.collected_at is None

    entries = db.query(LedgerEntry).filter(LedgerEntry.order_id == order["id"]).all()
    assert len(entries) == 3
    assert len({e.transaction_id for e in entries}) == 1

    cart = client.get("/cart/", headers=customer_headers).json()
    assert cart["items"] == []


def test_free_delivery_above_threshold(make_product, place_order):
    bread = make_product(price="50.00", stock=20)
    order = place_order([(bread, 5)])

    assert Decimal(order["delivery_fee"]) == Decimal("0.00")
    assert Decimal(order["total"]) == Decimal("250.00")


def test_pickup_has_no_delivery_fee(make_product, place_order):
    bread = make_product(price="40.00", stock=20)
    order = place_order([(bread, 1)], fulfillment_type="PICKUP")

    assert order["fulfillment_type"] == "PICKUP"
    assert Decimal(order["delivery_fee"]) == Decimal("0.00")
    assert order["delivery_address_snapshot"] is None


def test_order_numbers_are_sequential(make_product, place_order):
    bread = make_product(stock=50)
    first = place_order([(bread, 1)])
    second = place_order([(bread, 1)])

    assert first["order_number"].endswith("-0001")
    assert second["order_number"].endswith("-0002")


def test_empty_cart_is_rejected(client, customer_headers, address):
    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY", "address_id": address.id},
                           headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"


def test_delivery_requires_address(client, customer_headers, make_product):
    bread = make_product()
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=customer_headers)

    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY"}, headers=customer_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"]


def test_notes_length_is_validated(client, customer_headers, make_product):
    bread = make_product()
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=customer_headers)

    response = client.post("/checkout/", json={"fulfillment_type": "PICKUP", "notes": "x" * 501},
                           headers=customer_headers)
    assert response.status_code == 400


def test_insufficient_stock_is_reported_per_item(client, db, customer_headers, make_product, address):
    bread = make_product(stock=10)
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 4}, headers=customer_headers)
    bread.stock_qty = 1
    db.commit()

    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY", "address_id": address.id},
                           headers=customer_headers)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Insufficient inventory"
    assert detail["details"][0]["product_id"] == bread.id
    assert detail["details"][0]["available"] == 1

    db.expire_all()
    assert bread.stock_qty == 1
    assert db.query(LedgerEntry).count() == 0


def test_untracked_products_skip_stock_checks(db, make_product, place_order):
    cake = make_product(name="Birthday Cake", price="300.00", stock=0, tracking=False)
    order = place_order([(cake, 2)])

    assert Decimal(order["total"]) == Decimal("600.00")
    db.expire_all()
    assert cake.stock_qty == 0


def test_address_must_belong_to_customer(client, db, customer_headers, make_product):
    other = User(email="other@example.com", hashed_password="x", role=UserRole.CUSTOMER, is_active=True)
    db.add(other)
    db.commit()
    foreign = Address(customer_id=other.id, label="Work", line1="1 Tahrir Sq", city="Cairo", is_default=True)
    db.add(foreign)
    db.commit()

    bread = make_product()
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=customer_headers)
    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY", "address_id": foreign.id},
                           headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Selected address not found"


def test_checkout_requires_login(client):
    response = client.post("/checkout/", json={"fulfillment_type": "PICKUP"})
    assert response.status_code == 401


def test_delivery_fee_follows_settings(client, admin_headers, make_product, place_order):
    client.put("/admin/settings/delivery_fee", json={"value": "30"}, headers=admin_headers)
    client.put("/admin/settings/free_delivery_threshold", json={"value": "0"}, headers=admin_headers)

    bread = make_product(price="50.00", stock=20)
    order = place_order([(bread, 10)])
    assert Decimal(order["delivery_fee"]) == Decimal("30.00")


def test_failed_ledger_write_rolls_back_the_whole_checkout(client, db, customer_headers, make_product, address,
                                                           monkeypatch):
    bread = make_product(price="50.00", stock=20)
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 2}, headers=customer_headers)
    real_flush = db.flush

    def fail_on_ledger_rows(*args, **kwargs):
        if any(isinstance(obj, LedgerEntry) for obj in db.new):
            raise OperationalError("INSERT INTO ledger_entries", {}, Exception("disk I/O error"))
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", fail_on_ledger_rows)
    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY", "address_id": address.id},
                           headers=customer_headers)
    monkeypatch.undo()

    assert response.status_code == 500
    assert db.query(Order).count() == 0
    assert db.query(LedgerEntry).count() == 0
    assert db.query(CODTracking).count() == 0
    db.expire_all()
    assert bread.stock_qty == 20
    cart = client.get("/cart/", headers=customer_headers).json()
    assert [item["quantity"] for item in cart["items"]] == [2]


def test_maintenance_mode_stops_checkout(client, db, admin_headers, customer_headers, make_product, address):
    client.put("/admin/settings/maintenance_mode", json={"value": "true"}, headers=admin_headers)
    bread = make_product()
    client.post("/cart/items", json={"product_id": bread.id, "quantity": 1}, headers=customer_headers)

    response = client.post("/checkout/", json={"fulfillment_type": "DELIVERY", "address_id": address.id},
                           headers=customer_headers)

    assert response.status_code == 503
    assert db.query(Order).count() == 0


class TestConfirmationEmail:

    @pytest.fixture
    def sent(self, monkeypatch):
        messages = []
        monkeypatch.setattr(email_service, "send_email",
                            lambda to, subject, body: messages.append((to, subject)) or True)
        return messages

    def test_confirmation_is_sent(self, sent, make_product, place_order):
        order = place_order([(make_product(), 1)])
        assert sent == [("layla@example.com", f"Order Confirmation - {order['order_number']}")]

    def test_no_email_when_notifications_are_off(self, client, admin_headers, sent, make_product, place_order):
        client.put("/admin/settings/enable_notifications", json={"value": "false"}, headers=admin_headers)
        place_order([(make_product(), 1)])
        assert sent == []
