"""Cash-on-delivery collection and reconciliation through the finance API."""
from decimal import Decimal

import pytest

from crud import ledger as ledger_crud
from models.chart_of_accounts import AccountCode
from models.ledger_entries import LedgerEntry


@pytest.fixture
def delivered_order(make_product, place_order, advance_order):
    bread = make_product(price="50.00", stock=20)
    order = place_order([(bread, 3)])
    advance_order(order["id"], "CONFIRMED", "PREPARING", "READY", "OUT_FOR_DELIVERY", "DELIVERED")
    return order


def collect(client, headers, order_id, amount, **extra):
    return client.post("/finance/cod", json={"order_id": order_id, "amount_collected": amount, **extra},
                       headers=headers)


def test_collection_records_cash_and_variance(client, db, admin_headers, staff_headers, delivered_order):
    response = collect(client, admin_headers, delivered_order["id"], "170.00", notes="Customer short 5")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    tracking = body["cod_tracking"]
    assert Decimal(tracking["amount_collected"]) == Decimal("170.00")
    assert Decimal(tracking["variance"]) == Decimal("-5.00")
    assert tracking["order_number"] == delivered_order["order_number"]
    assert tracking["collected_by"] == "admin@bakery.test"

    assert ledger_crud.get_account_balance(db, AccountCode.CASH) == Decimal("170.00")
    assert ledger_crud.get_account_balance(db, AccountCode.COD_RECEIVABLE) == Decimal("5.00")

    order = client.get(f"/admin/orders/{delivered_order['id']}", headers=staff_headers).json()
    assert order["payment_status"] == "PAID"


def test_exact_collection_has_no_variance(client, admin_headers, delivered_order):
    tracking = collect(client, admin_headers, delivered_order["id"], "175.00").json()["cod_tracking"]
    assert Decimal(tracking["variance"]) == Decimal("0.00")


def test_second_collection_is_rejected(client, db, admin_headers, delivered_order):
    assert collect(client, admin_headers, delivered_order["id"], "175.00").status_code == 200
    response = collect(client, admin_headers, delivered_order["id"], "175.00")

    assert response.status_code == 400
    assert "already collected" in response.json()["detail"]
    assert ledger_crud.get_account_balance(db, AccountCode.CASH) == Decimal("175.00")


def test_undelivered_order_cannot_be_collected(client, db, admin_headers, make_product, place_order):
    order = place_order([(make_product(), 1)])
    response = collect(client, admin_headers, order["id"], "75.00")

    assert response.status_code == 400
    assert db.query(LedgerEntry).filter(LedgerEntry.order_id == order["id"]).count() == 3


def test_unknown_order_returns_404(client, admin_headers):
    assert collect(client, admin_headers, 999, "10.00").status_code == 404


def test_amount_must_be_positive(client, admin_headers, delivered_order):
    response = collect(client, admin_headers, delivered_order["id"], "0")
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


@pytest.mark.parametrize("headers_fixture", ["customer_headers", "staff_headers"])
def test_non_admins_get_401(request, client, db, delivered_order, headers_fixture):
    headers = request.getfixturevalue(headers_fixture)
    response = collect(client, headers, delivered_order["id"], "175.00")

    assert response.status_code == 401
    assert ledger_crud.get_account_balance(db, AccountCode.CASH) == Decimal("0.00")


def test_missing_token_gets_401(client, delivered_order):
    assert collect(client, {}, delivered_order["id"], "175.00").status_code == 401


def test_cod_status_for_one_order(client, admin_headers, delivered_order):
    response = client.get("/finance/cod", params={"order_id": delivered_order["id"]}, headers=admin_headers)

    assert response.status_code == 200
    tracking = response.json()["cod_tracking"]
    assert Decimal(tracking["amount_due"]) == Decimal("175.00")
    assert tracking["collected_at"] is None


def test_cod_summary(client, admin_headers, delivered_order, make_product, place_order):
    place_order([(make_product(name="Baguette", price="20.00"), 2)])
    collect(client, admin_headers, delivered_order["id"], "175.00")

    summary = client.get("/finance/cod", headers=admin_headers).json()
    assert summary["outstanding"]["count"] == 1
    assert Decimal(summary["outstanding"]["total"]) == Decimal("65.00")
    assert [c["order_id"] for c in summary["recent_collections"]] == [delivered_order["id"]]


class TestReconciliation:

    def test_variance_needs_a_reason(self, client, admin_headers, delivered_order):
        collect(client, admin_headers, delivered_order["id"], "170.00")
        response = client.post(f"/finance/cod/{delivered_order['id']}/reconcile", json={}, headers=admin_headers)
        assert response.status_code == 400

    def test_reconcile_with_reason(self, client, admin_headers, delivered_order):
        collect(client, admin_headers, delivered_order["id"], "170.00")
        response = client.post(f"/finance/cod/{delivered_order['id']}/reconcile",
                               json={"variance_reason": "Driver gave change from own pocket"},
                               headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["is_reconciled"] is True
        assert body["reconciled_by"] == "admin@bakery.test"

    def test_uncollected_order_cannot_be_reconciled(self, client, admin_headers, delivered_order):
        response = client.post(f"/finance/cod/{delivered_order['id']}/reconcile", json={}, headers=admin_headers)
        assert response.status_code == 400
