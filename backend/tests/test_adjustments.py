"""Manual financial adjustments: request, approve into the ledger, reject."""
from decimal import Decimal

import pytest

from crud import ledger as ledger_crud
from models.chart_of_accounts import ChartOfAccounts
from models.ledger_entries import LedgerEntry, LedgerReferenceType


def adjustment_payload(**overrides):
    payload = {
        "type": "COD_SHORTAGE",
        "amount": "15.00",
        "reason": "Driver returned short on route 4",
        "debit_account": "5200",
        "credit_account": "1000",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pending_adjustment(client, admin_headers):
    response = client.post("/finance/adjustments", json=adjustment_payload(), headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()["adjustment"]


def test_created_adjustment_is_pending_and_unposted(db, pending_adjustment):
    assert pending_adjustment["status"] == "PENDING"
    assert pending_adjustment["requested_by"] == "admin@bakery.test"
    assert db.query(LedgerEntry).count() == 0


def test_approval_posts_to_ledger(client, db, admin_headers, pending_adjustment):
    response = client.post(f"/finance/adjustments/{pending_adjustment['id']}/approve", headers=admin_headers)

    assert response.status_code == 200
    adjustment = response.json()["adjustment"]
    assert adjustment["status"] == "APPROVED"
    assert adjustment["transaction_id"].startswith("TXN-")

    entries = db.query(LedgerEntry).filter(LedgerEntry.transaction_id == adjustment["transaction_id"]).all()
    assert len(entries) == 2
    assert {e.reference_id for e in entries} == {str(pending_adjustment["id"])}
    assert all(e.reference_type == LedgerReferenceType.ADJUSTMENT for e in entries)
    assert ledger_crud.get_account_balance(db, "5200") == Decimal("15.00")
    assert ledger_crud.get_account_balance(db, "1000") == Decimal("-15.00")


def test_adjustment_cannot_be_approved_twice(client, db, admin_headers, pending_adjustment):
    url = f"/finance/adjustments/{pending_adjustment['id']}/approve"
    client.post(url, headers=admin_headers)
    response = client.post(url, headers=admin_headers)

    assert response.status_code == 400
    assert db.query(LedgerEntry).count() == 2


def test_rejection_writes_nothing(client, db, admin_headers, pending_adjustment):
    response = client.post(f"/finance/adjustments/{pending_adjustment['id']}/reject", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["adjustment"]["status"] == "REJECTED"
    assert db.query(LedgerEntry).count() == 0

    approve = client.post(f"/finance/adjustments/{pending_adjustment['id']}/approve", headers=admin_headers)
    assert approve.status_code == 400


def test_unknown_adjustment_returns_404(client, admin_headers):
    assert client.post("/finance/adjustments/999/approve", headers=admin_headers).status_code == 404


@pytest.mark.parametrize("overrides", [
    {"reason": "too short"},
    {"amount": "0"},
    {"amount": "-5.00"},
    {"type": "NOT_A_TYPE"},
])
def test_invalid_body_returns_400(client, admin_headers, overrides):
    response = client.post("/finance/adjustments", json=adjustment_payload(**overrides), headers=admin_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"]


@pytest.mark.parametrize("overrides,message", [
    ({"credit_account": "5200"}, "must differ"),
    ({"debit_account": "9999"}, "not found"),
    ({"order_id": 999}, "not found"),
])
def test_business_rule_violations_return_400(client, admin_headers, overrides, message):
    response = client.post("/finance/adjustments", json=adjustment_payload(**overrides), headers=admin_headers)

    assert response.status_code == 400
    assert message in response.json()["detail"]


def test_non_admin_gets_401(client, customer_headers):
    response = client.post("/finance/adjustments", json=adjustment_payload(), headers=customer_headers)
    assert response.status_code == 401


def test_list_is_paginated_and_filterable(client, admin_headers):
    for amount in ("10.00", "20.00", "30.00"):
        client.post("/finance/adjustments", json=adjustment_payload(amount=amount), headers=admin_headers)
    client.post("/finance/adjustments", json=adjustment_payload(type="OTHER"), headers=admin_headers)

    page = client.get("/finance/adjustments", params={"page": 1, "limit": 2}, headers=admin_headers).json()
    assert len(page["adjustments"]) == 2
    assert page["pagination"] == {"page": 1, "limit": 2, "total": 4, "pages": 2}

    other = client.get("/finance/adjustments", params={"type": "OTHER"}, headers=admin_headers).json()
    assert other["pagination"]["total"] == 1

    pending = client.get("/finance/adjustments", params={"status": "PENDING"}, headers=admin_headers).json()
    assert pending["pagination"]["total"] == 4


def test_account_with_pending_adjustment_cannot_be_deactivated(client, admin_headers, pending_adjustment):
    response = client.patch("/chart-of-accounts/5200", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 400
    assert "pending adjustment" in response.json()["detail"]

    client.post(f"/finance/adjustments/{pending_adjustment['id']}/reject", headers=admin_headers)
    response = client.patch("/chart-of-accounts/5200", json={"is_active": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_approval_refuses_inactive_account(client, db, admin_headers, resolver, pending_adjustment):
    account = db.query(ChartOfAccounts).filter(ChartOfAccounts.code == "5200").one()
    account.is_active = False
    db.commit()
    resolver.invalidate()

    response = client.post(f"/finance/adjustments/{pending_adjustment['id']}/approve", headers=admin_headers)

    assert response.status_code == 400
    assert "inactive" in response.json()["detail"]
    assert db.query(LedgerEntry).count() == 0
    adjustments = client.get("/finance/adjustments", headers=admin_headers).json()["adjustments"]
    assert adjustments[0]["status"] == "PENDING"
