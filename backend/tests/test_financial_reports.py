"""Financial reports, trial balance and account balances over the finance API."""
from datetime import timedelta
from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from utils.clock import local_now


@pytest.fixture
def trading_day(client, admin_headers, make_product, place_order, advance_order):
    """One delivered and collected order plus one cancelled order."""
    bread = make_product(price="50.00", cost="20.00", stock=50)
    delivered = place_order([(bread, 3)])
    advance_order(delivered["id"], "CONFIRMED", "PREPARING", "READY", "OUT_FOR_DELIVERY", "DELIVERED")
    client.post("/finance/cod", json={"order_id": delivered["id"], "amount_collected": "175.00"},
                headers=admin_headers)

    cancelled = place_order([(bread, 1)])
    advance_order(cancelled["id"], "CANCELLED")
    return delivered, cancelled


def window():
    now = local_now()
    return {
        "date_from": (now - timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%S"),
        "date_to": (now + timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%S"),
    }


def test_summary_report(client, admin_headers, trading_day):
    response = client.get("/finance/reports", params={**window(), "type": "summary"}, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    financial = body["financial"]
    assert Decimal(financial["revenue"]) == Decimal("175.00")
    assert Decimal(financial["expenses"]) == Decimal("60.00")
    assert Decimal(financial["net_income"]) == Decimal("115.00")
    assert body["orders"]["count"] == 2
    assert body["payment_methods"][0]["payment_method"] == "COD"
    assert body["outstanding_cod"]["count"] == 0


def test_summary_is_the_default_report(client, admin_headers, trading_day):
    body = client.get("/finance/reports", params=window(), headers=admin_headers).json()
    assert "financial" in body


def test_report_outside_the_period_is_empty(client, admin_headers, trading_day):
    now = local_now()
    params = {
        "date_from": (now - timedelta(days=30)).strftime("%Y-%m-%dT%H:%M:%S"),
        "date_to": (now - timedelta(days=20)).strftime("%Y-%m-%dT%H:%M:%S"),
    }
    body = client.get("/finance/reports", params=params, headers=admin_headers).json()

    assert Decimal(body["financial"]["revenue"]) == Decimal("0.00")
    assert body["orders"]["count"] == 0


def test_detailed_report_lists_entries(client, admin_headers, trading_day):
    delivered, _ = trading_day
    body = client.get("/finance/reports", params={**window(), "type": "detailed"}, headers=admin_headers).json()

    # placement 3 + COGS 2 + collection 2, then placement 3 + cancellation 3
    assert len(body["entries"]) == 13
    numbers = {e["order_number"] for e in body["entries"]}
    assert delivered["order_number"] in numbers
    assert all(e["account"]["code"] for e in body["entries"])


def test_detailed_report_as_spreadsheet(client, admin_headers, trading_day):
    response = client.get("/finance/reports", params={**window(), "type": "detailed", "format": "xlsx"},
                          headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    assert "attachment" in response.headers["content-disposition"]

    sheet = load_workbook(BytesIO(response.content)).active
    assert sheet["A1"].value == "LEDGER REPORT"
    total_row = [cell.value for cell in sheet[sheet.max_row]]
    assert total_row[0] == "TOTAL"
    assert total_row[6] == total_row[7]


def test_cod_analysis_report(client, admin_headers, trading_day):
    body = client.get("/finance/reports", params={**window(), "type": "cod-analysis"}, headers=admin_headers).json()

    statistics = body["statistics"]
    assert statistics["total_orders"] == 2
    assert statistics["collected"] == 1
    assert Decimal(statistics["collected_value"]) == Decimal("175.00")
    assert statistics["variances"] == []
    assert len(body["orders"]) == 2

    delivered, cancelled = trading_day
    rows = {row["id"]: row for row in body["orders"]}
    collected = rows[delivered["id"]]["cod_tracking"]
    assert collected["order_number"] == delivered["order_number"]
    assert collected["customer_name"] == "Layla"
    assert Decimal(collected["amount_collected"]) == Decimal("175.00")
    assert collected["collected_by"] == "admin@bakery.test"
    assert rows[cancelled["id"]]["cod_tracking"]["is_reconciled"] is True


def test_date_from_after_date_to_is_rejected(client, admin_headers):
    now = local_now()
    params = {
        "date_from": now.strftime("%Y-%m-%dT%H:%M:%S"),
        "date_to": (now - timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%S"),
    }
    assert client.get("/finance/reports", params=params, headers=admin_headers).status_code == 400


def test_unknown_report_type_is_rejected(client, admin_headers):
    response = client.get("/finance/reports", params={"type": "profit"}, headers=admin_headers)
    assert response.status_code == 400


def test_reports_require_admin(client, staff_headers):
    assert client.get("/finance/reports", headers=staff_headers).status_code == 401


def test_trial_balance_endpoint(client, admin_headers, trading_day):
    body = client.get("/finance/trial-balance", headers=admin_headers).json()

    assert Decimal(body["total_debits"]) == Decimal(body["total_credits"])
    assert body["unbalanced_transactions"] == []


def test_account_balance_endpoint(client, admin_headers, trading_day):
    body = client.get("/finance/accounts/1000/balance", headers=admin_headers).json()

    assert body["code"] == "1000"
    assert body["type"] == "ASSET"
    assert Decimal(body["balance"]) == Decimal("175.00")
    assert client.get("/finance/accounts/9999/balance", headers=admin_headers).status_code == 404


def test_init_accounts_is_idempotent(client, admin_headers):
    response = client.post("/finance/init-accounts", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["created"] == 0
