"""End-of-day checks on the books."""
import logging
from decimal import Decimal

import pytest

from models.chart_of_accounts import ChartOfAccounts
from models.ledger_entries import LedgerEntry, LedgerDirection
from tasks.eod_tasks import run_eod_tasks
from utils.clock import local_now


def test_clean_books(db, caplog):
    with caplog.at_level(logging.INFO, logger="tasks.eod_tasks"):
        summary = run_eod_tasks(db)

    assert summary == {
        "unbalanced_transactions": [],
        "outstanding_cod": {"total": Decimal("0.00"), "count": 0},
        "unreconciled_variances": [],
    }
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_reports_outstanding_cod_and_variances(client, admin_headers, make_product, place_order, advance_order, db,
                                               caplog):
    bread = make_product(price="50.00")
    place_order([(bread, 1)])
    delivered = place_order([(bread, 2)])
    advance_order(delivered["id"], "CONFIRMED", "PREPARING", "READY", "OUT_FOR_DELIVERY", "DELIVERED")
    client.post("/finance/cod", json={"order_id": delivered["id"], "amount_collected": "120.00"},
                headers=admin_headers)

    with caplog.at_level(logging.INFO, logger="tasks.eod_tasks"):
        summary = run_eod_tasks(db)

    assert summary["outstanding_cod"] == {"total": Decimal("75.00"), "count": 1}
    assert summary["unreconciled_variances"] == [delivered["id"]]
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any("variance -5.00" in message for message in warnings)


def test_unbalanced_transactions_are_logged_as_errors(db, caplog):
    cash = db.query(ChartOfAccounts).filter(ChartOfAccounts.code == "1000").one()
    db.add(LedgerEntry(transaction_id="TXN-1-broken000", account_id=cash.id, amount=Decimal("10.00"),
                       direction=LedgerDirection.DEBIT, description="orphan", created_at=local_now()))
    db.commit()

    with caplog.at_level(logging.INFO, logger="tasks.eod_tasks"):
        summary = run_eod_tasks(db)

    assert summary["unbalanced_transactions"] == ["TXN-1-broken000"]
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert any("TXN-1-broken000" in message for message in errors)
    assert any("Trial balance out" in message for message in errors)


def test_scheduler_runs_eod_job_daily():
    from scheduler import scheduler

    job = scheduler.get_job("eod_tasks_job")
    assert job is not None
    assert job.func is run_eod_tasks
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["hour"] == "23"
    assert fields["minute"] == "0"


def test_failures_propagate(monkeypatch):
    from crud import ledger as ledger_crud

    def broken(db):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(ledger_crud, "get_trial_balance", broken)
    with pytest.raises(RuntimeError):
        run_eod_tasks(object())
