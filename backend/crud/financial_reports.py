from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import List

from models.ledger_entries import LedgerEntry
from models.orders import Order, PaymentMethod
from crud import ledger as ledger_crud
from crud import cod_tracking as cod_crud
from utils.clock import to_local

ZERO = Decimal("0.00")


def _period(date_from: datetime, date_to: datetime) -> dict:
    return {"date_from": to_local(date_from), "date_to": to_local(date_to)}


def summary_report(db: Session, date_from: datetime, date_to: datetime) -> dict:
    date_from, date_to = to_local(date_from), to_local(date_to)
    financial = ledger_crud.generate_financial_report(db, date_from, date_to)

    in_period = (Order.placed_at >= date_from, Order.placed_at <= date_to)
    count, total_value = db.query(func.count(Order.id), func.sum(Order.total)).filter(*in_period).one()

    breakdown = (
        db.query(Order.payment_method, func.count(Order.id), func.sum(Order.total))
        .filter(*in_period)
        .group_by(Order.payment_method)
        .all()
    )

    return {
        "period": _period(date_from, date_to),
        "financial": financial,
        "orders": {"count": count or 0, "total_value": ledger_crud.money(total_value)},
        "payment_methods": [
            {"payment_method": method.value, "count": method_count, "total": ledger_crud.money(method_total)}
            for method, method_count, method_total in breakdown
        ],
        "outstanding_cod": ledger_crud.get_outstanding_cod(db),
    }


def ledger_entries_in_period(db: Session, date_from: datetime, date_to: datetime) -> List[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .options(joinedload(LedgerEntry.account), joinedload(LedgerEntry.order))
        .filter(LedgerEntry.created_at >= to_local(date_from), LedgerEntry.created_at <= to_local(date_to))
        .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
        .all()
    )


def entry_to_dict(entry: LedgerEntry) -> dict:
    return {
        "id": entry.id,
        "transaction_id": entry.transaction_id,
        "order_id": entry.order_id,
        "order_number": entry.order.order_number if entry.order else None,
        "account_id": entry.account_id,
        "account": {
            "id": entry.account.id,
            "code": entry.account.code,
            "name": entry.account.name,
            "type": entry.account.type,
        } if entry.account else None,
        "amount": entry.amount,
        "direction": entry.direction,
        "description": entry.description,
        "reference_type": entry.reference_type,
        "reference_id": entry.reference_id,
        "created_by": entry.created_by,
        "created_at": entry.created_at,
    }


def detailed_report(db: Session, date_from: datetime, date_to: datetime) -> dict:
    entries = ledger_entries_in_period(db, date_from, date_to)
    return {
        "period": _period(date_from, date_to),
        "entries": [entry_to_dict(entry) for entry in entries],
    }


def cod_analysis_report(db: Session, date_from: datetime, date_to: datetime) -> dict:
    date_from, date_to = to_local(date_from), to_local(date_to)
    orders = (
        db.query(Order)
        .options(joinedload(Order.cod_tracking), joinedload(Order.customer))
        .filter(Order.payment_method == PaymentMethod.COD, Order.placed_at >= date_from, Order.placed_at <= date_to)
        .order_by(Order.placed_at.desc(), Order.id.desc())
        .all()
    )

    collected = [o for o in orders if o.cod_tracking and o.cod_tracking.collected_at]
    pending = [o for o in orders if not (o.cod_tracking and o.cod_tracking.collected_at)]

    statistics = {
        "total_orders": len(orders),
        "total_value": sum((ledger_crud.money(o.total) for o in orders), ZERO),
        "collected": len(collected),
        "collected_value": sum((ledger_crud.money(o.cod_tracking.amount_collected) for o in collected), ZERO),
        "pending": len(pending),
        "pending_value": sum((ledger_crud.money(o.total) for o in pending), ZERO),
        "variances": [
            {
                "order_id": o.id,
                "order_number": o.order_number,
                "expected_amount": o.total,
                "collected_amount": o.cod_tracking.amount_collected,
                "variance": o.cod_tracking.variance,
            }
            for o in collected
            if o.cod_tracking.variance
        ],
    }

    rows = []
    for o in orders:
        rows.append({
            "id": o.id,
            "order_number": o.order_number,
            "status": o.status.value,
            "total": o.total,
            "customer_name": o.customer.name if o.customer else None,
            "customer_phone": o.customer.phone if o.customer else None,
            "placed_at": o.placed_at,
            "cod_tracking": cod_crud.tracking_to_dict(o.cod_tracking) if o.cod_tracking else None,
        })

    return {"period": _period(date_from, date_to), "statistics": statistics, "orders": rows}


LEDGER_SHEET_HEADERS = ["Date", "Transaction", "Account", "Account Name", "Order", "Description", "Debit", "Credit", "Created By"]


def ledger_workbook(entries: List[LedgerEntry], date_from: datetime, date_to: datetime) -> BytesIO:
    """Detailed ledger report as an .xlsx file, with debit/credit totals at the bottom."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    ws.append(["LEDGER REPORT", f"{to_local(date_from):%Y-%m-%d} to {to_local(date_to):%Y-%m-%d}"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    ws.append(LEDGER_SHEET_HEADERS)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color="8B5A2B", end_color="8B5A2B", fill_type="solid")
        cell.alignment = Alignment(horizontal="center")

    total_debits = ZERO
    total_credits = ZERO
    for entry in entries:
        amount = ledger_crud.money(entry.amount)
        is_debit = entry.direction.value == "DEBIT"
        if is_debit:
            total_debits += amount
        else:
            total_credits += amount
        ws.append([
            to_local(entry.created_at).strftime("%Y-%m-%d %H:%M"),
            entry.transaction_id,
            entry.account.code if entry.account else "",
            entry.account.name if entry.account else "",
            entry.order.order_number if entry.order else "",
            entry.description,
            float(amount) if is_debit else None,
            None if is_debit else float(amount),
            entry.created_by or "",
        ])

    ws.append(["TOTAL", "", "", "", "", "", float(total_debits), float(total_credits), ""])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    for col_idx, width in enumerate([18, 30, 10, 28, 16, 40, 12, 12, 24], start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    for row in ws.iter_rows(min_row=header_row + 1, min_col=7, max_col=8):
        for cell in row:
            cell.number_format = "#,##0.00"

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
