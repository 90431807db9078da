"""
Double-entry ledger.

Every money movement in the shop is written here as one balanced transaction:
a set of LedgerEntry rows sharing a transaction_id whose debits equal their
credits. Business events (order placed, cash collected, order cancelled,
goods delivered, manual adjustment) go through the event adapters below,
which know the account recipe for their event and hand the lines to
record_transaction(). Balances and reports are always computed from the rows.

Sign convention: ASSET and EXPENSE accounts grow with debits, every other
account type grows with credits.
"""
from sqlalchemy import func, case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, NamedTuple, Optional, Union
from datetime import datetime
import logging
import random
import string
import time

from models.chart_of_accounts import ChartOfAccounts, AccountCode, AccountType, DEBIT_NORMAL_TYPES
from models.ledger_entries import LedgerEntry, LedgerDirection, LedgerReferenceType
from models.cod_tracking import CODTracking
from models.orders import Order
from schemas.ledger import LedgerLine
from utils.clock import local_now, to_local

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0.00")

_BASE36 = string.digits + string.ascii_lowercase


class LedgerError(ValueError):
    """Base class for ledger validation failures. Routes turn these into 400s."""


class UnbalancedTransactionError(LedgerError):
    pass


class InvalidLedgerEntryError(LedgerError):
    pass


class UnknownAccountError(LedgerError):
    pass


class InactiveAccountError(LedgerError):
    pass


class CODAlreadyCollectedError(LedgerError):
    pass


class ResolvedAccount(NamedTuple):
    id: int
    code: str
    type: AccountType
    is_active: bool


class AccountResolver:
    """
    Maps account codes to account ids without a query per ledger line.

    The map is loaded lazily on first use (main.py preloads it at start-up).
    A code that is not in the map triggers one reload, so accounts added after
    start-up are still found; a code missing after the reload is an error, and
    so is an inactive account.
    """

    def __init__(self):
        self._accounts: Dict[str, ResolvedAccount] = {}

    def load(self, db: Session) -> None:
        rows = db.query(ChartOfAccounts.id, ChartOfAccounts.code, ChartOfAccounts.type, ChartOfAccounts.is_active).all()
        self._accounts = {
            row.code: ResolvedAccount(row.id, row.code, row.type, bool(row.is_active)) for row in rows
        }
        logger.debug(f"Account resolver loaded {len(self._accounts)} accounts")

    def invalidate(self) -> None:
        self._accounts = {}

    def resolve(self, db: Session, code: Union[AccountCode, str]) -> ResolvedAccount:
        key = code.value if isinstance(code, AccountCode) else str(code)
        account = self._accounts.get(key)
        if account is None:
            self.load(db)
            account = self._accounts.get(key)
        if account is None:
            raise UnknownAccountError(f"Account {key} not found")
        if not account.is_active:
            raise InactiveAccountError(f"Account {key} is inactive")
        return account


def _to_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidLedgerEntryError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidLedgerEntryError(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_transaction_id() -> str:
    """TXN-<epoch milliseconds>-<9 random base36 characters>."""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"TXN-{int(time.time() * 1000)}-{suffix}"


def signed_balance(account_type: AccountType, debits, credits) -> Decimal:
    debits = money(debits)
    credits = money(credits)
    if account_type in DEBIT_NORMAL_TYPES:
        return debits - credits
    return credits - debits


def record_transaction(
    db: Session,
    entries: List[LedgerLine],
    *,
    order_id: Optional[int] = None,
    reference_type: Optional[LedgerReferenceType] = None,
    reference_id: Optional[str] = None,
    created_by: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> str:
    """
    Validate and write one balanced transaction.

    Nothing is written unless the lines balance and every account code
    resolves. The rows are added to the caller's session and flushed; if the
    flush fails the session is rolled back and the error re-raised, so no
    partial transaction survives. With commit=False the caller owns the commit
    and can land its own rows in the same database transaction.

    Returns:
        str: the generated transaction id.
    """
    if not entries:
        raise InvalidLedgerEntryError("A transaction needs at least one entry")

    amounts = []
    for line in entries:
        amount = _to_amount(line.amount)
        if amount < 0:
            raise InvalidLedgerEntryError(f"Ledger amounts must not be negative: {line.description} ({amount})")
        amounts.append(amount)

    total_debits = sum((a for line, a in zip(entries, amounts) if line.direction == LedgerDirection.DEBIT), ZERO)
    total_credits = sum((a for line, a in zip(entries, amounts) if line.direction == LedgerDirection.CREDIT), ZERO)

    if abs(total_debits - total_credits) > BALANCE_TOLERANCE:
        raise UnbalancedTransactionError(
            f"Transaction is not balanced: Debits {total_debits}, Credits {total_credits}"
        )
    if total_debits == 0:
        raise InvalidLedgerEntryError("A transaction must move a non-zero amount")

    resolver = resolver or AccountResolver()
    accounts = [resolver.resolve(db, line.account_code) for line in entries]

    transaction_id = generate_transaction_id()
    now = local_now()
    rows = [
        LedgerEntry(
            transaction_id=transaction_id,
            order_id=order_id,
            account_id=account.id,
            amount=amount,
            direction=line.direction,
            description=line.description,
            reference_type=reference_type,
            reference_id=reference_id,
            created_by=created_by,
            created_at=now,
        )
        for line, amount, account in zip(entries, amounts, accounts)
    ]

    try:
        db.add_all(rows)
        db.flush()
        if commit:
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to write ledger transaction {transaction_id}")
        raise

    logger.info(
        f"Ledger transaction {transaction_id} recorded: {len(rows)} entries, "
        f"{total_debits} ({reference_type.value if reference_type else 'no reference'} {reference_id or ''})"
    )
    return transaction_id


# --- Event adapters -----------------------------------------------------------

def record_order_placement(
    db: Session,
    order_id: int,
    subtotal,
    delivery_fee,
    created_by: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> str:
    """DR COD Receivable for the total; CR Product Sales and Delivery Fee Revenue."""
    subtotal = _to_amount(subtotal)
    delivery_fee = _to_amount(delivery_fee)
    lines = [
        LedgerLine(account_code=AccountCode.COD_RECEIVABLE.value, amount=subtotal + delivery_fee,
                   direction=LedgerDirection.DEBIT, description=f"Order placed - {order_id}"),
        LedgerLine(account_code=AccountCode.PRODUCT_SALES.value, amount=subtotal,
                   direction=LedgerDirection.CREDIT, description=f"Product sales - {order_id}"),
        # Written even when zero so every placement has the same three lines
        LedgerLine(account_code=AccountCode.DELIVERY_FEE_REVENUE.value, amount=delivery_fee,
                   direction=LedgerDirection.CREDIT, description=f"Delivery fee - {order_id}"),
    ]
    return record_transaction(
        db, lines,
        order_id=order_id,
        reference_type=LedgerReferenceType.ORDER,
        reference_id=str(order_id),
        created_by=created_by,
        resolver=resolver,
        commit=commit,
    )


def record_cod_collection(
    db: Session,
    order_id: int,
    amount_collected,
    collected_by: Optional[str] = None,
    notes: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> CODTracking:
    """
    DR Cash, CR COD Receivable for the amount actually collected, and record the
    collection on the order's CODTracking row (variance = collected - order total).

    A second collection for the same order is refused; corrections go through
    financial adjustments.
    """
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise LedgerError(f"Order {order_id} not found")

    tracking = db.query(CODTracking).filter(CODTracking.order_id == order_id).first()
    if tracking and tracking.collected_at is not None:
        raise CODAlreadyCollectedError("COD already collected for this order")

    amount = _to_amount(amount_collected)
    if amount <= 0:
        raise InvalidLedgerEntryError("Collected amount must be positive")

    lines = [
        LedgerLine(account_code=AccountCode.CASH.value, amount=amount,
                   direction=LedgerDirection.DEBIT, description=f"COD collected - {order_id}"),
        LedgerLine(account_code=AccountCode.COD_RECEIVABLE.value, amount=amount,
                   direction=LedgerDirection.CREDIT, description=f"COD collection - {order_id}"),
    ]
    record_transaction(
        db, lines,
        order_id=order_id,
        reference_type=LedgerReferenceType.PAYMENT,
        reference_id=str(order_id),
        created_by=collected_by,
        resolver=resolver,
        commit=False,
    )

    if tracking is None:
        tracking = CODTracking(order_id=order_id, amount_due=money(order.total))
        db.add(tracking)
    tracking.amount_collected = amount
    tracking.collected_at = local_now()
    tracking.collected_by = collected_by
    tracking.variance = amount - money(order.total)
    if notes:
        tracking.notes = notes

    if commit:
        db.commit()
        db.refresh(tracking)
    else:
        db.flush()

    if tracking.variance != 0:
        logger.warning(f"COD variance of {tracking.variance} on order {order_id} (collected {amount}, due {order.total})")
    return tracking


def record_order_cancellation(
    db: Session,
    order_id: int,
    subtotal,
    delivery_fee,
    created_by: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> str:
    """Mirror of record_order_placement: DR the revenues, CR COD Receivable."""
    subtotal = _to_amount(subtotal)
    delivery_fee = _to_amount(delivery_fee)
    lines = [
        LedgerLine(account_code=AccountCode.PRODUCT_SALES.value, amount=subtotal,
                   direction=LedgerDirection.DEBIT, description=f"Order cancelled - {order_id}"),
        LedgerLine(account_code=AccountCode.DELIVERY_FEE_REVENUE.value, amount=delivery_fee,
                   direction=LedgerDirection.DEBIT, description=f"Delivery fee reversed - {order_id}"),
        LedgerLine(account_code=AccountCode.COD_RECEIVABLE.value, amount=subtotal + delivery_fee,
                   direction=LedgerDirection.CREDIT, description=f"Order cancellation - {order_id}"),
    ]
    return record_transaction(
        db, lines,
        order_id=order_id,
        reference_type=LedgerReferenceType.ORDER,
        reference_id=str(order_id),
        created_by=created_by,
        resolver=resolver,
        commit=commit,
    )


def record_cost_of_goods_sold(
    db: Session,
    order_id: int,
    cost,
    created_by: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> str:
    cost = _to_amount(cost)
    lines = [
        LedgerLine(account_code=AccountCode.COST_OF_GOODS_SOLD.value, amount=cost,
                   direction=LedgerDirection.DEBIT, description=f"COGS - {order_id}"),
        LedgerLine(account_code=AccountCode.INVENTORY_FINISHED_GOODS.value, amount=cost,
                   direction=LedgerDirection.CREDIT, description=f"Inventory reduction - {order_id}"),
    ]
    return record_transaction(
        db, lines,
        order_id=order_id,
        reference_type=LedgerReferenceType.INVENTORY,
        reference_id=str(order_id),
        created_by=created_by,
        resolver=resolver,
        commit=commit,
    )


def record_financial_adjustment(
    db: Session,
    adjustment_type: str,
    amount,
    reason: str,
    debit_account_code: str,
    credit_account_code: str,
    created_by: Optional[str] = None,
    order_id: Optional[int] = None,
    adjustment_id: Optional[int] = None,
    resolver: Optional[AccountResolver] = None,
    commit: bool = True,
) -> str:
    """DR and CR the two accounts an admin picked. The reference is the adjustment row when there is one."""
    amount = _to_amount(amount)
    if amount <= 0:
        raise InvalidLedgerEntryError("Adjustment amount must be positive")
    lines = [
        LedgerLine(account_code=debit_account_code, amount=amount,
                   direction=LedgerDirection.DEBIT, description=f"Adjustment: {reason}"),
        LedgerLine(account_code=credit_account_code, amount=amount,
                   direction=LedgerDirection.CREDIT, description=f"Adjustment: {reason}"),
    ]
    return record_transaction(
        db, lines,
        order_id=order_id,
        reference_type=LedgerReferenceType.ADJUSTMENT,
        reference_id=str(adjustment_id) if adjustment_id is not None else str(adjustment_type),
        created_by=created_by,
        resolver=resolver,
        commit=commit,
    )


# --- Readers ------------------------------------------------------------------

def _debit_credit_totals(db: Session, *criteria):
    rows = (
        db.query(LedgerEntry.direction, func.sum(LedgerEntry.amount))
        .join(ChartOfAccounts, LedgerEntry.account_id == ChartOfAccounts.id)
        .filter(*criteria)
        .group_by(LedgerEntry.direction)
        .all()
    )
    totals = {direction: money(total) for direction, total in rows}
    return totals.get(LedgerDirection.DEBIT, ZERO), totals.get(LedgerDirection.CREDIT, ZERO)


def get_account_balance(db: Session, account_code: Union[AccountCode, str]) -> Decimal:
    code = account_code.value if isinstance(account_code, AccountCode) else str(account_code)
    account = db.query(ChartOfAccounts).filter(ChartOfAccounts.code == code).first()
    if not account:
        raise UnknownAccountError(f"Account {code} not found")
    debits, credits = _debit_credit_totals(db, LedgerEntry.account_id == account.id)
    return signed_balance(account.type, debits, credits)


def get_account_type_balance(
    db: Session,
    account_type: AccountType,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> Decimal:
    """Summed balance of every account of one type, optionally limited to [date_from, date_to]."""
    criteria = [ChartOfAccounts.type == account_type]
    if date_from is not None:
        criteria.append(LedgerEntry.created_at >= to_local(date_from))
    if date_to is not None:
        criteria.append(LedgerEntry.created_at <= to_local(date_to))
    debits, credits = _debit_credit_totals(db, *criteria)
    return signed_balance(account_type, debits, credits)


def generate_financial_report(db: Session, date_from: datetime, date_to: datetime) -> dict:
    revenue = get_account_type_balance(db, AccountType.REVENUE, date_from, date_to)
    expenses = get_account_type_balance(db, AccountType.EXPENSE, date_from, date_to)
    assets = get_account_type_balance(db, AccountType.ASSET, date_from, date_to)
    liabilities = get_account_type_balance(db, AccountType.LIABILITY, date_from, date_to)
    return {
        "revenue": revenue,
        "expenses": expenses,
        "net_income": revenue - expenses,
        "assets": assets,
        "liabilities": liabilities,
        "equity": assets - liabilities,
    }


def get_outstanding_cod(db: Session) -> dict:
    """Amount still due on COD orders that have been neither collected nor reconciled."""
    count, total = (
        db.query(func.count(CODTracking.id), func.sum(CODTracking.amount_due))
        .filter(CODTracking.is_reconciled == False, CODTracking.collected_at.is_(None))
        .one()
    )
    return {"total": money(total), "count": count or 0}


def get_trial_balance(db: Session) -> dict:
    debit_sum = func.sum(case((LedgerEntry.direction == LedgerDirection.DEBIT, LedgerEntry.amount), else_=0))
    credit_sum = func.sum(case((LedgerEntry.direction == LedgerDirection.CREDIT, LedgerEntry.amount), else_=0))

    rows = (
        db.query(ChartOfAccounts, debit_sum.label("debits"), credit_sum.label("credits"))
        .outerjoin(LedgerEntry, LedgerEntry.account_id == ChartOfAccounts.id)
        .group_by(ChartOfAccounts.id)
        .order_by(ChartOfAccounts.code)
        .all()
    )

    accounts = []
    total_debits = ZERO
    total_credits = ZERO
    for account, debits, credits in rows:
        debits = money(debits)
        credits = money(credits)
        total_debits += debits
        total_credits += credits
        accounts.append({
            "code": account.code,
            "name": account.name,
            "type": account.type,
            "debits": debits,
            "credits": credits,
            "balance": signed_balance(account.type, debits, credits),
        })

    unbalanced = (
        db.query(LedgerEntry.transaction_id)
        .group_by(LedgerEntry.transaction_id)
        .having(func.abs(debit_sum - credit_sum) > BALANCE_TOLERANCE)
        .all()
    )

    return {
        "accounts": accounts,
        "total_debits": total_debits,
        "total_credits": total_credits,
        "unbalanced_transactions": [row.transaction_id for row in unbalanced],
    }
