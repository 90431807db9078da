from sqlalchemy.orm import Session
from typing import Optional, Tuple, List
import logging

from models.financial_adjustments import FinancialAdjustment, AdjustmentStatus, AdjustmentType
from models.chart_of_accounts import ChartOfAccounts
from models.orders import Order
from models.users import User
from schemas.financial_adjustments import FinancialAdjustmentCreate
from crud import ledger as ledger_crud
from crud.ledger import AccountResolver
from utils.clock import local_now

logger = logging.getLogger(__name__)


def get_adjustment(db: Session, adjustment_id: int) -> Optional[FinancialAdjustment]:
    return db.query(FinancialAdjustment).filter(FinancialAdjustment.id == adjustment_id).first()


def get_adjustments(
    db: Session,
    adjustment_type: Optional[AdjustmentType] = None,
    status: Optional[AdjustmentStatus] = None,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[FinancialAdjustment], int]:
    query = db.query(FinancialAdjustment)
    if adjustment_type:
        query = query.filter(FinancialAdjustment.type == adjustment_type)
    if status:
        query = query.filter(FinancialAdjustment.status == status)
    total = query.count()
    adjustments = query.order_by(FinancialAdjustment.created_at.desc(), FinancialAdjustment.id.desc()).offset(skip).limit(limit).all()
    return adjustments, total


def create_adjustment(db: Session, adjustment: FinancialAdjustmentCreate, requested_by: str) -> FinancialAdjustment:
    """Create a PENDING adjustment. Nothing reaches the ledger until it is approved."""
    if adjustment.debit_account == adjustment.credit_account:
        raise ValueError("Debit and credit accounts must differ")
    for code in (adjustment.debit_account, adjustment.credit_account):
        account = db.query(ChartOfAccounts).filter(ChartOfAccounts.code == code).first()
        if not account:
            raise ValueError(f"Account {code} not found")
        if not account.is_active:
            raise ValueError(f"Account {code} is inactive")
    if adjustment.order_id is not None and not db.query(Order.id).filter(Order.id == adjustment.order_id).first():
        raise ValueError(f"Order {adjustment.order_id} not found")
    if adjustment.customer_id is not None and not db.query(User.id).filter(User.id == adjustment.customer_id).first():
        raise ValueError(f"Customer {adjustment.customer_id} not found")

    db_adjustment = FinancialAdjustment(
        type=adjustment.type,
        amount=adjustment.amount,
        reason=adjustment.reason,
        description=adjustment.description,
        debit_account_code=adjustment.debit_account,
        credit_account_code=adjustment.credit_account,
        order_id=adjustment.order_id,
        customer_id=adjustment.customer_id,
        status=AdjustmentStatus.PENDING,
        requested_by=requested_by,
        created_by=requested_by,
    )
    db.add(db_adjustment)
    db.commit()
    db.refresh(db_adjustment)
    logger.info(f"Financial adjustment {db_adjustment.id} ({adjustment.type.value}, {adjustment.amount}) requested by {requested_by}")
    return db_adjustment


def _require_pending(adjustment: FinancialAdjustment):
    if adjustment.status != AdjustmentStatus.PENDING:
        raise ValueError(f"Adjustment is already {adjustment.status.value}")


def approve_adjustment(db: Session, adjustment_id: int, approved_by: str,
                       resolver: Optional[AccountResolver] = None) -> Optional[FinancialAdjustment]:
    """Post the adjustment to the ledger and mark it APPROVED in the same commit."""
    adjustment = get_adjustment(db, adjustment_id)
    if not adjustment:
        return None
    _require_pending(adjustment)

    try:
        transaction_id = ledger_crud.record_financial_adjustment(
            db,
            adjustment.type.value,
            adjustment.amount,
            adjustment.reason,
            adjustment.debit_account_code,
            adjustment.credit_account_code,
            created_by=approved_by,
            order_id=adjustment.order_id,
            adjustment_id=adjustment.id,
            resolver=resolver,
            commit=False,
        )
        adjustment.status = AdjustmentStatus.APPROVED
        adjustment.approved_by = approved_by
        adjustment.approved_at = local_now()
        adjustment.transaction_id = transaction_id
        adjustment.updated_by = approved_by
        db.commit()
    except ValueError:
        db.rollback()
        raise
    db.refresh(adjustment)
    logger.info(f"Financial adjustment {adjustment.id} approved by {approved_by} ({transaction_id})")
    return adjustment


def reject_adjustment(db: Session, adjustment_id: int, rejected_by: str) -> Optional[FinancialAdjustment]:
    adjustment = get_adjustment(db, adjustment_id)
    if not adjustment:
        return None
    _require_pending(adjustment)
    adjustment.status = AdjustmentStatus.REJECTED
    adjustment.approved_by = rejected_by
    adjustment.approved_at = local_now()
    adjustment.updated_by = rejected_by
    db.commit()
    db.refresh(adjustment)
    logger.info(f"Financial adjustment {adjustment.id} rejected by {rejected_by}")
    return adjustment
