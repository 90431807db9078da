from sqlalchemy.orm import Session, joinedload
from typing import Optional
import logging

from models.cod_tracking import CODTracking
from models.orders import Order, OrderStatus, PaymentMethod, PaymentStatus
from crud import ledger as ledger_crud
from crud.ledger import AccountResolver
from utils.clock import local_now

logger = logging.getLogger(__name__)

COLLECTABLE_STATUSES = (OrderStatus.DELIVERED, OrderStatus.PICKED_UP)


def get_cod_tracking(db: Session, order_id: int) -> Optional[CODTracking]:
    return db.query(CODTracking).options(
        joinedload(CODTracking.order).joinedload(Order.customer)
    ).filter(CODTracking.order_id == order_id).first()


def get_recent_collections(db: Session, limit: int = 10):
    return db.query(CODTracking).options(
        joinedload(CODTracking.order).joinedload(Order.customer)
    ).filter(CODTracking.collected_at.isnot(None)).order_by(CODTracking.collected_at.desc()).limit(limit).all()


def get_unreconciled_variances(db: Session):
    return db.query(CODTracking).filter(
        CODTracking.collected_at.isnot(None),
        CODTracking.is_reconciled == False,
        CODTracking.variance != 0,
    ).all()


def collect_cod(db: Session, order: Order, amount_collected, collected_by: str, notes: Optional[str] = None,
                resolver: Optional[AccountResolver] = None) -> CODTracking:
    """
    Record the cash a driver brought back for a delivered COD order.

    The ledger entries, the tracking row and the order's payment status are
    committed together.
    """
    if order.payment_method != PaymentMethod.COD:
        raise ValueError("Order is not COD payment method")
    if order.status not in COLLECTABLE_STATUSES:
        raise ValueError("Order must be delivered before COD collection")

    try:
        tracking = ledger_crud.record_cod_collection(
            db, order.id, amount_collected, collected_by=collected_by, notes=notes,
            resolver=resolver, commit=False,
        )
        order.payment_status = PaymentStatus.PAID
        db.commit()
    except ValueError:
        db.rollback()
        raise
    db.refresh(tracking)
    logger.info(f"COD of {tracking.amount_collected} collected for order {order.order_number} by {collected_by}")
    return tracking


def reconcile_cod(db: Session, order_id: int, reconciled_by: str, variance_reason: Optional[str] = None):
    tracking = get_cod_tracking(db, order_id)
    if tracking is None:
        return None
    if tracking.collected_at is None:
        raise ValueError("COD has not been collected for this order")
    if tracking.is_reconciled:
        raise ValueError("COD collection is already reconciled")
    if tracking.variance != 0 and not variance_reason and not tracking.variance_reason:
        raise ValueError("A variance reason is required to reconcile a collection with a variance")

    tracking.is_reconciled = True
    tracking.reconciled_at = local_now()
    tracking.reconciled_by = reconciled_by
    if variance_reason:
        tracking.variance_reason = variance_reason
    db.commit()
    db.refresh(tracking)
    logger.info(f"COD for order {order_id} reconciled by {reconciled_by}")
    return tracking


def tracking_to_dict(tracking: CODTracking) -> dict:
    order = tracking.order
    return {
        "id": tracking.id,
        "order_id": tracking.order_id,
        "order_number": order.order_number if order else None,
        "customer_name": order.customer.name if order and order.customer else None,
        "amount_due": tracking.amount_due,
        "amount_collected": tracking.amount_collected,
        "collected_at": tracking.collected_at,
        "collected_by": tracking.collected_by,
        "variance": tracking.variance,
        "variance_reason": tracking.variance_reason,
        "notes": tracking.notes,
        "is_reconciled": tracking.is_reconciled,
        "reconciled_at": tracking.reconciled_at,
        "reconciled_by": tracking.reconciled_by,
    }
