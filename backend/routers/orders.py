from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.users import User
from schemas.orders import Order, OrderList
from crud import orders as order_crud
from crud.ledger import AccountResolver
from utils.auth_utils import get_current_user, get_user_identifier
from utils.dependencies import get_account_resolver

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

def _summary(order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "fulfillment_type": order.fulfillment_type,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "total": order.total,
        "placed_at": order.placed_at,
        "item_count": sum(item.quantity for item in order.items),
    }

@router.get("/", response_model=OrderList)
def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    orders, total = order_crud.get_customer_orders(db, user.id, skip=(page - 1) * limit, limit=limit)
    return {"orders": [_summary(o) for o in orders], "total": total, "page": page, "limit": limit}

@router.get("/{order_id}", response_model=Order)
def get_my_order(order_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    order = order_crud.get_customer_order(db, order_id, user.id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order

@router.post("/{order_id}/cancel", response_model=Order)
def cancel_my_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        order = order_crud.cancel_customer_order(db, order_id, user.id, get_user_identifier(user), resolver)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error cancelling order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to cancel order")
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order
