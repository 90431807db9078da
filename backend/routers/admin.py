from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from models.users import User
from models.orders import OrderStatus
from schemas.orders import Order, OrderList, OrderStatusUpdate, BulkStatusUpdate, BulkUpdateResponse
from schemas.dashboard import AdminDashboardStats
from crud import orders as order_crud
from crud import dashboard as dashboard_crud
from crud import settings as settings_crud
from crud.ledger import AccountResolver
from routers.orders import _summary
from utils.auth_utils import require_admin, require_staff, get_user_identifier
from utils.dependencies import get_account_resolver
from utils import email_service

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger(__name__)

@router.get("/orders", response_model=OrderList)
def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    orders, total = order_crud.get_orders(db, status=order_status, search=search,
                                          skip=(page - 1) * limit, limit=limit)
    return {"orders": [_summary(o) for o in orders], "total": total, "page": page, "limit": limit}

@router.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: int, db: Session = Depends(get_db), user: User = Depends(require_staff)):
    order = order_crud.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order

@router.patch("/orders/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        order = order_crud.update_order_status(db, order_id, payload.status, get_user_identifier(user),
                                               payload.notes, resolver)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating status of order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update order status")
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    if order.customer is not None and settings_crud.is_feature_enabled(db, "notifications"):
        email_service.send_status_update(order, order.customer)
    return order

@router.post("/orders/bulk-update", response_model=BulkUpdateResponse)
def bulk_update_orders(
    payload: BulkStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    try:
        results = order_crud.bulk_update_status(db, payload.order_ids, payload.status,
                                                get_user_identifier(user), payload.notes, resolver)
    except Exception:
        logger.exception("Error in bulk order status update")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update orders")

    notify = settings_crud.is_feature_enabled(db, "notifications")
    for result in results:
        order = result.get("order")
        if notify and order is not None and order.customer is not None:
            email_service.send_status_update(order, order.customer)

    updated = sum(1 for r in results if r["success"])
    return {
        "updated": updated,
        "failed": len(results) - updated,
        "results": [{"order_id": r["order_id"], "success": r["success"], "error": r.get("error")} for r in results],
    }

@router.get("/dashboard/stats", response_model=AdminDashboardStats)
def dashboard_stats(db: Session = Depends(get_db), user: User = Depends(require_admin)):
    return dashboard_crud.admin_stats(db)
