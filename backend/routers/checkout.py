from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.users import User
from schemas.orders import CheckoutRequest, CheckoutResponse
from crud import orders as order_crud
from crud.ledger import AccountResolver
from crud.orders import CheckoutError
from utils.auth_utils import get_current_user, get_user_identifier
from utils.dependencies import get_account_resolver
from crud import settings as settings_crud
from utils import email_service

router = APIRouter(prefix="/checkout", tags=["Checkout"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    resolver: AccountResolver = Depends(get_account_resolver),
):
    """
    Place a cash-on-delivery order from the customer's cart.

    The confirmation email goes out after the order is committed; a failure
    to send it is logged and does not affect the order. No orders are taken
    while the shop is in maintenance mode.
    """
    if settings_crud.is_maintenance_mode(db):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail="Ordering is temporarily disabled for maintenance")
    try:
        order = order_crud.create_order_from_cart(db, user, payload, get_user_identifier(user), resolver)
    except CheckoutError as e:
        logger.info(f"Checkout refused for customer {user.id}: {e}")
        detail = {"message": str(e), "details": e.details} if e.details else str(e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error creating order for customer {user.id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")

    if settings_crud.is_feature_enabled(db, "notifications"):
        email_service.send_order_confirmation(order, user)
    return {"success": True, "order": order}
