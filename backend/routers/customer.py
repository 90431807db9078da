from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.users import User
from schemas.users import UserProfile, UserProfileUpdate, ChangePasswordRequest
from schemas.dashboard import CustomerDashboardStats, RecentOrders
from crud import dashboard as dashboard_crud
from routers.orders import _summary
from utils.auth_utils import get_current_user, hash_password, verify_password

router = APIRouter(prefix="/customer", tags=["Customer"])
logger = logging.getLogger(__name__)

@router.get("/profile", response_model=UserProfile)
def get_profile(user: User = Depends(get_current_user)):
    return user

@router.patch("/profile", response_model=UserProfile)
def update_profile(
    profile: UserProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    update_data = profile.model_dump(exclude_unset=True)
    phone = update_data.get("phone")
    if phone and db.query(User).filter(User.phone == phone, User.id != user.id).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Phone number already in use")
    for key, value in update_data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user

@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    user.hashed_password = hash_password(payload.new_password)
    db.commit()
    logger.info(f"Password changed for user {user.id}")
    return {"message": "Password changed successfully"}

@router.get("/dashboard/stats", response_model=CustomerDashboardStats)
def dashboard_stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return dashboard_crud.customer_stats(db, user.id)

@router.get("/dashboard/recent-orders", response_model=RecentOrders)
def recent_orders(
    limit: int = Query(5, ge=1, le=20),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    orders = dashboard_crud.recent_customer_orders(db, user.id, limit=limit)
    return {"orders": [_summary(o) for o in orders]}
