from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import timedelta
from decimal import Decimal

from models.orders import Order, OrderStatus
from models.users import User, UserRole
from crud import ledger as ledger_crud
from crud import products as product_crud
from crud.orders import OPEN_STATUSES
from utils.clock import local_now

NOT_SPENT = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


def customer_stats(db: Session, customer_id: int) -> dict:
    total_orders = db.query(func.count(Order.id)).filter(Order.customer_id == customer_id).scalar() or 0
    total_spent = db.query(func.sum(Order.total)).filter(
        Order.customer_id == customer_id, Order.status.notin_(NOT_SPENT)
    ).scalar()
    pending_orders = db.query(func.count(Order.id)).filter(
        Order.customer_id == customer_id, Order.status.in_(OPEN_STATUSES)
    ).scalar() or 0
    return {
        "total_orders": total_orders,
        "total_spent": ledger_crud.money(total_spent),
        "pending_orders": pending_orders,
    }


def recent_customer_orders(db: Session, customer_id: int, limit: int = 5):
    return db.query(Order).filter(Order.customer_id == customer_id).order_by(
        Order.placed_at.desc(), Order.id.desc()
    ).limit(limit).all()


def admin_stats(db: Session) -> dict:
    now = local_now()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_day = start_of_day + timedelta(days=1)

    today = (Order.placed_at >= start_of_day, Order.placed_at < end_of_day)
    today_orders = db.query(func.count(Order.id)).filter(*today).scalar() or 0
    today_revenue = db.query(func.sum(Order.total)).filter(*today, Order.status.notin_(NOT_SPENT)).scalar()
    pending_orders = db.query(func.count(Order.id)).filter(Order.status == OrderStatus.PENDING).scalar() or 0
    total_customers = db.query(func.count(User.id)).filter(User.role == UserRole.CUSTOMER).scalar() or 0

    return {
        "today_orders": today_orders,
        "today_revenue": ledger_crud.money(today_revenue) if today_revenue is not None else Decimal("0.00"),
        "pending_orders": pending_orders,
        "total_customers": total_customers,
        "low_stock_products": product_crud.get_low_stock_products(db),
        "outstanding_cod": ledger_crud.get_outstanding_cod(db),
    }
