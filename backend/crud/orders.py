"""
Order lifecycle: checkout from the cart, status transitions, cancellation.

Every state change that moves money writes its ledger transaction in the same
database transaction as the order change itself (commit=False on the ledger
adapters, one db.commit() here), so an order can never exist without its
placement entries and a cancellation can't land without its reversal.
"""
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.exc import SQLAlchemyError
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging

from models.orders import Order, OrderItem, OrderStatusHistory, OrderStatus, FulfillmentType, PaymentMethod, PaymentStatus
from models.carts import Cart
from models.products import Product
from models.users import User
from models.cod_tracking import CODTracking
from schemas.orders import CheckoutRequest
from crud import ledger as ledger_crud
from crud import addresses as address_crud
from crud import settings as settings_crud
from crud.ledger import AccountResolver
from utils.clock import local_now

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "DBY"
DEFAULT_DELIVERY_FEE = Decimal("25.00")

ALLOWED_TRANSITIONS: Dict[OrderStatus, List[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.OUT_FOR_DELIVERY, OrderStatus.PICKED_UP, OrderStatus.CANCELLED],
    OrderStatus.OUT_FOR_DELIVERY: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [OrderStatus.REFUNDED],
    OrderStatus.PICKED_UP: [OrderStatus.REFUNDED],
    OrderStatus.CANCELLED: [OrderStatus.REFUNDED],
    OrderStatus.REFUNDED: [],
}

STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.OUT_FOR_DELIVERY: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.PICKED_UP: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

CUSTOMER_CANCELLABLE = (OrderStatus.PENDING, OrderStatus.CONFIRMED)
OPEN_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
                 OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY)


class CheckoutError(ValueError):
    """Checkout refused; details lists per-item problems when there are any."""

    def __init__(self, message: str, details: Optional[list] = None):
        super().__init__(message)
        self.details = details or []


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


def generate_order_number(db: Session) -> str:
    """DBY-<year>-<sequence>, sequence counted per year and zero-padded to 4 digits."""
    prefix = f"{ORDER_NUMBER_PREFIX}-{local_now().year}-"
    sequence = db.query(Order).filter(Order.order_number.like(f"{prefix}%")).count() + 1
    while db.query(Order.id).filter(Order.order_number == f"{prefix}{sequence:04d}").first():
        sequence += 1
    return f"{prefix}{sequence:04d}"


def calculate_delivery_fee(db: Session, fulfillment_type: FulfillmentType, sub_total: Decimal) -> Decimal:
    if fulfillment_type != FulfillmentType.DELIVERY:
        return Decimal("0.00")
    fee = settings_crud.get_decimal_setting(db, "delivery_fee", DEFAULT_DELIVERY_FEE)
    threshold = settings_crud.get_setting(db, "free_delivery_threshold")
    if threshold:
        try:
            if Decimal(threshold) > 0 and sub_total >= Decimal(threshold):
                return Decimal("0.00")
        except ArithmeticError:
            logger.warning(f"Ignoring invalid free_delivery_threshold {threshold!r}")
    return _money(fee)


def create_order_from_cart(
    db: Session,
    customer: User,
    checkout: CheckoutRequest,
    created_by: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
) -> Order:
    """
    Turn the customer's cart into a PENDING cash-on-delivery order.

    Runs as one database transaction: order, items, stock decrements, status
    history, cart clearing, COD tracking row and the placement ledger entries
    are committed together or not at all.
    """
    cart = db.query(Cart).filter(Cart.customer_id == customer.id).first()
    if not cart or not cart.items:
        raise CheckoutError("Cart is empty")

    product_ids = [item.product_id for item in cart.items]
    products = {
        p.id: p
        for p in db.query(Product).filter(Product.id.in_(product_ids)).with_for_update().all()
    }

    problems = []
    for item in cart.items:
        product = products.get(item.product_id)
        if product is None or not product.is_active:
            problems.append({
                "product_id": item.product_id,
                "product_name": item.name_snapshot,
                "error": "Product is no longer available",
            })
        elif product.inventory_tracking_enabled and (product.stock_qty or 0) < item.quantity:
            problems.append({
                "product_id": product.id,
                "product_name": product.name,
                "requested": item.quantity,
                "available": product.stock_qty or 0,
            })
    if problems:
        raise CheckoutError("Insufficient inventory", problems)

    address = None
    if checkout.fulfillment_type == FulfillmentType.DELIVERY:
        address = address_crud.get_address(db, checkout.address_id, customer.id)
        if not address:
            raise CheckoutError("Selected address not found")

    sub_total = sum((_money(item.price_snapshot) * item.quantity for item in cart.items), Decimal("0.00"))
    delivery_fee = calculate_delivery_fee(db, checkout.fulfillment_type, sub_total)
    discount_amount = Decimal("0.00")
    tax_amount = Decimal("0.00")
    total = sub_total + delivery_fee + tax_amount - discount_amount

    try:
        order = Order(
            order_number=generate_order_number(db),
            customer_id=customer.id,
            placed_at=local_now(),
            fulfillment_type=checkout.fulfillment_type,
            delivery_address_id=address.id if address else None,
            delivery_address_snapshot=address.snapshot() if address else None,
            status=OrderStatus.PENDING,
            payment_method=PaymentMethod.COD,
            payment_status=PaymentStatus.UNPAID,
            delivery_fee=delivery_fee,
            sub_total=sub_total,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total=total,
            requested_delivery_time=checkout.requested_delivery_time,
            delivery_window=checkout.delivery_window.value if checkout.delivery_window else None,
            notes_customer=checkout.notes,
            special_instructions=checkout.special_instructions,
            source="web",
            created_by=created_by,
        )
        db.add(order)
        db.flush()

        for item in cart.items:
            db.add(OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                name_snapshot=item.name_snapshot,
                price_snapshot=item.price_snapshot,
                quantity=item.quantity,
                line_total=_money(item.price_snapshot) * item.quantity,
            ))
            product = products[item.product_id]
            if product.inventory_tracking_enabled:
                product.stock_qty = (product.stock_qty or 0) - item.quantity

        db.add(OrderStatusHistory(order_id=order.id, status=OrderStatus.PENDING,
                                  changed_by=created_by, notes="Order placed successfully"))
        db.add(CODTracking(order_id=order.id, amount_due=total, amount_collected=0, variance=0))

        for item in list(cart.items):
            db.delete(item)

        ledger_crud.record_order_placement(
            db, order.id, sub_total, delivery_fee,
            created_by=created_by, resolver=resolver, commit=False,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Checkout failed for customer {customer.id}")
        raise
    except ValueError:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(f"Order {order.order_number} placed by customer {customer.id}: total {total}")
    return order


def get_order(db: Session, order_id: int) -> Optional[Order]:
    return db.query(Order).options(
        selectinload(Order.items), selectinload(Order.status_history), joinedload(Order.customer)
    ).filter(Order.id == order_id).first()


def get_customer_order(db: Session, order_id: int, customer_id: int) -> Optional[Order]:
    return db.query(Order).options(
        selectinload(Order.items), selectinload(Order.status_history)
    ).filter(Order.id == order_id, Order.customer_id == customer_id).first()


def get_customer_orders(db: Session, customer_id: int, skip: int = 0, limit: int = 10) -> Tuple[List[Order], int]:
    query = db.query(Order).filter(Order.customer_id == customer_id)
    total = query.count()
    orders = query.options(selectinload(Order.items)).order_by(Order.placed_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return orders, total


def get_orders(db: Session, status: Optional[OrderStatus] = None, search: Optional[str] = None,
               skip: int = 0, limit: int = 20) -> Tuple[List[Order], int]:
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if search:
        query = query.filter(Order.order_number.ilike(f"%{search}%"))
    total = query.count()
    orders = query.options(selectinload(Order.items)).order_by(Order.placed_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return orders, total


def order_cost(order: Order) -> Decimal:
    """Known unit cost x quantity over the order's items. Items without a cost count as zero."""
    cost = Decimal("0.00")
    for item in order.items:
        if item.product is not None and item.product.cost is not None:
            cost += _money(item.product.cost) * item.quantity
    return cost


def _restore_stock(order: Order):
    for item in order.items:
        product = item.product
        if product is not None and product.inventory_tracking_enabled:
            product.stock_qty = (product.stock_qty or 0) + item.quantity


def _close_cod_tracking(order: Order, changed_by: Optional[str]):
    # A cancelled order has nothing left to collect
    tracking = order.cod_tracking
    if tracking is not None and tracking.collected_at is None and not tracking.is_reconciled:
        tracking.is_reconciled = True
        tracking.reconciled_at = local_now()
        tracking.reconciled_by = changed_by
        tracking.variance_reason = "Order cancelled"


def validate_transition(current: OrderStatus, new_status: OrderStatus):
    allowed = ALLOWED_TRANSITIONS.get(current, [])
    if new_status not in allowed:
        allowed_text = ", ".join(s.value for s in allowed) or "none"
        raise ValueError(f"Invalid status transition from {current.value} to {new_status.value} (allowed: {allowed_text})")


def update_order_status(
    db: Session,
    order_id: int,
    new_status: OrderStatus,
    changed_by: Optional[str] = None,
    notes: Optional[str] = None,
    resolver: Optional[AccountResolver] = None,
) -> Optional[Order]:
    """
    Move an order to a new status.

    CANCELLED restores tracked stock, closes the open COD tracking row and
    reverses the placement in the ledger. DELIVERED and PICKED_UP post cost of
    goods sold when the items have a known cost. Returns None when the order
    does not exist; an invalid transition raises ValueError.
    """
    order = get_order(db, order_id)
    if not order:
        return None

    previous = order.status
    validate_transition(previous, new_status)

    now = local_now()
    try:
        order.status = new_status
        timestamp_field = STATUS_TIMESTAMPS.get(new_status)
        if timestamp_field:
            setattr(order, timestamp_field, now)
        if new_status in (OrderStatus.DELIVERED, OrderStatus.PICKED_UP):
            order.actual_delivery_time = now
        if new_status == OrderStatus.REFUNDED and order.payment_status == PaymentStatus.PAID:
            order.payment_status = PaymentStatus.REFUNDED
        order.updated_by = changed_by

        db.add(OrderStatusHistory(order_id=order.id, status=new_status, changed_by=changed_by,
                                  notes=notes or f"Status changed from {previous.value} to {new_status.value}"))

        if new_status == OrderStatus.CANCELLED:
            _restore_stock(order)
            _close_cod_tracking(order, changed_by)
            ledger_crud.record_order_cancellation(
                db, order.id, order.sub_total, order.delivery_fee,
                created_by=changed_by, resolver=resolver, commit=False,
            )
        elif new_status in (OrderStatus.DELIVERED, OrderStatus.PICKED_UP):
            cost = order_cost(order)
            if cost > 0:
                ledger_crud.record_cost_of_goods_sold(
                    db, order.id, cost, created_by=changed_by, resolver=resolver, commit=False,
                )

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to update status of order {order_id}")
        raise
    except ValueError:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(f"Order {order.order_number} status {previous.value} -> {new_status.value} by {changed_by}")
    return order


def cancel_customer_order(db: Session, order_id: int, customer_id: int, changed_by: Optional[str] = None,
                          resolver: Optional[AccountResolver] = None) -> Optional[Order]:
    order = get_customer_order(db, order_id, customer_id)
    if not order:
        return None
    if order.status not in CUSTOMER_CANCELLABLE:
        raise ValueError(f"Order can no longer be cancelled (status {order.status.value})")
    return update_order_status(db, order_id, OrderStatus.CANCELLED, changed_by,
                               notes="Cancelled by customer", resolver=resolver)


def bulk_update_status(db: Session, order_ids: List[int], new_status: OrderStatus, changed_by: Optional[str] = None,
                       notes: Optional[str] = None, resolver: Optional[AccountResolver] = None):
    """Apply one status to many orders; each order succeeds or fails on its own."""
    results = []
    for order_id in order_ids:
        try:
            order = update_order_status(db, order_id, new_status, changed_by, notes, resolver)
            if order is None:
                results.append({"order_id": order_id, "success": False, "error": "Order not found"})
            else:
                results.append({"order_id": order_id, "success": True, "order": order})
        except ValueError as e:
            results.append({"order_id": order_id, "success": False, "error": str(e)})
    return results
