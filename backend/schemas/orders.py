from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from models.orders import OrderStatus, FulfillmentType, PaymentMethod, PaymentStatus
import enum

class DeliveryWindow(str, enum.Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"

class CheckoutRequest(BaseModel):
    fulfillment_type: FulfillmentType
    address_id: Optional[int] = None
    requested_delivery_time: Optional[datetime] = None
    delivery_window: Optional[DeliveryWindow] = None
    notes: Optional[str] = Field(None, max_length=500)
    special_instructions: Optional[str] = Field(None, max_length=300)

    @model_validator(mode='after')
    def address_required_for_delivery(self):
        if self.fulfillment_type == FulfillmentType.DELIVERY and not self.address_id:
            raise ValueError('Delivery address is required for delivery orders')
        return self

class OrderItem(BaseModel):
    id: int
    product_id: int
    name_snapshot: str
    price_snapshot: Decimal
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True

class OrderStatusHistory(BaseModel):
    status: OrderStatus
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True

class OrderSummary(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    fulfillment_type: FulfillmentType
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    total: Decimal
    placed_at: datetime
    item_count: Optional[int] = None

    class Config:
        from_attributes = True

class Order(BaseModel):
    id: int
    order_number: str
    customer_id: int
    status: OrderStatus
    fulfillment_type: FulfillmentType
    delivery_address_snapshot: Optional[Dict[str, Any]] = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    sub_total: Decimal
    delivery_fee: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    placed_at: datetime
    requested_delivery_time: Optional[datetime] = None
    delivery_window: Optional[str] = None
    notes_customer: Optional[str] = None
    notes_admin: Optional[str] = None
    special_instructions: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    preparing_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: List[OrderItem] = []
    status_history: List[OrderStatusHistory] = []

    class Config:
        from_attributes = True

class CheckoutResponse(BaseModel):
    success: bool = True
    order: Order

class OrderList(BaseModel):
    orders: List[OrderSummary]
    total: int
    page: int
    limit: int

class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)

class BulkStatusUpdate(BaseModel):
    order_ids: List[int] = Field(..., min_length=1, max_length=100)
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)

class BulkUpdateResult(BaseModel):
    order_id: int
    success: bool
    error: Optional[str] = None

class BulkUpdateResponse(BaseModel):
    updated: int
    failed: int
    results: List[BulkUpdateResult]
