from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class AdjustmentType(enum.Enum):
    REFUND_ADJUSTMENT = "REFUND_ADJUSTMENT"
    COD_SHORTAGE = "COD_SHORTAGE"
    COD_OVERAGE = "COD_OVERAGE"
    DELIVERY_FEE_WAIVER = "DELIVERY_FEE_WAIVER"
    PRODUCT_DISCOUNT = "PRODUCT_DISCOUNT"
    INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT"
    OTHER = "OTHER"


class AdjustmentStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class FinancialAdjustment(Base, TimestampMixin):
    """Human-readable audit record of a manual correction. Balances come from the ledger."""
    __tablename__ = "financial_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(AdjustmentType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    debit_account_code = Column(String(20), nullable=False)
    credit_account_code = Column(String(20), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(Enum(AdjustmentStatus), default=AdjustmentStatus.PENDING, nullable=False, index=True)
    requested_by = Column(String, nullable=False)
    approved_by = Column(String, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    transaction_id = Column(String(40), nullable=True)

    order = relationship("Order")
    customer = relationship("User")
