from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class CODTracking(Base, TimestampMixin):
    __tablename__ = "cod_tracking"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    amount_due = Column(Numeric(12, 2), nullable=False)
    amount_collected = Column(Numeric(12, 2), default=0, nullable=False)
    collected_at = Column(DateTime(timezone=True), nullable=True)
    collected_by = Column(String, nullable=True)
    variance = Column(Numeric(12, 2), default=0, nullable=False)  # collected - due
    variance_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    is_reconciled = Column(Boolean, default=False, nullable=False)
    reconciled_at = Column(DateTime(timezone=True), nullable=True)
    reconciled_by = Column(String, nullable=True)

    order = relationship("Order", back_populates="cod_tracking")
