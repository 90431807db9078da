from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.clock import local_now
import enum


class LedgerDirection(enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class LedgerReferenceType(enum.Enum):
    ORDER = "ORDER"
    PAYMENT = "PAYMENT"
    INVENTORY = "INVENTORY"
    ADJUSTMENT = "ADJUSTMENT"


class LedgerEntry(Base):
    """
    One debit or credit line of a balanced transaction.

    Rows are append-only: there is no updated_at and no soft delete. Mistakes are
    corrected by posting a new, offsetting transaction.
    """
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(40), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), CheckConstraint('amount >= 0', name='check_ledger_amount_non_negative'), nullable=False)
    direction = Column(Enum(LedgerDirection), nullable=False)
    description = Column(String(255), nullable=False)
    reference_type = Column(Enum(LedgerReferenceType), nullable=True)
    reference_id = Column(String(50), nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=local_now, nullable=False, index=True)

    account = relationship("ChartOfAccounts", back_populates="ledger_entries")
    order = relationship("Order")
