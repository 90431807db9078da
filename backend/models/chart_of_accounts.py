from sqlalchemy import Column, Integer, String, Text, Boolean, Enum
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class AccountType(enum.Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


# Debit increases these; credit increases the rest.
DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)


class AccountCategory(enum.Enum):
    CASH = "CASH"
    ACCOUNTS_RECEIVABLE = "ACCOUNTS_RECEIVABLE"
    INVENTORY = "INVENTORY"
    PREPAID_EXPENSES = "PREPAID_EXPENSES"
    FIXED_ASSETS = "FIXED_ASSETS"
    ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
    COD_OUTSTANDING = "COD_OUTSTANDING"
    ACCRUED_EXPENSES = "ACCRUED_EXPENSES"
    OWNERS_EQUITY = "OWNERS_EQUITY"
    RETAINED_EARNINGS = "RETAINED_EARNINGS"
    PRODUCT_SALES = "PRODUCT_SALES"
    DELIVERY_FEES = "DELIVERY_FEES"
    SERVICE_REVENUE = "SERVICE_REVENUE"
    COST_OF_GOODS_SOLD = "COST_OF_GOODS_SOLD"
    DELIVERY_EXPENSES = "DELIVERY_EXPENSES"
    OPERATING_EXPENSES = "OPERATING_EXPENSES"
    ADMINISTRATIVE_EXPENSES = "ADMINISTRATIVE_EXPENSES"


class AccountCode(str, enum.Enum):
    """
    Account codes the event adapters post against.

    1000-1999 assets, 2000-2999 liabilities, 3000-3999 equity,
    4000-4999 revenue, 5000-5999 expenses.
    """
    CASH = "1000"
    ACCOUNTS_RECEIVABLE = "1100"
    COD_RECEIVABLE = "1200"
    INVENTORY_RAW_MATERIALS = "1300"
    INVENTORY_FINISHED_GOODS = "1310"
    PREPAID_EXPENSES = "1400"
    EQUIPMENT = "1500"
    ACCOUNTS_PAYABLE = "2000"
    COD_OUTSTANDING = "2100"
    ACCRUED_EXPENSES = "2200"
    OWNERS_EQUITY = "3000"
    RETAINED_EARNINGS = "3100"
    PRODUCT_SALES = "4000"
    DELIVERY_FEE_REVENUE = "4100"
    SERVICE_REVENUE = "4200"
    COST_OF_GOODS_SOLD = "5000"
    DELIVERY_EXPENSES = "5100"
    OPERATING_EXPENSES = "5200"
    ADMINISTRATIVE_EXPENSES = "5300"


class ChartOfAccounts(Base, TimestampMixin):
    __tablename__ = "chart_of_accounts"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    type = Column(Enum(AccountType), nullable=False)
    category = Column(Enum(AccountCategory), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    ledger_entries = relationship("LedgerEntry", back_populates="account")

    @property
    def is_debit_normal(self) -> bool:
        return self.type in DEBIT_NORMAL_TYPES
