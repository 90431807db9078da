from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from models.ledger_entries import LedgerDirection, LedgerReferenceType
from models.chart_of_accounts import AccountType

class LedgerLine(BaseModel):
    """One requested debit or credit, before it is resolved and written."""
    account_code: str
    amount: Decimal
    direction: LedgerDirection
    description: str

class LedgerAccountRef(BaseModel):
    id: int
    code: str
    name: str
    type: AccountType

    class Config:
        from_attributes = True

class LedgerEntry(BaseModel):
    id: int
    transaction_id: str
    order_id: Optional[int] = None
    order_number: Optional[str] = None
    account_id: int
    account: Optional[LedgerAccountRef] = None
    amount: Decimal
    direction: LedgerDirection
    description: str
    reference_type: Optional[LedgerReferenceType] = None
    reference_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class AccountBalance(BaseModel):
    code: str
    name: str
    type: AccountType
    balance: Decimal

class TrialBalanceRow(BaseModel):
    code: str
    name: str
    type: AccountType
    debits: Decimal
    credits: Decimal
    balance: Decimal

class TrialBalance(BaseModel):
    accounts: List[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal
    unbalanced_transactions: List[str]
