from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.chart_of_accounts import AccountType, AccountCategory

class ChartOfAccountsBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    type: AccountType
    category: AccountCategory
    description: Optional[str] = None
    is_active: bool = True

class ChartOfAccountsCreate(ChartOfAccountsBase):
    pass

class ChartOfAccountsUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    category: Optional[AccountCategory] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class ChartOfAccounts(ChartOfAccountsBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class InitAccountsRequest(BaseModel):
    force: Optional[bool] = None
