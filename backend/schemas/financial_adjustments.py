from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from models.financial_adjustments import AdjustmentType, AdjustmentStatus

class FinancialAdjustmentCreate(BaseModel):
    type: AdjustmentType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    reason: str = Field(..., min_length=10)
    debit_account: str
    credit_account: str
    description: Optional[str] = None
    order_id: Optional[int] = None
    customer_id: Optional[int] = None

class FinancialAdjustment(BaseModel):
    id: int
    type: AdjustmentType
    amount: Decimal
    reason: str
    description: Optional[str] = None
    debit_account_code: str
    credit_account_code: str
    order_id: Optional[int] = None
    customer_id: Optional[int] = None
    status: AdjustmentStatus
    requested_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class FinancialAdjustmentList(BaseModel):
    adjustments: List[FinancialAdjustment]
    pagination: Pagination

class FinancialAdjustmentResponse(BaseModel):
    success: bool = True
    message: str
    adjustment: FinancialAdjustment
