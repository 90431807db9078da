from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

class CODCollect(BaseModel):
    order_id: int
    amount_collected: Decimal = Field(..., gt=0, decimal_places=2)
    notes: Optional[str] = None

class CODReconcile(BaseModel):
    variance_reason: Optional[str] = None

class CODTracking(BaseModel):
    id: int
    order_id: int
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    amount_due: Decimal
    amount_collected: Decimal
    collected_at: Optional[datetime] = None
    collected_by: Optional[str] = None
    variance: Decimal
    variance_reason: Optional[str] = None
    notes: Optional[str] = None
    is_reconciled: bool
    reconciled_at: Optional[datetime] = None
    reconciled_by: Optional[str] = None

    class Config:
        from_attributes = True

class OutstandingCOD(BaseModel):
    total: Decimal
    count: int

class CODSummary(BaseModel):
    outstanding: OutstandingCOD
    recent_collections: List[CODTracking]

class CODCollectResponse(BaseModel):
    success: bool = True
    message: str
    cod_tracking: CODTracking
