from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from schemas.cod import OutstandingCOD, CODTracking
from schemas.ledger import LedgerEntry

class ReportPeriod(BaseModel):
    date_from: datetime
    date_to: datetime

class FinancialSummary(BaseModel):
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    assets: Decimal
    liabilities: Decimal
    equity: Decimal

class OrderStats(BaseModel):
    count: int
    total_value: Decimal

class PaymentMethodBreakdown(BaseModel):
    payment_method: str
    count: int
    total: Decimal

class SummaryReport(BaseModel):
    period: ReportPeriod
    financial: FinancialSummary
    orders: OrderStats
    payment_methods: List[PaymentMethodBreakdown]
    outstanding_cod: OutstandingCOD

class DetailedReport(BaseModel):
    period: ReportPeriod
    entries: List[LedgerEntry]

class CODVariance(BaseModel):
    order_id: int
    order_number: str
    expected_amount: Decimal
    collected_amount: Decimal
    variance: Decimal

class CODStatistics(BaseModel):
    total_orders: int
    total_value: Decimal
    collected: int
    collected_value: Decimal
    pending: int
    pending_value: Decimal
    variances: List[CODVariance]

class CODOrderRow(BaseModel):
    id: int
    order_number: str
    status: str
    total: Decimal
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    placed_at: Optional[datetime] = None
    cod_tracking: Optional[CODTracking] = None

class CODAnalysisReport(BaseModel):
    period: ReportPeriod
    statistics: CODStatistics
    orders: List[CODOrderRow]
