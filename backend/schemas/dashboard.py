from pydantic import BaseModel
from typing import List
from decimal import Decimal
from schemas.cod import OutstandingCOD
from schemas.orders import OrderSummary

class CustomerDashboardStats(BaseModel):
    total_orders: int
    total_spent: Decimal
    pending_orders: int

class RecentOrders(BaseModel):
    orders: List[OrderSummary]

class LowStockProduct(BaseModel):
    id: int
    name: str
    stock_qty: int
    low_stock_threshold: int

class AdminDashboardStats(BaseModel):
    today_orders: int
    today_revenue: Decimal
    pending_orders: int
    total_customers: int
    low_stock_products: List[LowStockProduct]
    outstanding_cod: OutstandingCOD
