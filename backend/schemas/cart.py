from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal

class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1, le=99)

class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0, le=99)

class CartItem(BaseModel):
    id: int
    product_id: int
    name_snapshot: str
    price_snapshot: Decimal
    quantity: int
    line_total: Decimal
    image: Optional[str] = None
    in_stock: bool = True

class Cart(BaseModel):
    id: int
    items: List[CartItem]
    sub_total: Decimal
    total_items: int
    total_unique_items: int
