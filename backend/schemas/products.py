from pydantic import BaseModel, Field
from typing import Any, List, Optional
from decimal import Decimal
from schemas.categories import SLUG_PATTERN

class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=170)
    sku: Optional[str] = Field(None, max_length=50)
    short_description: Optional[str] = Field(None, max_length=300)
    long_description: Optional[str] = None
    price: Decimal = Field(..., gt=0, decimal_places=2)
    cost: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category_id: int
    media: Optional[List[Any]] = None
    badges: Optional[List[str]] = None
    allergens: Optional[List[str]] = None
    is_active: bool = True
    inventory_tracking_enabled: bool = True
    stock_qty: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    slug: Optional[str] = Field(None, pattern=SLUG_PATTERN, max_length=170)
    sku: Optional[str] = Field(None, max_length=50)
    short_description: Optional[str] = Field(None, max_length=300)
    long_description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    cost: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    media: Optional[List[Any]] = None
    badges: Optional[List[str]] = None
    allergens: Optional[List[str]] = None
    is_active: Optional[bool] = None
    inventory_tracking_enabled: Optional[bool] = None
    stock_qty: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)

class CategoryRef(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True

class Product(ProductBase):
    id: int
    category: Optional[CategoryRef] = None

    class Config:
        from_attributes = True

class ProductList(BaseModel):
    products: List[Product]
    total: int
    page: int
    limit: int
