from pydantic import BaseModel, Field
from typing import Optional

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=120)
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, pattern=SLUG_PATTERN, max_length=120)
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None

class Category(CategoryBase):
    id: int
    product_count: Optional[int] = None

    class Config:
        from_attributes = True
