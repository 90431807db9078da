from pydantic import BaseModel, Field
from typing import Optional

class AddressBase(BaseModel):
    label: str = Field(..., min_length=1, max_length=50)
    line1: str = Field(..., min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    area: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

class AddressCreate(AddressBase):
    is_default: bool = False

class AddressUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    line1: Optional[str] = Field(None, min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    area: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

class Address(AddressBase):
    id: int
    is_default: bool

    class Config:
        from_attributes = True
