from pydantic import BaseModel, Field, model_validator
from typing import Any, List, Optional
from datetime import datetime
from models.cms import PageStatus
from schemas.categories import SLUG_PATTERN

class PageBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., pattern=SLUG_PATTERN, max_length=200)
    content: str
    excerpt: Optional[str] = Field(None, max_length=500)
    status: PageStatus = PageStatus.DRAFT
    meta_title: Optional[str] = Field(None, max_length=200)
    meta_description: Optional[str] = Field(None, max_length=500)
    show_in_navigation: bool = False
    navigation_order: Optional[int] = None
    featured_image: Optional[str] = None
    sections: Optional[List[Any]] = None

class PageCreate(PageBase):
    pass

class PageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, pattern=SLUG_PATTERN, max_length=200)
    content: Optional[str] = None
    excerpt: Optional[str] = Field(None, max_length=500)
    status: Optional[PageStatus] = None
    meta_title: Optional[str] = Field(None, max_length=200)
    meta_description: Optional[str] = Field(None, max_length=500)
    show_in_navigation: Optional[bool] = None
    navigation_order: Optional[int] = None
    featured_image: Optional[str] = None
    sections: Optional[List[Any]] = None

class Page(PageBase):
    id: int
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BannerBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    content: Optional[str] = None
    image_url: Optional[str] = None
    button_text: Optional[str] = Field(None, max_length=100)
    button_url: Optional[str] = None
    is_active: bool = True
    priority: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    target_pages: Optional[List[str]] = None

class BannerCreate(BannerBase):
    @model_validator(mode='after')
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError('end_date must be after start_date')
        return self

class BannerUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, max_length=300)
    content: Optional[str] = None
    image_url: Optional[str] = None
    button_text: Optional[str] = Field(None, max_length=100)
    button_url: Optional[str] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    target_pages: Optional[List[str]] = None

class Banner(BannerBase):
    id: int

    class Config:
        from_attributes = True

class TestEmailRequest(BaseModel):
    to: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    subject: Optional[str] = Field(None, max_length=200)
