from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, JSON
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class PageStatus(enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Page(Base, TimestampMixin):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(500), nullable=True)
    status = Column(Enum(PageStatus), default=PageStatus.DRAFT, nullable=False)
    meta_title = Column(String(200), nullable=True)
    meta_description = Column(String(500), nullable=True)
    show_in_navigation = Column(Boolean, default=False, nullable=False)
    navigation_order = Column(Integer, nullable=True)
    featured_image = Column(String(500), nullable=True)
    sections = Column(JSON, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)


class Banner(Base, TimestampMixin):
    __tablename__ = "banners"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    subtitle = Column(String(300), nullable=True)
    content = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    button_text = Column(String(100), nullable=True)
    button_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    priority = Column(Integer, default=0, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    target_pages = Column(JSON, nullable=True)  # list of page keys, empty means everywhere
