from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey, JSON
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class Product(Base, AuditMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(170), unique=True, index=True, nullable=False)
    sku = Column(String(50), unique=True, nullable=True)
    short_description = Column(String(300), nullable=True)
    long_description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    cost = Column(Numeric(10, 2), nullable=True)  # unit cost, drives COGS on fulfilment
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    media = Column(JSON, nullable=True)
    badges = Column(JSON, nullable=True)
    allergens = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    inventory_tracking_enabled = Column(Boolean, default=True, nullable=False)
    stock_qty = Column(Integer, default=0)
    low_stock_threshold = Column(Integer, default=5)

    category = relationship("Category", back_populates="products")
