from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from typing import Optional
import logging

from models.products import Product
from models.categories import Category
from schemas.products import ProductCreate, ProductUpdate
from utils.clock import local_now

logger = logging.getLogger(__name__)

def get_product(db: Session, product_id: int):
    return db.query(Product).options(joinedload(Product.category)).filter(Product.id == product_id).first()

def get_product_by_slug(db: Session, slug: str):
    return db.query(Product).options(joinedload(Product.category)).filter(Product.slug == slug).first()

def get_products(
    db: Session,
    category_slug: Optional[str] = None,
    search: Optional[str] = None,
    active_only: bool = True,
    skip: int = 0,
    limit: int = 20,
):
    """Returns (products, total) for one page of the catalogue."""
    query = db.query(Product).options(joinedload(Product.category))
    if active_only:
        query = query.filter(Product.is_active == True)
    if category_slug:
        query = query.join(Category, Product.category_id == Category.id).filter(Category.slug == category_slug)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.short_description.ilike(pattern)))
    total = query.count()
    products = query.order_by(Product.name).offset(skip).limit(limit).all()
    return products, total

def get_low_stock_products(db: Session, limit: int = 10):
    return db.query(Product).filter(
        Product.is_active == True,
        Product.inventory_tracking_enabled == True,
        Product.stock_qty <= Product.low_stock_threshold,
    ).order_by(Product.stock_qty).limit(limit).all()

def _check_unique(db: Session, slug: Optional[str], sku: Optional[str], exclude_id: Optional[int] = None):
    # Soft-deleted rows still hold their slug/sku in the unique index
    if slug:
        query = db.query(Product).execution_options(include_deleted=True).filter(Product.slug == slug)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ValueError(f"Product slug '{slug}' already exists")
    if sku:
        query = db.query(Product).execution_options(include_deleted=True).filter(Product.sku == sku)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ValueError(f"Product SKU '{sku}' already exists")

def create_product(db: Session, product: ProductCreate, user_id: Optional[str] = None):
    if not db.query(Category).filter(Category.id == product.category_id).first():
        raise ValueError(f"Category {product.category_id} not found")
    _check_unique(db, product.slug, product.sku)
    db_product = Product(**product.model_dump(), created_by=user_id)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product {db_product.slug} created by {user_id}")
    return db_product

def update_product(db: Session, product_id: int, product: ProductUpdate, user_id: Optional[str] = None):
    db_product = get_product(db, product_id)
    if not db_product:
        return None
    update_data = product.model_dump(exclude_unset=True)
    if "category_id" in update_data and not db.query(Category).filter(Category.id == update_data["category_id"]).first():
        raise ValueError(f"Category {update_data['category_id']} not found")
    _check_unique(db, update_data.get("slug"), update_data.get("sku"), exclude_id=product_id)
    for key, value in update_data.items():
        setattr(db_product, key, value)
    db_product.updated_by = user_id
    db.commit()
    db.refresh(db_product)
    return db_product

def delete_product(db: Session, product_id: int, user_id: Optional[str] = None) -> bool:
    """Soft delete: historical order items keep pointing at the row."""
    db_product = get_product(db, product_id)
    if not db_product:
        return False
    db_product.deleted_at = local_now()
    db_product.deleted_by = user_id
    db_product.is_active = False
    db.commit()
    logger.info(f"Product {product_id} soft-deleted by {user_id}")
    return True
