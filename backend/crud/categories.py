from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional
import logging

from models.categories import Category
from models.products import Product
from schemas.categories import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

def get_category(db: Session, category_id: int):
    return db.query(Category).filter(Category.id == category_id).first()

def get_category_by_slug(db: Session, slug: str):
    return db.query(Category).filter(Category.slug == slug).first()

def get_categories(db: Session, include_inactive: bool = False):
    query = db.query(Category)
    if not include_inactive:
        query = query.filter(Category.is_active == True)
    return query.order_by(Category.display_order, Category.name).all()

def count_products(db: Session, category_id: int, active_only: bool = True) -> int:
    query = db.query(func.count(Product.id)).filter(Product.category_id == category_id)
    if active_only:
        query = query.filter(Product.is_active == True)
    return query.scalar() or 0

def create_category(db: Session, category: CategoryCreate, user_id: Optional[str] = None):
    if get_category_by_slug(db, category.slug):
        raise ValueError(f"Category slug '{category.slug}' already exists")
    db_category = Category(**category.model_dump(), created_by=user_id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category

def update_category(db: Session, category_id: int, category: CategoryUpdate, user_id: Optional[str] = None):
    db_category = get_category(db, category_id)
    if not db_category:
        return None
    update_data = category.model_dump(exclude_unset=True)
    if "slug" in update_data and update_data["slug"] != db_category.slug:
        if get_category_by_slug(db, update_data["slug"]):
            raise ValueError(f"Category slug '{update_data['slug']}' already exists")
    for key, value in update_data.items():
        setattr(db_category, key, value)
    db_category.updated_by = user_id
    db.commit()
    db.refresh(db_category)
    return db_category

def delete_category(db: Session, category_id: int) -> bool:
    db_category = get_category(db, category_id)
    if not db_category:
        return False
    if count_products(db, category_id, active_only=False):
        raise ValueError("Cannot delete a category that still has products")
    db.delete(db_category)
    db.commit()
    logger.info(f"Category {category_id} deleted")
    return True
