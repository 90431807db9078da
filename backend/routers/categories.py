from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from models.users import User
from schemas.categories import Category, CategoryCreate, CategoryUpdate
from crud import categories as category_crud
from utils.auth_utils import require_admin, get_user_identifier

router = APIRouter(prefix="/categories", tags=["Categories"])
logger = logging.getLogger(__name__)

def _with_count(db: Session, category) -> dict:
    data = Category.model_validate(category).model_dump()
    data["product_count"] = category_crud.count_products(db, category.id)
    return data

@router.get("/", response_model=List[Category])
def list_categories(db: Session = Depends(get_db)):
    return [_with_count(db, c) for c in category_crud.get_categories(db)]

@router.get("/slug/{slug}", response_model=Category)
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    category = category_crud.get_category_by_slug(db, slug)
    if not category or not category.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return _with_count(db, category)

@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = category_crud.get_category(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return _with_count(db, category)

@router.post("/", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    try:
        return category_crud.create_category(db, category, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    category: CategoryUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    try:
        db_category = category_crud.update_category(db, category_id, category, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return db_category

@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    try:
        deleted = category_crud.delete_category(db, category_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    logger.info(f"Category {category_id} deleted by {get_user_identifier(user)}")
    return {"message": "Category deleted successfully"}
