from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from models.users import User
from schemas.products import Product, ProductCreate, ProductUpdate, ProductList
from crud import products as product_crud
from utils.auth_utils import require_admin, get_user_identifier

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger(__name__)

@router.get("/", response_model=ProductList)
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    products, total = product_crud.get_products(
        db, category_slug=category, search=search, skip=(page - 1) * limit, limit=limit
    )
    return {"products": products, "total": total, "page": page, "limit": limit}

@router.get("/slug/{slug}", response_model=Product)
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    product = product_crud.get_product_by_slug(db, slug)
    if not product or not product.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product

@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_crud.get_product(db, product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product

@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    try:
        return product_crud.create_product(db, product, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.patch("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    product: ProductUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    try:
        db_product = product_crud.update_product(db, product_id, product, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return db_product

@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    if not product_crud.delete_product(db, product_id, get_user_identifier(user)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return {"message": "Product deleted successfully"}
