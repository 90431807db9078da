from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.cart import Cart, CartItemAdd, CartItemUpdate
from crud import cart as cart_crud
from utils.auth_utils import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])

@router.get("/", response_model=Cart)
def get_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return cart_crud.cart_summary(cart_crud.get_or_create_cart(db, user.id))

@router.post("/items", response_model=Cart)
def add_item(item: CartItemAdd, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        cart = cart_crud.add_item(db, user.id, item.product_id, item.quantity)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return cart_crud.cart_summary(cart)

@router.patch("/items/{item_id}", response_model=Cart)
def update_item(item_id: int, item: CartItemUpdate, db: Session = Depends(get_db),
                user: User = Depends(get_current_user)):
    try:
        cart = cart_crud.update_item(db, user.id, item_id, item.quantity)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return cart_crud.cart_summary(cart)

@router.delete("/items/{item_id}", response_model=Cart)
def remove_item(item_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        cart = cart_crud.remove_item(db, user.id, item_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return cart_crud.cart_summary(cart)

@router.delete("/", response_model=Cart)
def clear_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    cart_crud.clear_cart(db, user.id)
    return cart_crud.cart_summary(cart_crud.get_or_create_cart(db, user.id))
