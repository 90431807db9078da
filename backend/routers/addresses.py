from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from models.users import User
from schemas.addresses import Address, AddressCreate, AddressUpdate
from crud import addresses as address_crud
from utils.auth_utils import get_current_user

router = APIRouter(prefix="/addresses", tags=["Addresses"])

@router.get("/", response_model=List[Address])
def list_addresses(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return address_crud.get_addresses(db, user.id)

@router.post("/", response_model=Address, status_code=status.HTTP_201_CREATED)
def create_address(address: AddressCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return address_crud.create_address(db, user.id, address)

@router.patch("/{address_id}", response_model=Address)
def update_address(address_id: int, address: AddressUpdate, db: Session = Depends(get_db),
                   user: User = Depends(get_current_user)):
    db_address = address_crud.update_address(db, address_id, user.id, address)
    if not db_address:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return db_address

@router.post("/{address_id}/set-default", response_model=Address)
def set_default_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_address = address_crud.set_default_address(db, address_id, user.id)
    if not db_address:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return db_address

@router.delete("/{address_id}")
def delete_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if not address_crud.delete_address(db, address_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return {"message": "Address deleted successfully"}
