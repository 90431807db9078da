from sqlalchemy.orm import Session
from typing import Optional

from models.addresses import Address
from schemas.addresses import AddressCreate, AddressUpdate

def get_addresses(db: Session, customer_id: int):
    return db.query(Address).filter(Address.customer_id == customer_id).order_by(
        Address.is_default.desc(), Address.id
    ).all()

def get_address(db: Session, address_id: int, customer_id: int) -> Optional[Address]:
    return db.query(Address).filter(Address.id == address_id, Address.customer_id == customer_id).first()

def _clear_default(db: Session, customer_id: int):
    db.query(Address).filter(
        Address.customer_id == customer_id, Address.is_default == True
    ).update({Address.is_default: False}, synchronize_session=False)

def create_address(db: Session, customer_id: int, address: AddressCreate):
    has_addresses = db.query(Address.id).filter(Address.customer_id == customer_id).first() is not None
    make_default = address.is_default or not has_addresses
    if make_default:
        _clear_default(db, customer_id)
    db_address = Address(**address.model_dump(exclude={"is_default"}), customer_id=customer_id, is_default=make_default)
    db.add(db_address)
    db.commit()
    db.refresh(db_address)
    return db_address

def update_address(db: Session, address_id: int, customer_id: int, address: AddressUpdate):
    db_address = get_address(db, address_id, customer_id)
    if not db_address:
        return None
    for key, value in address.model_dump(exclude_unset=True).items():
        setattr(db_address, key, value)
    db.commit()
    db.refresh(db_address)
    return db_address

def set_default_address(db: Session, address_id: int, customer_id: int):
    db_address = get_address(db, address_id, customer_id)
    if not db_address:
        return None
    _clear_default(db, customer_id)
    db_address.is_default = True
    db.commit()
    db.refresh(db_address)
    return db_address

def delete_address(db: Session, address_id: int, customer_id: int) -> bool:
    """Delete an address; if it was the default, the oldest remaining one takes over."""
    db_address = get_address(db, address_id, customer_id)
    if not db_address:
        return False
    was_default = db_address.is_default
    db.delete(db_address)
    db.flush()
    if was_default:
        replacement = db.query(Address).filter(Address.customer_id == customer_id).order_by(Address.id).first()
        if replacement:
            replacement.is_default = True
    db.commit()
    return True
