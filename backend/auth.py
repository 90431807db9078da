import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from starlette import status
from database import get_db
from models.users import User, UserRole
from schemas.users import CreateUserRequest, Token
from utils.auth_utils import hash_password, verify_password, create_access_token
from crud import settings as settings_crud
from utils import email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

db_dependency = Annotated[Session, Depends(get_db)]

def _token_for(user: User) -> Token:
    access_token = create_access_token(data={"sub": user.email, "id": user.id, "role": user.role.value})
    return Token(access_token=access_token, token_type="bearer")

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register_user(user: CreateUserRequest, db: db_dependency):
    email = user.email.lower()
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")
    if user.phone and db.query(User).filter(User.phone == user.phone).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this phone already exists")

    new_user = User(
        email=email,
        name=user.name,
        phone=user.phone,
        hashed_password=hash_password(user.password),
        role=UserRole.CUSTOMER,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info(f"Registered customer {new_user.email}")

    if settings_crud.is_feature_enabled(db, "notifications"):
        email_service.send_welcome_email(new_user)
    return _token_for(new_user)

@router.post("/login", response_model=Token)
def login(form_data: Annotated[OAuth2PasswordRequestForm, Depends()], db: db_dependency):
    user = db.query(User).filter(User.email == form_data.username.lower()).first()
    if not user or not user.is_active or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)
