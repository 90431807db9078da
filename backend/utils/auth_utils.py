import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, UserRole

load_dotenv()

logger = logging.getLogger(__name__)

# === Token configuration ===
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

bcrypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return bcrypt_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    FastAPI dependency that validates the bearer token and loads its user.

    Usage:
        @router.get("/profile")
        def profile(user: User = Depends(get_current_user)):
            ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise _unauthorized("Authorization header is missing")

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("Invalid authorization header format")

    try:
        payload = jwt.decode(parts[1], SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        raise _unauthorized(f"Token validation failed: {e}")

    user_id = payload.get("id")
    if user_id is None:
        raise _unauthorized("Invalid token claims")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise _unauthorized("User not found or inactive")
    return user


def require_role(roles: Iterable[UserRole], denied_status: int = status.HTTP_403_FORBIDDEN):
    """
    Dependency factory restricting a route to the given roles.

    denied_status lets the finance routes answer 401 to signed-in non-admins.
    """
    allowed = set(roles)

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.warning(f"User {get_user_identifier(user)} with role {user.role.value} denied access")
            raise HTTPException(
                status_code=denied_status,
                detail="Unauthorized" if denied_status == status.HTTP_401_UNAUTHORIZED else "Insufficient permissions",
            )
        return user

    return dependency


require_admin = require_role([UserRole.ADMIN])
require_staff = require_role([UserRole.ADMIN, UserRole.STAFF])
require_finance_admin = require_role([UserRole.ADMIN], denied_status=status.HTTP_401_UNAUTHORIZED)


def get_user_identifier(user: Optional[User]) -> str:
    """Stable string used in created_by/changed_by columns and log lines."""
    if user is None:
        return "system"
    return user.email or str(user.id)
