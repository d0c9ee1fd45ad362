import secrets
from typing import Optional
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from examhub.core.config import settings
from examhub.core.database import SessionLocal
from examhub.core.exceptions import Unauthorized
from examhub.crud.user import user as user_crud
from examhub.models.user import User

http_bearer = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> User:
    """Resolve the bearer token issued by the auth service to a user.

    Tokens are HS256 JWTs carrying the user id in ``sub`` (or ``user_id``).
    """
    if credentials is None:
        raise Unauthorized("Not authenticated")
    try:
        payload = jwt.decode(
            credentials.credentials, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise Unauthorized("Invalid token")

    subject = payload.get("sub", payload.get("user_id"))
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload")

    user = user_crud.get(db, id=user_id)
    if not user:
        raise Unauthorized("User not found")
    if not user.is_active:
        raise Unauthorized("User account is inactive")
    return user

def require_admin_api_key(x_api_key: Optional[str] = Header(None)):
    if not x_api_key or not secrets.compare_digest(x_api_key, settings.ADMIN_API_KEY):
        raise Unauthorized("Invalid API key")
