from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from guildhall.core import security
from guildhall.core.config import settings
from guildhall.db.session import get_db
from guildhall.modules.user_management.models.user import User
from guildhall.modules.user_management.schemas.user import STAFF_ROLES
from guildhall.modules.user_management.services.user import get_user

# Sessions are issued by the external identity provider; the token URL is only advertised in the docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )

def _resolve_user(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    user_id = security.verify_access_token(token)
    if not user_id:
        return None
    return get_user(db, user_id=user_id)

def get_current_user(db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)) -> User:
    """
    Dependency for getting current authenticated user
    """
    user = _resolve_user(db, token)
    if not user:
        raise _credentials_exception()

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    return user

def get_current_user_optional(db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)) -> Optional[User]:
    """
    Dependency for read endpoints that personalise output when a viewer is signed in
    """
    user = _resolve_user(db, token)
    if user and not user.is_active:
        return None
    return user

def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency for moderator/admin only endpoints
    """
    if current_user.role not in STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return current_user
