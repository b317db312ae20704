# Implements security-related functionality:
# JWT token generation for operators and tests
# JWT verification used by the request dependencies
# Sessions are issued by the external identity provider; this module only reads them

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
import logging

from jose import jwt, JWTError

from guildhall.core.config import settings

logger = logging.getLogger(__name__)

def create_access_token(subject: Union[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject)}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def verify_access_token(token: str) -> Optional[str]:
    """Return the user id carried by a token, or None when it is unusable"""
    try:
        # jose checks "exp" itself and raises ExpiredSignatureError
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: str = payload.get("sub")
        if user_id is None:
            logger.warning("Token payload missing 'sub' field")
            return None

        return user_id
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        return None
