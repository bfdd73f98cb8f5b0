# Implements security-related functionality:
# JWT access token generation and verification
# Signed single-purpose tokens for find-id, password reset and email change links
# Password hashing and verification using bcrypt

from datetime import timedelta
from typing import Any, Dict, Optional, Union
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.timeutils import utcnow

logger = logging.getLogger("app")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PURPOSE_FIND_ID = "find_id"
PURPOSE_PASSWORD_RESET = "password_reset"
PURPOSE_EMAIL_CHANGE = "email_change"

def create_access_token(subject: Union[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject)}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_access_token(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        # Purpose tokens must never work as sessions
        if payload.get("purpose"):
            logger.warning("Purpose token presented as access token")
            return None

        user_id: str = payload.get("sub")
        if user_id is None:
            logger.warning("Token payload missing 'sub' field")
            return None

        return user_id
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        return None

def create_purpose_token(subject: str, purpose: str, extra: Optional[Dict[str, Any]] = None) -> str:
    """Short-lived token embedded in emailed links"""
    expire = utcnow() + timedelta(minutes=settings.PURPOSE_TOKEN_EXPIRE_MINUTES)
    to_encode = {"exp": expire, "sub": str(subject), "purpose": purpose}
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_purpose_token(token: str, purpose: str) -> Optional[Dict[str, Any]]:
    """Return the payload when the token is valid and was issued for `purpose`"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Purpose token verification error: {e}")
        return None

    if payload.get("purpose") != purpose or not payload.get("sub"):
        logger.warning(f"Token purpose mismatch, expected {purpose}")
        return None
    return payload
