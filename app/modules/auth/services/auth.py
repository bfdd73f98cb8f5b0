import logging
import uuid
from typing import Optional
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, PermissionDeniedError, ValidationError
from app.core.security import (
    PURPOSE_FIND_ID,
    PURPOSE_PASSWORD_RESET,
    create_purpose_token,
    get_password_hash,
    verify_password,
    verify_purpose_token,
)
from app.db.session import commit_or_raise
from app.modules.auth.schemas.auth import SignupRequest
from app.modules.moderation.services.site_settings import is_signup_enabled
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import (
    get_user,
    get_user_by_email,
    get_user_by_login,
    is_nickname_available,
    is_username_available,
)

logger = logging.getLogger("app")

MIN_PASSWORD_LENGTH = 6

class AuthenticationError(Exception):
    """Login failed; the message is safe to show to the client"""

def validate_new_password(password: str, password_confirm: str) -> None:
    if password != password_confirm:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

def signup(db: Session, signup_in: SignupRequest) -> User:
    """Register an email/password account"""
    if not is_signup_enabled(db):
        raise PermissionDeniedError("Sign-up is currently disabled")

    username = signup_in.username.strip().lower()
    nickname = signup_in.nickname.strip()
    if not username:
        raise ValidationError("Username is required")
    if not nickname:
        raise ValidationError("Nickname is required")
    validate_new_password(signup_in.password, signup_in.password_confirm)

    if not is_username_available(db, username):
        raise ConflictError("Username is already taken")
    if not is_nickname_available(db, nickname):
        raise ConflictError("Nickname is already taken")
    if get_user_by_email(db, signup_in.email):
        raise ConflictError("Email is already registered")

    user = User(
        id=str(uuid.uuid4()),
        email=signup_in.email,
        username=username,
        nickname=nickname,
        full_name=signup_in.full_name,
        hashed_password=get_password_hash(signup_in.password),
        auth_provider="email",
        role="user",
    )
    db.add(user)
    commit_or_raise(db, "Username, nickname or email is already registered")
    db.refresh(user)
    logger.info(f"New user signed up: {user.id}")
    return user

def authenticate(db: Session, login: str, password: str) -> User:
    """Resolve a username or email and check the password"""
    user = get_user_by_login(db, login or "")
    if not user:
        raise AuthenticationError("Account not found")
    if not user.hashed_password or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Incorrect password")
    return user

def issue_find_id_token(db: Session, email: str) -> Optional[str]:
    """Token for the emailed find-id link, or None when nobody owns `email`"""
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Find-id requested for an unknown email")
        return None
    return create_purpose_token(user.id, PURPOSE_FIND_ID)

def resolve_find_id_token(db: Session, token: str) -> User:
    payload = verify_purpose_token(token, PURPOSE_FIND_ID)
    user = get_user(db, payload["sub"]) if payload else None
    if not user:
        raise ValidationError("Invalid or expired link")
    return user

def issue_password_reset_token(db: Session, email: str) -> Optional[str]:
    """Token for the emailed reset link; Google-only accounts have no password to reset"""
    user = get_user_by_email(db, email)
    if not user or user.auth_provider == "google":
        logger.info("Password reset requested for an unknown or Google account")
        return None
    return create_purpose_token(user.id, PURPOSE_PASSWORD_RESET)

def update_password(
    db: Session,
    new_password: str,
    new_password_confirm: str,
    token: Optional[str] = None,
    current_user: Optional[User] = None,
) -> User:
    """Set a new password from a reset token or for the signed-in user"""
    validate_new_password(new_password, new_password_confirm)

    user = None
    if token:
        payload = verify_purpose_token(token, PURPOSE_PASSWORD_RESET)
        user = get_user(db, payload["sub"]) if payload else None
        if not user:
            raise ValidationError("Invalid or expired reset link")
    elif current_user is not None:
        user = current_user
    else:
        raise PermissionDeniedError("Sign in or use the reset link to change the password")

    user.hashed_password = get_password_hash(new_password)
    commit_or_raise(db)
    db.refresh(user)
    logger.info(f"Password updated for user {user.id}")
    return user
