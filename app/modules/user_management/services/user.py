from typing import List, Optional
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import (
    PURPOSE_EMAIL_CHANGE,
    create_purpose_token,
    verify_purpose_token,
)
from app.db.session import commit_or_raise
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import UserUpdate

logger = logging.getLogger(__name__)

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username"""
    return db.query(User).filter(User.username == username.strip().lower()).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

def get_user_by_login(db: Session, login: str) -> Optional[User]:
    """A login is an email when it contains '@', a username otherwise"""
    if "@" in login:
        return get_user_by_email(db, login)
    return get_user_by_username(db, login)

def get_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    """Get list of users"""
    return db.query(User).order_by(User.created_at.desc()).offset(skip).limit(limit).all()

def is_username_available(db: Session, username: str) -> bool:
    username = (username or "").strip().lower()
    return bool(username) and get_user_by_username(db, username) is None

def is_nickname_available(db: Session, nickname: str, exclude_user_id: Optional[str] = None) -> bool:
    """A user keeping their own nickname does not count as a clash"""
    nickname = (nickname or "").strip()
    if not nickname:
        return False
    query = db.query(User).filter(User.nickname == nickname)
    if exclude_user_id:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is None

def update_user(db: Session, user: User, user_in: UserUpdate) -> User:
    """Update profile fields; username and role are never touched here"""
    update_data = user_in.model_dump(exclude_unset=True)

    if "nickname" in update_data:
        nickname = (update_data["nickname"] or "").strip()
        if not nickname:
            raise ValidationError("Nickname cannot be empty")
        if not is_nickname_available(db, nickname, exclude_user_id=user.id):
            raise ConflictError("Nickname is already taken")
        update_data["nickname"] = nickname

    for field, value in update_data.items():
        setattr(user, field, value)

    commit_or_raise(db, "Nickname is already taken")
    db.refresh(user)
    return user

def delete_user(db: Session, user: User) -> None:
    """Remove the account; posts, comments and bookmarks follow by FK cascade"""
    user_id = user.id
    db.delete(user)
    commit_or_raise(db)
    logger.info(f"Deleted user {user_id}")

def request_email_change(db: Session, user: User, new_email: str) -> str:
    """Signed token carrying the requested address, to be mailed to that address"""
    new_email = new_email.strip().lower()
    if new_email == (user.email or "").lower():
        raise ValidationError("This is already your email address")
    if get_user_by_email(db, new_email):
        raise ConflictError("Email is already registered")
    return create_purpose_token(user.id, PURPOSE_EMAIL_CHANGE, {"new_email": new_email})

def confirm_email_change(db: Session, token: str) -> User:
    payload = verify_purpose_token(token, PURPOSE_EMAIL_CHANGE)
    if not payload or not payload.get("new_email"):
        raise ValidationError("Invalid or expired confirmation link")

    user = get_user(db, payload["sub"])
    if not user:
        raise NotFoundError("User not found")

    new_email = payload["new_email"]
    if get_user_by_email(db, new_email):
        raise ConflictError("Email is already registered")

    user.email = new_email
    commit_or_raise(db, "Email is already registered")
    db.refresh(user)
    logger.info(f"User {user.id} changed email address")
    return user
