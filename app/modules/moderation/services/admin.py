"""
Administrator control plane.

Every operation checks the acting user's role itself, independently of the
admin router dependency.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
import logging
import math
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.core.timeutils import utcnow
from app.db.session import commit_or_raise
from app.modules.moderation.services.gate import ensure_admin
from app.modules.posts.models.post import Post
from app.modules.posts.services import post as post_service
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import delete_user, get_user

logger = logging.getLogger(__name__)

SUSPENSION_PRESET_DAYS = (1, 7)

def _get_target(db: Session, user_id: str) -> User:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

def suspend_user(
    db: Session,
    admin: User,
    user_id: str,
    days: Optional[int] = None,
    until: Optional[datetime] = None,
) -> Tuple[User, int]:
    """Suspend until `until`, or for `days` from now. Returns the user and the length in days."""
    ensure_admin(admin)
    now = utcnow()

    if until is not None:
        if until.tzinfo is not None:
            until = until.astimezone(timezone.utc).replace(tzinfo=None)
        if until <= now:
            raise ValidationError("Suspension end must be in the future")
        days = max(1, math.ceil((until - now).total_seconds() / 86400))
    elif days is not None and days >= 1:
        until = now + timedelta(days=days)
    else:
        raise ValidationError("Give a number of days or an end date")

    target = _get_target(db, user_id)
    if target.id == admin.id:
        raise ValidationError("Administrators cannot suspend themselves")

    target.suspended_until = until
    commit_or_raise(db)
    db.refresh(target)
    logger.info(f"User {target.id} suspended until {until} by {admin.id}")
    return target, days

def unsuspend_user(db: Session, admin: User, user_id: str) -> User:
    ensure_admin(admin)
    target = _get_target(db, user_id)
    target.suspended_until = None
    commit_or_raise(db)
    db.refresh(target)
    logger.info(f"User {target.id} unsuspended by {admin.id}")
    return target

def delete_user_forced(db: Session, admin: User, user_id: str) -> None:
    """Remove an account and, by cascade, everything it wrote"""
    ensure_admin(admin)
    target = _get_target(db, user_id)
    if target.id == admin.id:
        raise ValidationError("Use account settings to delete your own account")
    delete_user(db, target)
    logger.info(f"User {user_id} deleted by admin {admin.id}")

def set_post_status_forced(db: Session, admin: User, post_id: str, new_status: str) -> Post:
    ensure_admin(admin)
    if new_status not in post_service.ADMIN_FORCEABLE_STATUSES:
        raise PermissionDeniedError("Administrators can only publish or hide posts")
    return post_service.change_status(db, post_id, admin, new_status)

def delete_post_forced(db: Session, admin: User, post_id: str) -> None:
    ensure_admin(admin)
    post_service.delete_post(db, post_id, admin)

def set_post_featured(db: Session, admin: User, post_id: str, is_featured: bool) -> Post:
    ensure_admin(admin)
    post = post_service.get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    post.is_featured = is_featured
    commit_or_raise(db)
    db.refresh(post)
    logger.info(f"Post {post.id} featured={is_featured}")
    return post

def list_users(db: Session, admin: User) -> List[User]:
    ensure_admin(admin)
    return db.query(User).order_by(User.created_at.desc()).all()

def list_all_posts(db: Session, admin: User) -> List[Post]:
    """Every post regardless of status, newest first"""
    ensure_admin(admin)
    return db.query(Post).order_by(Post.created_at.desc()).all()
