from typing import List
import logging
import uuid
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import commit_or_raise
from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.posts.models.post import Post
from app.modules.posts.services.post import can_view, get_post
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def get_bookmark(db: Session, user_id: str, post_id: str):
    return (
        db.query(Bookmark)
        .filter(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
        .first()
    )

def is_bookmarked(db: Session, user_id: str, post_id: str) -> bool:
    return get_bookmark(db, user_id, post_id) is not None

def toggle_bookmark(db: Session, user: User, post_id: str) -> bool:
    """
    Flip the bookmark for (user, post) and return the new state.
    A post the user cannot see is reported as missing.
    A concurrent insert of the same pair counts as bookmarked.
    """
    post = get_post(db, post_id)
    if not post or not can_view(post, user):
        raise NotFoundError("Post not found")

    existing = get_bookmark(db, user.id, post_id)
    if existing:
        db.delete(existing)
        commit_or_raise(db)
        logger.info(f"User {user.id} removed bookmark on {post_id}")
        return False

    db.add(Bookmark(id=str(uuid.uuid4()), user_id=user.id, post_id=post_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Bookmark ({user.id}, {post_id}) already present")
        return True
    logger.info(f"User {user.id} bookmarked {post_id}")
    return True

def list_for_user(db: Session, user: User) -> List[Post]:
    """Bookmarked posts the user can still see, most recently bookmarked first"""
    query = (
        db.query(Post)
        .join(Bookmark, Bookmark.post_id == Post.id)
        .filter(Bookmark.user_id == user.id)
    )
    if not user.is_admin:
        query = query.filter(or_(Post.status == "published", Post.user_id == user.id))
    return query.order_by(Bookmark.created_at.desc()).all()
