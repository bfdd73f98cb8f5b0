from typing import Any, List, Optional

from fastapi import APIRouter, Depends, status, Path
from sqlalchemy.orm import Session
import logging

from app.core.errors import NotFoundError, ValidationError
from app.db.session import get_db
from app.deps import get_current_user, get_optional_user
from app.modules.user_management.models.user import User
from app.modules.posts.comments.schemas.comment import (
    Comment as CommentSchema, CommentCreate, CommentUpdate, CommentWithReplies
)
from app.modules.posts.comments.services.comment import (
    get_comment, get_comments_with_replies, add_comment, edit_comment, delete_comment
)

router = APIRouter()
logger = logging.getLogger("app")

def _validate_comment(db: Session, comment_id: str, post_id: str) -> None:
    """Raise when the comment is absent or belongs to another post"""
    comment = get_comment(db, comment_id=comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.post_id != post_id:
        raise ValidationError("Comment does not belong to the specified post")

@router.get("", response_model=List[CommentWithReplies])
def read_comments_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to get comments for"),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Get comments by post ID, replies nested under their parent"""
    return get_comments_with_replies(db, post_id, viewer=current_user)

@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to comment on"),
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create new comment on a post"""
    return add_comment(db, post_id, current_user, comment_in)

@router.put("/{comment_id}", response_model=CommentSchema)
def update_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    comment_id: str,
    comment_in: CommentUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Update a comment"""
    _validate_comment(db, comment_id, post_id)
    return edit_comment(db, comment_id, current_user, comment_in)

@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    comment_id: str,
    current_user: User = Depends(get_current_user),
) -> None:
    """Delete a comment and its replies"""
    _validate_comment(db, comment_id, post_id)
    delete_comment(db, comment_id, current_user)
    logger.info(f"Comment {comment_id} removed from post {post_id}")
