from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user
from app.modules.user_management.models.user import User
from app.modules.posts.bookmarks.schemas.bookmark import BookmarkToggleResult
from app.modules.posts.bookmarks.services.bookmark import toggle_bookmark

router = APIRouter()

@router.post("", response_model=BookmarkToggleResult)
def toggle_post_bookmark(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to bookmark"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Bookmark the post, or remove the bookmark if it already exists"""
    bookmarked = toggle_bookmark(db, current_user, post_id)
    return BookmarkToggleResult(post_id=post_id, bookmarked=bookmarked)
