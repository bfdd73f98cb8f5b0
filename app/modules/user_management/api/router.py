from typing import Any, List
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.core.context import get_mailer
from app.core.errors import NotFoundError
from app.db.session import get_db
from app.deps import get_current_user
from app.modules.notifications.services.mailer import SmtpMailer
from app.modules.notifications.services.notification_events import send_email_change_confirmation
from app.modules.posts.bookmarks.services.bookmark import list_for_user
from app.modules.posts.comments.schemas.comment import MyComment
from app.modules.posts.comments.services.comment import get_user_comments
from app.modules.posts.schemas.post import PostSummary
from app.modules.posts.services.post import get_user_posts
from app.modules.auth.schemas.auth import Message
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import (
    EmailChangeRequest, User as UserSchema, UserPublic, UserUpdate
)
from app.modules.user_management.services.user import (
    delete_user, get_user_by_username, request_email_change, update_user
)

router = APIRouter()
logger = logging.getLogger("app")

@router.get("/me", response_model=UserSchema)
def read_user_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return current_user

@router.put("/me", response_model=UserSchema)
def update_user_me(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Update current user"""
    return update_user(db, current_user, user_in)

@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_me(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """Delete the current account along with its posts, comments and bookmarks"""
    delete_user(db, current_user)

@router.post("/me/email", response_model=Message)
def change_email(
    *,
    db: Session = Depends(get_db),
    email_in: EmailChangeRequest,
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Send a confirmation link to the new address"""
    new_email = email_in.new_email.lower()
    token = request_email_change(db, current_user, new_email)
    background_tasks.add_task(send_email_change_confirmation, mailer, new_email, token)
    return Message(message="Check the new address for a confirmation link")

@router.get("/me/posts", response_model=List[PostSummary])
def read_my_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """All of my posts, drafts and private ones included"""
    return [PostSummary.model_validate(post) for post in get_user_posts(db, current_user.id)]

@router.get("/me/bookmarks", response_model=List[PostSummary])
def read_my_bookmarks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    return [PostSummary.model_validate(post) for post in list_for_user(db, current_user)]

@router.get("/me/comments", response_model=List[MyComment])
def read_my_comments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    return get_user_comments(db, current_user.id)

@router.get("/by-username/{username}", response_model=UserPublic)
def read_user_by_username(
    username: str,
    db: Session = Depends(get_db),
) -> Any:
    """Get a specific user by username"""
    user = get_user_by_username(db, username=username)
    if not user:
        raise NotFoundError("User not found")
    return user
