from typing import List, Optional
import logging
import uuid
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.core.timeutils import utcnow
from app.db.session import commit_or_raise
from app.modules.moderation.services.gate import ensure_not_suspended
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import (
    CommentCreate,
    CommentUpdate,
    CommentWithReplies,
    MyComment,
    Comment as CommentSchema,
)
from app.modules.posts.models.post import Post
from app.modules.posts.services.post import can_view, get_post
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def _clean_content(content: Optional[str]) -> str:
    cleaned = (content or "").strip()
    if not cleaned:
        raise ValidationError("Comment content cannot be empty")
    return cleaned

def _to_schema(comment: Comment, nickname: Optional[str]) -> CommentSchema:
    return CommentSchema(
        id=comment.id,
        content=comment.content,
        user_id=comment.user_id,
        post_id=comment.post_id,
        parent_id=comment.parent_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author_nickname=nickname,
        is_edited=comment.updated_at > comment.created_at,
    )

def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID"""
    return db.query(Comment).filter(Comment.id == comment_id).first()

def add_comment(db: Session, post_id: str, author: User, comment_in: CommentCreate) -> CommentSchema:
    """Create a new comment or a reply to a top-level comment"""
    ensure_not_suspended(author)
    content = _clean_content(comment_in.content)

    post = get_post(db, post_id)
    if not post or not can_view(post, author):
        raise NotFoundError("Post not found")

    if comment_in.parent_id:
        parent = get_comment(db, comment_in.parent_id)
        if not parent or parent.post_id != post_id:
            raise ValidationError("Parent comment does not belong to this post")
        if parent.parent_id is not None:
            raise ValidationError("Replies can only be made to top-level comments")

    now = utcnow()
    comment = Comment(
        id=str(uuid.uuid4()),
        content=content,
        user_id=author.id,
        post_id=post_id,
        parent_id=comment_in.parent_id,
        created_at=now,
        updated_at=now,
    )
    db.add(comment)
    commit_or_raise(db)
    db.refresh(comment)
    logger.info(f"User {author.id} commented on post {post_id}")
    return _to_schema(comment, author.nickname)

def edit_comment(db: Session, comment_id: str, actor: User, comment_in: CommentUpdate) -> CommentSchema:
    """Update comment (author only)"""
    comment = get_comment(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.user_id != actor.id:
        raise PermissionDeniedError("Not enough permissions")
    ensure_not_suspended(actor)

    comment.content = _clean_content(comment_in.content)
    comment.updated_at = utcnow()
    commit_or_raise(db)
    db.refresh(comment)
    return _to_schema(comment, actor.nickname)

def delete_comment(db: Session, comment_id: str, actor: User) -> Comment:
    """Delete comment; replies of a top-level comment go with it"""
    comment = get_comment(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.user_id != actor.id and not actor.is_admin:
        raise PermissionDeniedError("Not enough permissions")

    db.delete(comment)
    commit_or_raise(db)
    logger.info(f"Comment {comment_id} deleted by {actor.id}")
    return comment

def list_for_post(db: Session, post_id: str) -> List[CommentSchema]:
    """All comments of a post, oldest first, with the authors' current nicknames"""
    rows = (
        db.query(Comment, User.nickname)
        .outerjoin(User, User.id == Comment.user_id)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return [_to_schema(comment, nickname) for comment, nickname in rows]

def build_comment_tree(comments: List[CommentSchema]) -> List[CommentWithReplies]:
    """
    Partition a flat, ordered comment list into top-level comments, each
    carrying its direct replies. Input order is kept at both levels.
    Replies whose parent is missing from the list are dropped.
    """
    roots = {}
    for comment in comments:
        if comment.parent_id is None:
            roots[comment.id] = CommentWithReplies(**comment.model_dump(), replies=[])

    for comment in comments:
        if comment.parent_id is not None and comment.parent_id in roots:
            roots[comment.parent_id].replies.append(comment)

    return list(roots.values())

def get_comments_with_replies(db: Session, post_id: str, viewer: Optional[User] = None) -> List[CommentWithReplies]:
    """Comment tree of a post visible to `viewer`"""
    post = get_post(db, post_id)
    if not post or not can_view(post, viewer):
        raise NotFoundError("Post not found")
    return build_comment_tree(list_for_post(db, post_id))

def get_user_comments(db: Session, user_id: str) -> List[MyComment]:
    """Comments written by a user, newest first, with the post they belong to"""
    rows = (
        db.query(Comment, Post.title, Post.slug)
        .join(Post, Post.id == Comment.post_id)
        .filter(Comment.user_id == user_id)
        .order_by(Comment.created_at.desc())
        .all()
    )
    return [
        MyComment(
            id=comment.id,
            content=comment.content,
            user_id=comment.user_id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            post_title=title,
            post_slug=slug,
        )
        for comment, title, slug in rows
    ]
