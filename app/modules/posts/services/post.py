from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging
import re
import unicodedata
import uuid

import markdown2
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.core.timeutils import utcnow
from app.db.session import commit_or_raise
from app.modules.categories.models.category import Category
from app.modules.moderation.services.gate import ensure_not_suspended
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import PostCreate, PostUpdate
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

IMAGE_PATTERN = re.compile(r"!\[.*?\]\((.*?)\)")
MAX_SLUG_BASE_LENGTH = 80
UNTITLED = "Untitled"
ADMIN_FORCEABLE_STATUSES = ("published", "private")

def slugify(title: str) -> str:
    """ASCII-fold, lower-case and hyphenate a title. May return an empty string."""
    folded = unicodedata.normalize("NFKD", title or "").encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip("-")
    return slug[:MAX_SLUG_BASE_LENGTH].rstrip("-")

def generate_slug(title: str, now: Optional[datetime] = None) -> str:
    """Slug for a new post: title part plus the creation instant in milliseconds"""
    now = now or utcnow()
    stamp = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)
    return f"{slugify(title) or 'post'}-{stamp}"

def extract_thumbnail(content: Optional[str]) -> Optional[str]:
    """First markdown image target in the content, if any"""
    if not content:
        return None
    match = IMAGE_PATTERN.search(content)
    if not match:
        return None
    return match.group(1).strip() or None

def snapshot_author_name(user: User) -> str:
    if user.nickname:
        return user.nickname
    if user.full_name:
        return user.full_name
    if user.email:
        return user.email.split("@")[0]
    return "Unknown User"

def render_markdown(content: Optional[str]) -> str:
    # Raw HTML in posts is escaped, not rendered
    return markdown2.markdown(content or "", safe_mode="escape", extras=[
        'fenced-code-blocks',
        'header-ids',
        'tables',
        'strike',
        'break-on-newline',
        'cuddled-lists',
    ])

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def _ensure_category_exists(db: Session, category_id: Optional[str]) -> None:
    if category_id and not db.query(Category).filter(Category.id == category_id).first():
        raise ValidationError("Unknown category")

def can_view(post: Post, viewer: Optional[User]) -> bool:
    if post.status == "published":
        return True
    return viewer is not None and (viewer.id == post.user_id or viewer.is_admin)

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()

def get_post_by_slug(db: Session, slug: str) -> Optional[Post]:
    return db.query(Post).filter(Post.slug == slug).first()

def get_visible_post_by_slug(db: Session, slug: str, viewer: Optional[User]) -> Post:
    """Post by slug, or NotFoundError when it is absent or hidden from `viewer`"""
    post = get_post_by_slug(db, slug)
    if not post or not can_view(post, viewer):
        raise NotFoundError("Post not found")
    return post

def create_post(db: Session, author: User, post_in: PostCreate) -> Post:
    """Create new post"""
    ensure_not_suspended(author)

    title = (post_in.title or "").strip()
    content = post_in.content or ""
    if not title and not content.strip():
        raise ValidationError("A post needs a title or some content")
    _ensure_category_exists(db, post_in.category_id)

    now = utcnow()
    post = Post(
        id=str(uuid.uuid4()),
        title=title or UNTITLED,
        slug=generate_slug(title, now),
        content=content,
        excerpt=post_in.excerpt,
        category_id=post_in.category_id,
        thumbnail_url=extract_thumbnail(content),
        author_name=snapshot_author_name(author),
        user_id=author.id,
        status=post_in.status,
        published_at=now,
        view_count=0,
        is_featured=False,
    )
    db.add(post)
    commit_or_raise(db, "A post with this slug already exists")
    db.refresh(post)
    logger.info(f"Created post {post.id} ({post.status}) for user {author.id}")
    return post

def _apply_status(post: Post, new_status: str) -> None:
    # published_at doubles as the sort key; a draft going live gets a fresh one
    if post.status == "draft" and new_status == "published":
        post.published_at = utcnow()
    post.status = new_status

def update_post(db: Session, post_id: str, editor: User, post_in: PostUpdate) -> Post:
    """Update post (owner only)"""
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.user_id != editor.id:
        raise PermissionDeniedError("Not enough permissions")
    ensure_not_suspended(editor)

    update_data = post_in.model_dump(exclude_unset=True)

    title = update_data["title"].strip() if update_data.get("title") is not None else post.title
    content = update_data["content"] if update_data.get("content") is not None else post.content
    if not title and not (content or "").strip():
        raise ValidationError("A post needs a title or some content")

    if "category_id" in update_data:
        _ensure_category_exists(db, update_data["category_id"])
        post.category_id = update_data["category_id"]
    if update_data.get("title") is not None:
        post.title = title or UNTITLED
    if update_data.get("content") is not None:
        post.content = content
        post.thumbnail_url = extract_thumbnail(content)
    if "excerpt" in update_data:
        post.excerpt = update_data["excerpt"]
    if update_data.get("status") is not None:
        _apply_status(post, update_data["status"])

    commit_or_raise(db)
    db.refresh(post)
    logger.info(f"Updated post {post.id}")
    return post

def change_status(db: Session, post_id: str, actor: User, new_status: str) -> Post:
    """Owner sets any status; an administrator may only publish or hide"""
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")

    if post.user_id == actor.id:
        ensure_not_suspended(actor)
    elif actor.is_admin:
        if new_status not in ADMIN_FORCEABLE_STATUSES:
            raise PermissionDeniedError("Administrators can only publish or hide posts")
    else:
        raise PermissionDeniedError("Not enough permissions")

    _apply_status(post, new_status)
    commit_or_raise(db)
    db.refresh(post)
    logger.info(f"Post {post.id} status set to {new_status} by {actor.id}")
    return post

def delete_post(db: Session, post_id: str, actor: User) -> Post:
    """
    Delete post (owner or administrator).
    Comments and bookmarks are removed by their foreign-key cascade.
    """
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.user_id != actor.id and not actor.is_admin:
        raise PermissionDeniedError("Not enough permissions")

    logger.info(f"Deleting post with ID: {post.id}")
    db.delete(post)
    commit_or_raise(db)
    return post

def increment_view(db: Session, slug: str) -> None:
    """Best-effort view counter bump; failures are logged and ignored"""
    try:
        db.execute(
            update(Post)
            .where(Post.slug == slug)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning(f"Failed to increment view count for {slug}: {e}")

def _published(db: Session):
    return db.query(Post).filter(Post.status == "published")

def list_published(
    db: Session,
    category_slug: Optional[str] = None,
    sort: str = "latest",
    page: int = 1,
    exclude_featured: bool = False,
) -> Tuple[List[Post], int]:
    """One page of published posts and the total matching count"""
    query = _published(db)
    if category_slug:
        query = query.join(Category, Post.category_id == Category.id).filter(Category.slug == category_slug)
    if exclude_featured:
        query = query.filter(Post.is_featured.is_(False))

    if sort == "oldest":
        query = query.order_by(Post.published_at.asc())
    elif sort == "popular":
        query = query.order_by(Post.view_count.desc(), Post.published_at.desc())
    else:
        query = query.order_by(Post.published_at.desc())

    page_size = settings.POSTS_PER_PAGE
    total = query.count()
    posts = query.offset((page - 1) * page_size).limit(page_size).all()
    return posts, total

def get_hero_posts(db: Session) -> Tuple[Optional[Post], List[Post]]:
    """Newest featured post and the two newest regular posts"""
    featured = (
        _published(db)
        .filter(Post.is_featured.is_(True))
        .order_by(Post.published_at.desc())
        .first()
    )
    side = (
        _published(db)
        .filter(Post.is_featured.is_(False))
        .order_by(Post.published_at.desc())
        .limit(2)
        .all()
    )
    return featured, side

def search_posts(db: Session, q: str) -> Tuple[List[Post], List[Post]]:
    """
    Title matches and content matches among published posts.
    A post matching both appears only in the title list.
    """
    term = (q or "").strip()
    if not term:
        return [], []

    pattern = f"%{_escape_like(term)}%"
    title_matches = (
        _published(db)
        .filter(Post.title.ilike(pattern, escape="\\"))
        .order_by(Post.published_at.desc())
        .all()
    )
    title_ids = {post.id for post in title_matches}
    content_matches = [
        post for post in (
            _published(db)
            .filter(Post.content.ilike(pattern, escape="\\"))
            .order_by(Post.published_at.desc())
            .all()
        )
        if post.id not in title_ids
    ]
    return title_matches, content_matches

def get_user_posts(db: Session, user_id: str) -> List[Post]:
    """All posts owned by a user, any status"""
    return (
        db.query(Post)
        .filter(Post.user_id == user_id)
        .order_by(Post.published_at.desc())
        .all()
    )
