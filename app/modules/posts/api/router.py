from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import PermissionDeniedError
from app.db.session import get_db
from app.deps import get_current_user, get_optional_user
from app.modules.user_management.models.user import User
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import (
    Post as PostSchema,
    PostCreate,
    PostDetail,
    PostPage,
    PostSort,
    PostStatusUpdate,
    PostSummary,
    PostUpdate,
    HeroPosts,
    SearchResults,
)
from app.modules.posts.services.post import (
    change_status,
    create_post,
    delete_post,
    get_hero_posts,
    get_visible_post_by_slug,
    increment_view,
    list_published,
    render_markdown,
    search_posts,
    update_post,
)
from app.modules.posts.bookmarks.services.bookmark import is_bookmarked

# Get the logger
logger = logging.getLogger(__name__)

router = APIRouter()

def _to_detail(db: Session, post: Post, viewer: Optional[User]) -> PostDetail:
    detail = PostDetail.model_validate(post)
    detail.content_html = render_markdown(post.content)
    if viewer is not None:
        detail.is_owner = viewer.id == post.user_id
        detail.is_bookmarked = is_bookmarked(db, viewer.id, post.id)
    return detail

@router.get("", response_model=PostPage)
def read_posts(
    db: Session = Depends(get_db),
    category: Optional[str] = Query(None, description="Category slug"),
    sort: PostSort = Query("latest"),
    page: int = Query(1, ge=1),
    exclude_featured: bool = Query(False),
) -> Any:
    """
    Retrieve one page of published posts.
    """
    posts, total = list_published(
        db, category_slug=category, sort=sort, page=page, exclude_featured=exclude_featured
    )
    return PostPage(
        items=[PostSummary.model_validate(post) for post in posts],
        total=total,
        page=page,
        has_more=page * settings.POSTS_PER_PAGE < total,
    )

@router.get("/hero", response_model=HeroPosts)
def read_hero_posts(db: Session = Depends(get_db)) -> Any:
    """
    Featured post and the two latest posts for the home page hero.
    """
    featured, side = get_hero_posts(db)
    return HeroPosts(
        featured=PostSummary.model_validate(featured) if featured else None,
        side=[PostSummary.model_validate(post) for post in side],
    )

@router.get("/search", response_model=SearchResults)
def search(
    db: Session = Depends(get_db),
    q: str = Query("", description="Search term"),
) -> Any:
    """
    Search published posts by title and by content.
    """
    title_matches, content_matches = search_posts(db, q)
    return SearchResults(
        query=q.strip(),
        title_matches=[PostSummary.model_validate(post) for post in title_matches],
        content_matches=[PostSummary.model_validate(post) for post in content_matches],
    )

@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Create new post.
    """
    return create_post(db, current_user, post_in)

@router.get("/{slug}", response_model=PostDetail)
def read_post_by_slug(
    *,
    db: Session = Depends(get_db),
    slug: str,
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """
    Get post detail by slug. Drafts and private posts are only visible to
    their owner and to administrators.
    """
    post = get_visible_post_by_slug(db, slug, current_user)
    increment_view(db, slug)
    return _to_detail(db, post, current_user)

@router.get("/{slug}/edit", response_model=PostSchema)
def read_post_for_edit(
    *,
    db: Session = Depends(get_db),
    slug: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Get the raw post for the editor (owner only).
    """
    post = get_visible_post_by_slug(db, slug, current_user)
    if post.user_id != current_user.id:
        raise PermissionDeniedError("Not enough permissions")
    return post

@router.put("/{post_id}", response_model=PostSchema)
def update_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    post_in: PostUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Update a post.
    """
    return update_post(db, post_id, current_user, post_in)

@router.patch("/{post_id}/status", response_model=PostSchema)
def update_post_status(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    status_in: PostStatusUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Change the visibility of a post.
    """
    return change_status(db, post_id, current_user, status_in.status)

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: User = Depends(get_current_user),
) -> None:
    """
    Delete a post. Its comments and bookmarks are removed with it.
    """
    delete_post(db, post_id, current_user)
