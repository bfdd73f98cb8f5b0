from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel

from app.modules.categories.schemas.category import CategorySummary

PostStatus = Literal["draft", "published", "private"]
PostSort = Literal["latest", "oldest", "popular"]

class PostCreate(BaseModel):
    title: str = ""
    content: str = ""
    excerpt: Optional[str] = None
    category_id: Optional[str] = None
    status: PostStatus = "draft"

class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category_id: Optional[str] = None
    status: Optional[PostStatus] = None

class PostStatusUpdate(BaseModel):
    status: PostStatus

class PostInDBBase(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: Optional[str] = None
    category_id: Optional[str] = None
    category: Optional[CategorySummary] = None
    thumbnail_url: Optional[str] = None
    author_name: str
    user_id: str
    status: str
    published_at: Optional[datetime] = None
    view_count: int
    is_featured: bool

    class Config:
        from_attributes = True

class PostSummary(PostInDBBase):
    """Post as shown in lists (no body)"""
    pass

class Post(PostInDBBase):
    """Post model returned to client"""
    content: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class PostDetail(Post):
    """Post detail page payload"""
    content_html: str = ""
    is_owner: bool = False
    is_bookmarked: bool = False

class PostPage(BaseModel):
    items: List[PostSummary]
    total: int
    page: int
    has_more: bool

class HeroPosts(BaseModel):
    featured: Optional[PostSummary] = None
    side: List[PostSummary] = []

class SearchResults(BaseModel):
    query: str
    title_matches: List[PostSummary] = []
    content_matches: List[PostSummary] = []
