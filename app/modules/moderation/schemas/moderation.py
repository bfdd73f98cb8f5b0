from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.modules.posts.schemas.post import PostStatus

class SuspendRequest(BaseModel):
    """Either a preset length in days or an explicit end timestamp (UTC)"""
    days: Optional[int] = Field(default=None, ge=1)
    until: Optional[datetime] = None

class SuspensionResult(BaseModel):
    user_id: str
    suspended_until: Optional[datetime] = None

class ForcedStatusUpdate(BaseModel):
    status: PostStatus

class FeaturedUpdate(BaseModel):
    is_featured: bool

class SiteSettings(BaseModel):
    signup_enabled: bool

    class Config:
        from_attributes = True

class AdminPost(BaseModel):
    id: str
    title: str
    slug: str
    status: str
    author_name: str
    is_featured: bool
    created_at: datetime

    class Config:
        from_attributes = True
