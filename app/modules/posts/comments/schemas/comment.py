from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel

class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[str] = None

class CommentUpdate(BaseModel):
    content: str

class CommentInDBBase(BaseModel):
    id: str
    content: str
    user_id: str
    post_id: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class Comment(CommentInDBBase):
    """Comment model returned to client"""
    author_nickname: Optional[str] = None
    is_edited: bool = False

class CommentWithReplies(Comment):
    """Top-level comment with its direct replies"""
    replies: List[Comment] = []

class MyComment(CommentInDBBase):
    """Comment as listed on the author's own page"""
    post_title: Optional[str] = None
    post_slug: Optional[str] = None
