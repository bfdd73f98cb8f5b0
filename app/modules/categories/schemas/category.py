from typing import Optional
from pydantic import BaseModel

class CategoryBase(BaseModel):
    name: str
    slug: str

class CategoryCreate(CategoryBase):
    sort_order: Optional[int] = None

class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    sort_order: Optional[int] = None

class CategorySummary(BaseModel):
    """Category as embedded in post payloads"""
    name: str
    slug: str

    class Config:
        from_attributes = True

class Category(CategoryBase):
    id: str
    sort_order: int

    class Config:
        from_attributes = True
