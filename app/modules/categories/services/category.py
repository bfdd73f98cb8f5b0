from typing import List, Optional
import logging
import uuid
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.db.session import commit_or_raise
from app.modules.categories.models.category import Category
from app.modules.categories.schemas.category import CategoryCreate, CategoryUpdate
from app.modules.moderation.services.gate import ensure_admin
from app.modules.posts.services.post import slugify
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def get_category(db: Session, category_id: str) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()

def list_categories(db: Session) -> List[Category]:
    """All categories in display order"""
    return db.query(Category).order_by(Category.sort_order.asc(), Category.name.asc()).all()

def create_category(db: Session, admin: User, category_in: CategoryCreate) -> Category:
    ensure_admin(admin)
    name = category_in.name.strip()
    slug = slugify(category_in.slug)
    if not name or not slug:
        raise ValidationError("Category name and slug are required")

    sort_order = category_in.sort_order
    if sort_order is None:
        highest = db.query(func.max(Category.sort_order)).scalar()
        sort_order = (highest or 0) + 1

    category = Category(id=str(uuid.uuid4()), name=name, slug=slug, sort_order=sort_order)
    db.add(category)
    commit_or_raise(db, "A category with this slug already exists")
    db.refresh(category)
    logger.info(f"Created category {slug}")
    return category

def update_category(db: Session, admin: User, category_id: str, category_in: CategoryUpdate) -> Category:
    """Rename or reorder a category. The slug never changes."""
    ensure_admin(admin)
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found")

    if category_in.name is not None:
        name = category_in.name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        category.name = name
    if category_in.sort_order is not None:
        category.sort_order = category_in.sort_order

    commit_or_raise(db)
    db.refresh(category)
    return category

def delete_category(db: Session, admin: User, category_id: str) -> Category:
    """Delete a category; its posts become uncategorised"""
    ensure_admin(admin)
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found")
    db.delete(category)
    commit_or_raise(db)
    logger.info(f"Deleted category {category.slug}")
    return category
