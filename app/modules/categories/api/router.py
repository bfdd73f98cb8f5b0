from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.modules.categories.schemas.category import Category as CategorySchema
from app.modules.categories.services.category import list_categories

router = APIRouter()

@router.get("", response_model=List[CategorySchema])
def read_categories(db: Session = Depends(get_db)) -> Any:
    """Categories in display order, for the navigation tabs"""
    return list_categories(db)
