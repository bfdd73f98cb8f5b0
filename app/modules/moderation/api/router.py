"""Admin control plane and the public site settings endpoint"""
from typing import Any, List
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.core.context import get_mailer
from app.db.session import get_db
from app.deps import get_current_admin
from app.modules.categories.schemas.category import (
    Category as CategorySchema, CategoryCreate, CategoryUpdate
)
from app.modules.categories.services.category import (
    create_category, delete_category, list_categories, update_category
)
from app.modules.moderation.schemas.moderation import (
    AdminPost, FeaturedUpdate, ForcedStatusUpdate, SiteSettings as SiteSettingsSchema,
    SuspendRequest, SuspensionResult,
)
from app.modules.moderation.services import admin as admin_service
from app.modules.moderation.services.site_settings import get_site_settings, set_signup_enabled
from app.modules.notifications.services.mailer import SmtpMailer
from app.modules.notifications.services.notification_events import (
    send_suspension_notice, send_unsuspension_notice
)
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import User as UserSchema

router = APIRouter()
public_router = APIRouter()
logger = logging.getLogger("app")

@public_router.get("", response_model=SiteSettingsSchema)
def read_site_settings(db: Session = Depends(get_db)) -> Any:
    """Public site switches (e.g. whether sign-up is open)"""
    return get_site_settings(db)

# Users tab

@router.get("/users", response_model=List[UserSchema])
def read_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Any:
    """All accounts, newest first"""
    return admin_service.list_users(db, admin)

@router.post("/users/{user_id}/suspend", response_model=SuspensionResult)
def suspend(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    suspend_in: SuspendRequest,
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
    admin: User = Depends(get_current_admin),
) -> Any:
    """Suspend a user for a number of days or until a given time"""
    user, days = admin_service.suspend_user(
        db, admin, user_id, days=suspend_in.days, until=suspend_in.until
    )
    background_tasks.add_task(send_suspension_notice, mailer, user.email, days, user.suspended_until)
    return SuspensionResult(user_id=user.id, suspended_until=user.suspended_until)

@router.post("/users/{user_id}/unsuspend", response_model=SuspensionResult)
def unsuspend(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
    admin: User = Depends(get_current_admin),
) -> Any:
    """Lift a suspension early"""
    user = admin_service.unsuspend_user(db, admin, user_id)
    background_tasks.add_task(send_unsuspension_notice, mailer, user.email)
    return SuspensionResult(user_id=user.id, suspended_until=None)

@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    admin: User = Depends(get_current_admin),
) -> None:
    """Delete an account together with its posts, comments and bookmarks"""
    admin_service.delete_user_forced(db, admin, user_id)

# Posts tab

@router.get("/posts", response_model=List[AdminPost])
def read_all_posts(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Any:
    return admin_service.list_all_posts(db, admin)

@router.patch("/posts/{post_id}/status", response_model=AdminPost)
def force_post_status(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    status_in: ForcedStatusUpdate,
    admin: User = Depends(get_current_admin),
) -> Any:
    """Publish or hide any post"""
    return admin_service.set_post_status_forced(db, admin, post_id, status_in.status)

@router.patch("/posts/{post_id}/featured", response_model=AdminPost)
def set_featured(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    featured_in: FeaturedUpdate,
    admin: User = Depends(get_current_admin),
) -> Any:
    return admin_service.set_post_featured(db, admin, post_id, featured_in.is_featured)

@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def force_delete_post(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    admin: User = Depends(get_current_admin),
) -> None:
    admin_service.delete_post_forced(db, admin, post_id)

# Categories tab

@router.get("/categories", response_model=List[CategorySchema])
def read_categories(
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> Any:
    return list_categories(db)

@router.post("/categories", response_model=CategorySchema, status_code=status.HTTP_201_CREATED)
def add_category(
    *,
    db: Session = Depends(get_db),
    category_in: CategoryCreate,
    admin: User = Depends(get_current_admin),
) -> Any:
    return create_category(db, admin, category_in)

@router.put("/categories/{category_id}", response_model=CategorySchema)
def rename_category(
    *,
    db: Session = Depends(get_db),
    category_id: str,
    category_in: CategoryUpdate,
    admin: User = Depends(get_current_admin),
) -> Any:
    return update_category(db, admin, category_id, category_in)

@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(
    *,
    db: Session = Depends(get_db),
    category_id: str,
    admin: User = Depends(get_current_admin),
) -> None:
    """Delete a category; its posts become uncategorised"""
    delete_category(db, admin, category_id)

# Settings tab

@router.put("/settings", response_model=SiteSettingsSchema)
def update_site_settings(
    *,
    db: Session = Depends(get_db),
    settings_in: SiteSettingsSchema,
    admin: User = Depends(get_current_admin),
) -> Any:
    logger.info(f"Admin {admin.id} set signup_enabled={settings_in.signup_enabled}")
    return set_signup_enabled(db, admin, settings_in.signup_enabled)
