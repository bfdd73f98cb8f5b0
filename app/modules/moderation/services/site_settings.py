import logging
from sqlalchemy.orm import Session

from app.db.session import commit_or_raise
from app.modules.moderation.services.gate import ensure_admin
from app.modules.moderation.models.site_settings import SITE_SETTINGS_ID, SiteSettings

logger = logging.getLogger(__name__)

def get_site_settings(db: Session) -> SiteSettings:
    """The settings row, created with defaults on first access"""
    site_settings = db.query(SiteSettings).filter(SiteSettings.id == SITE_SETTINGS_ID).first()
    if site_settings is None:
        site_settings = SiteSettings(id=SITE_SETTINGS_ID, signup_enabled=True)
        db.add(site_settings)
        commit_or_raise(db)
        db.refresh(site_settings)
    return site_settings

def is_signup_enabled(db: Session) -> bool:
    return get_site_settings(db).signup_enabled

def set_signup_enabled(db: Session, admin, enabled: bool) -> SiteSettings:
    ensure_admin(admin)
    site_settings = get_site_settings(db)
    site_settings.signup_enabled = enabled
    commit_or_raise(db)
    db.refresh(site_settings)
    logger.info(f"Signup {'enabled' if enabled else 'disabled'}")
    return site_settings
