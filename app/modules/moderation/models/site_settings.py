from sqlalchemy import Column, Integer, Boolean, DateTime

from app.core.timeutils import utcnow
from app.db.session import Base

SITE_SETTINGS_ID = 1

class SiteSettings(Base):
    """Singleton row (id=1) holding global switches"""
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True)
    signup_enabled = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
