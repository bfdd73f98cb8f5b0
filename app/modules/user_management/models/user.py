from sqlalchemy import Column, String, DateTime

from app.core.timeutils import utcnow
from app.db.session import Base
from app.modules.moderation.services.gate import is_suspended

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)  # immutable after signup
    nickname = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)  # null for Google-only accounts
    auth_provider = Column(String, default="email")  # email or google
    role = Column(String, default="user", nullable=False)  # user or admin
    suspended_until = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_suspended(self) -> bool:
        return is_suspended(self)
