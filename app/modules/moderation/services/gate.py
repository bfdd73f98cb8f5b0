"""
Moderation gate.

An account is Suspended while `suspended_until` lies in the future and Active
otherwise; there is no stored transition back to Active, every check simply
compares against the current time. Write paths (new post, post edit, new
comment, comment edit) call `ensure_not_suspended` before touching the store.
"""
from datetime import datetime
from typing import Optional

from app.core.errors import PermissionDeniedError
from app.core.timeutils import utcnow


def is_suspended(user, now: Optional[datetime] = None) -> bool:
    until = getattr(user, "suspended_until", None)
    if until is None:
        return False
    return until > (now or utcnow())


def suspension_message(until: datetime) -> str:
    return f"activity suspended until {until.strftime('%Y-%m-%d')}"


def ensure_not_suspended(user, now: Optional[datetime] = None) -> None:
    if is_suspended(user, now):
        raise PermissionDeniedError(suspension_message(user.suspended_until))


def ensure_admin(user) -> None:
    if user is None or getattr(user, "role", None) != "admin":
        raise PermissionDeniedError("Admin access required")
