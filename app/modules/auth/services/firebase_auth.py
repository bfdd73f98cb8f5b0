"""Firebase authentication service for Google Sign-In"""
import logging
import os
import re
import uuid
from typing import Optional, Dict, Any, Tuple
from sqlalchemy.orm import Session

import firebase_admin
from firebase_admin import credentials, auth

from app.core.config import settings
from app.core.errors import PermissionDeniedError, ValidationError
from app.db.session import commit_or_raise
from app.modules.moderation.services.site_settings import is_signup_enabled
from app.modules.user_management.models.user import User

logger = logging.getLogger("app")

_firebase_initialized = False

def initialize_firebase() -> bool:
    """Initialize the default Firebase app on first use"""
    global _firebase_initialized

    if _firebase_initialized or firebase_admin._apps:
        _firebase_initialized = True
        return True

    try:
        service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH

        if os.path.exists(service_account_path):
            cred = credentials.Certificate(service_account_path)
            firebase_admin.initialize_app(cred)
            logger.info(f"Firebase initialized with service account from {service_account_path}")
        else:
            firebase_admin.initialize_app()
            logger.warning("Firebase initialized without explicit credentials")

        _firebase_initialized = True
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return False

def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    """Verifies Firebase ID token and extracts user data"""
    if not initialize_firebase():
        logger.error("Cannot verify token: Firebase not initialized")
        return None

    try:
        decoded_token = auth.verify_id_token(token)
        logger.info(f"Firebase token verified successfully for user: {decoded_token.get('email')}")
        return {
            "uid": decoded_token.get("uid"),
            "email": decoded_token.get("email"),
            "name": decoded_token.get("name"),
        }
    except Exception as e:
        logger.error(f"Firebase token verification failed: {type(e).__name__}: {e}")
        return None

def _generate_unique_username(db: Session, email: str) -> str:
    """Generates a unique username based on email"""
    base_username = re.sub(r"[^a-z0-9_]", "", email.split("@")[0].lower()) or "user"
    username = base_username
    suffix = 1

    while db.query(User).filter(User.username == username).first():
        username = f"{base_username}{suffix}"
        suffix += 1

    return username

def _generate_unique_nickname(db: Session, name: str) -> str:
    base_nickname = name.strip() or "user"
    nickname = base_nickname
    suffix = 1

    while db.query(User).filter(User.nickname == nickname).first():
        nickname = f"{base_nickname}{suffix}"
        suffix += 1

    return nickname

def get_or_create_user_from_google(db: Session, google_data: Dict[str, Any]) -> Tuple[User, bool]:
    """Gets or creates a user based on Google authentication data"""
    email = (google_data.get("email") or "").lower()
    if not email:
        raise ValidationError("Email is required for Google authentication")

    user = db.query(User).filter(User.email == email).first()
    if user:
        return user, False

    if not is_signup_enabled(db):
        raise PermissionDeniedError("Sign-up is currently disabled")

    username = _generate_unique_username(db, email)
    new_user = User(
        id=str(uuid.uuid4()),
        email=email,
        username=username,
        nickname=_generate_unique_nickname(db, google_data.get("name") or username),
        full_name=google_data.get("name"),
        hashed_password=None,
        auth_provider="google",
        role="user",
    )

    db.add(new_user)
    commit_or_raise(db, "Account already exists")
    db.refresh(new_user)
    logger.info(f"Created Google account {new_user.id}")
    return new_user, True

def authenticate_with_google(db: Session, firebase_token: str, email: Optional[str] = None) -> Tuple[Optional[User], str]:
    """
    Verify the ID token and resolve the account.

    Returns (user, "") on success or (None, reason) when the token is rejected.
    """
    google_data = verify_firebase_token(firebase_token)
    if not google_data:
        return None, "Invalid Firebase token"

    token_email = google_data.get("email")
    if email and token_email and email.lower() != token_email.lower():
        logger.warning(f"Email mismatch: {email} vs {token_email}")
        return None, "Email mismatch between request and token"

    user, is_new_user = get_or_create_user_from_google(db, google_data)
    logger.info(f"Google authentication successful for user ID: {user.id} (new: {is_new_user})")
    return user, ""
