"""Authentication router: sign-up, login, Google Sign-In and account recovery"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core.context import get_mailer
from app.core.security import create_access_token
from app.db.session import get_db
from app.deps import get_optional_user
from app.modules.auth.schemas.auth import (
    AvailabilityResult,
    EmailChangeConfirm,
    FindIdRequest,
    FindIdResult,
    GoogleSignInRequest,
    Message,
    PasswordResetRequest,
    PasswordUpdateRequest,
    SignupRequest,
    Token,
)
from app.modules.auth.services.auth import (
    AuthenticationError,
    authenticate,
    issue_find_id_token,
    issue_password_reset_token,
    resolve_find_id_token,
    signup,
    update_password,
)
from app.modules.auth.services.firebase_auth import authenticate_with_google
from app.modules.notifications.services.mailer import SmtpMailer
from app.modules.notifications.services.notification_events import (
    send_find_id_link,
    send_password_reset_link,
)
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.user_management.services.user import (
    confirm_email_change,
    is_nickname_available,
    is_username_available,
)

router = APIRouter()
logger = logging.getLogger("app")

@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    signup_in: SignupRequest,
) -> Any:
    """Create an email/password account and sign it in"""
    user = signup(db, signup_in)
    return Token(access_token=create_access_token(user.id))

@router.get("/check-username", response_model=AvailabilityResult)
def check_username(
    db: Session = Depends(get_db),
    username: str = Query(..., min_length=1),
) -> Any:
    return AvailabilityResult(available=is_username_available(db, username))

@router.get("/check-nickname", response_model=AvailabilityResult)
def check_nickname(
    db: Session = Depends(get_db),
    nickname: str = Query(..., min_length=1),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """A signed-in user's own nickname counts as available"""
    exclude_user_id = current_user.id if current_user else None
    return AvailabilityResult(available=is_nickname_available(db, nickname, exclude_user_id))

@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> Any:
    """Login with OAuth2 form; the username field takes a username or an email"""
    try:
        user = authenticate(db, form_data.username, form_data.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=create_access_token(user.id))

@router.post("/google-signin", response_model=Token)
def google_signin(
    *,
    db: Session = Depends(get_db),
    google_signin: GoogleSignInRequest,
) -> Any:
    """Authenticate user with Google Sign-In"""
    user, error_msg = authenticate_with_google(db, google_signin.firebase_token, google_signin.email)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_msg or "Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=create_access_token(user.id))

@router.post("/find-id", response_model=Message)
def find_id(
    *,
    db: Session = Depends(get_db),
    find_in: FindIdRequest,
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
) -> Any:
    """Email a link that reveals the username registered with this address"""
    token = issue_find_id_token(db, find_in.email)
    if token:
        background_tasks.add_task(send_find_id_link, mailer, find_in.email, token)
    return Message(message="If an account exists for this email, a link has been sent")

@router.get("/find-id/result", response_model=FindIdResult)
def find_id_result(
    db: Session = Depends(get_db),
    token: str = Query(...),
) -> Any:
    user = resolve_find_id_token(db, token)
    return FindIdResult(username=user.username)

@router.post("/password-reset", response_model=Message)
def password_reset(
    *,
    db: Session = Depends(get_db),
    reset_in: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
) -> Any:
    """Email a password reset link. The answer never reveals whether the account exists."""
    token = issue_password_reset_token(db, reset_in.email)
    if token:
        background_tasks.add_task(send_password_reset_link, mailer, reset_in.email, token)
    return Message(message="If an account exists for this email, a reset link has been sent")

@router.post("/update-password", response_model=Message)
def set_new_password(
    *,
    db: Session = Depends(get_db),
    update_in: PasswordUpdateRequest,
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    update_password(
        db,
        update_in.new_password,
        update_in.new_password_confirm,
        token=update_in.token,
        current_user=current_user,
    )
    return Message(message="Password updated")

@router.post("/confirm-email-change", response_model=UserSchema)
def confirm_email(
    *,
    db: Session = Depends(get_db),
    confirm_in: EmailChangeConfirm,
) -> Any:
    """Apply an email change from the confirmation link"""
    return confirm_email_change(db, confirm_in.token)
