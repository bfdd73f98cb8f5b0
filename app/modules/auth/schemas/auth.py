from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class TokenPayload(BaseModel):
    sub: Optional[str] = None

class SignupRequest(BaseModel):
    email: EmailStr
    username: str
    nickname: str
    password: str
    password_confirm: str
    full_name: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower()

class GoogleSignInRequest(BaseModel):
    firebase_token: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else None

class AvailabilityResult(BaseModel):
    available: bool

class FindIdRequest(BaseModel):
    email: EmailStr

class FindIdResult(BaseModel):
    username: str

class PasswordResetRequest(BaseModel):
    email: EmailStr

class PasswordUpdateRequest(BaseModel):
    """Either a reset token from the emailed link or an authenticated session"""
    token: Optional[str] = None
    new_password: str
    new_password_confirm: str

class EmailChangeConfirm(BaseModel):
    token: str

class Message(BaseModel):
    message: str
