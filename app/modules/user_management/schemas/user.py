from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr

class UserPublic(BaseModel):
    """What other users may see"""
    id: str
    username: str
    nickname: str

    class Config:
        from_attributes = True

class UserBase(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    nickname: Optional[str] = None
    full_name: Optional[str] = None

class UserUpdate(BaseModel):
    nickname: Optional[str] = None
    full_name: Optional[str] = None

class EmailChangeRequest(BaseModel):
    new_email: EmailStr

class UserInDBBase(UserBase):
    id: str
    role: str
    auth_provider: Optional[str] = None
    suspended_until: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class User(UserInDBBase):
    """User model returned to client"""
    is_suspended: bool = False
