"""
Pydantic models for account requests and responses.
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, validator


def check_password_strength(v: str) -> str:
    """At least 6 characters with a lowercase letter, an uppercase letter and a digit."""
    if len(v) < 6:
        raise ValueError('Password must be at least 6 characters')
    if not any(c.islower() for c in v):
        raise ValueError('Password must contain a lowercase letter')
    if not any(c.isupper() for c in v):
        raise ValueError('Password must contain an uppercase letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain a number')
    return v


class UserRegister(BaseModel):
    """Request model for creating an account."""
    name: str = Field(..., description="Display name (2-50 characters)")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @validator('name')
    def name_length(cls, v):
        v = v.strip()
        if not 2 <= len(v) <= 50:
            raise ValueError('Name must be between 2 and 50 characters')
        return v

    @validator('email')
    def email_lower(cls, v):
        return v.lower()

    @validator('password')
    def password_strength(cls, v):
        return check_password_strength(v)


class UserLogin(BaseModel):
    """Request model for email/password login."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class PasswordChange(BaseModel):
    """Request model for changing password."""
    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., description="New password")

    @validator('new_password')
    def password_strength(cls, v):
        return check_password_strength(v)


class Preferences(BaseModel):
    favorite_genres: List[str] = Field(default_factory=list)
    preferred_languages: List[str] = Field(default_factory=lambda: ["English"])


class PreferencesUpdate(BaseModel):
    favorite_genres: Optional[List[str]] = None
    preferred_languages: Optional[List[str]] = None


class ProfileUpdate(BaseModel):
    """Request model for updating the profile. Omitted fields are left alone."""
    name: Optional[str] = None
    preferences: Optional[PreferencesUpdate] = None

    @validator('name')
    def name_length(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 50:
            raise ValueError('Name must be between 2 and 50 characters')
        return v


class UserResponse(BaseModel):
    """Response model for user data. Never carries the password hash."""
    id: str
    name: str
    email: str
    role: str
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: datetime
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Response model for authentication tokens."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse = Field(..., description="User information")


class RefreshTokenRequest(BaseModel):
    """Request model for refreshing access token."""
    refresh_token: str = Field(..., description="Refresh token")


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
