# growwsim/models/user_model.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from growwsim.config import settings


class Profile(BaseModel):
    phone: Optional[str] = None
    address: Optional[str] = None
    pan_card: Optional[str] = None
    bank_account: Optional[str] = None


class UserInDB(BaseModel):
    """User model for MongoDB"""

    name: str
    email: EmailStr
    hashed_password: str
    balance: float = Field(default_factory=lambda: settings.STARTING_BALANCE)
    profile: Profile = Field(default_factory=Profile)
    is_verified: bool = True
    login_attempts: int = 0
    lock_until: Optional[datetime] = None
    last_login: Optional[datetime] = None
    joined_date: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


def _normalize_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _validate_password(v: str) -> str:
    if not any(char.isdigit() for char in v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _validate_password(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    profile: Optional[Profile] = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    balance: float
    profile: Profile = Field(default_factory=Profile)
    is_verified: bool = True
    joined_date: datetime
    last_login: Optional[datetime] = None


class AuthResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenData(BaseModel):
    user_id: str
    email: Optional[str] = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6, max_length=72)

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v):
        return _validate_password(v)


def to_user_response(user: dict) -> UserResponse:
    """Strip sensitive fields from a user document."""
    return UserResponse(
        id=str(user["_id"]),
        name=user["name"],
        email=user["email"],
        balance=user.get("balance", 0.0),
        profile=user.get("profile") or {},
        is_verified=user.get("is_verified", True),
        joined_date=user.get("joined_date") or user.get("created_at"),
        last_login=user.get("last_login"),
    )
