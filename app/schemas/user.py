import re
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous visitors carry no token, so they are not stored.
Role = Literal["customer", "admin"]

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")


def _check_username(v: str) -> str:
    v = v.strip()
    if not USERNAME_RE.match(v):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    return v


class RegisterRequest(SQLModel):
    """
    Payload for account registration.

    Validation rules:
      - username: 3..50 chars, letters/digits/underscore
      - email: valid address, stored lower-cased
      - password: at least 6 chars
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `username` here.
    """

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(default=None, min_length=3, max_length=50)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_username(v)


class UserRead(SQLModel):
    """Public identity returned with tokens."""

    id: int
    username: str
    email: str
    role: Role


class UserProfileRead(UserRead):
    created_at: datetime
    updated_at: datetime


class AuthResponse(SQLModel):
    message: str
    token: str
    user: UserRead


class ProfileResponse(SQLModel):
    user: UserProfileRead


class ProfileUpdateResponse(SQLModel):
    message: str
    user: UserRead
