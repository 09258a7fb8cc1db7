"""User and authentication schemas"""

from pydantic import ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

from fieldreport.core.security import (
    password_exceeds_hash_limit,
    password_policy_violations,
    PASSWORD_MAX_BYTES,
    TEMP_PASSWORD_MIN_LENGTH,
)
from fieldreport.schemas.base import CamelModel


class AssignableRole(str, Enum):
    """Roles that can be granted through the API (the ceo account is seeded)"""
    USER = "user"
    ADMIN = "admin"


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_password_policy(value: str) -> str:
    problems = password_policy_violations(value)
    if problems:
        raise ValueError("; ".join(problems))
    return value


def _check_hashable(value: str) -> str:
    if password_exceeds_hash_limit(value):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class UserLogin(CamelModel):
    """User login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserCreate(CamelModel):
    """User creation schema (admin / ceo)"""
    email: EmailStr
    role: AssignableRole = AssignableRole.USER
    temp_password: str = Field(..., min_length=TEMP_PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("temp_password")
    @classmethod
    def hashable_password(cls, v):
        return _check_hashable(v)


class TempPasswordReset(CamelModel):
    """Administrator-issued temporary password"""
    temp_password: str = Field(..., min_length=TEMP_PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("temp_password")
    @classmethod
    def hashable_password(cls, v):
        return _check_hashable(v)


class RoleUpdate(CamelModel):
    role: AssignableRole


class ForceResetRequest(CamelModel):
    """First-login password replacement"""
    new_password: str = Field(..., max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, v):
        """Enforce length, uppercase and digit rules"""
        return _check_password_policy(v)


class ChangePasswordRequest(CamelModel):
    """Self-service password change"""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, v):
        """Enforce length, uppercase and digit rules"""
        return _check_password_policy(v)


class UserResponse(CamelModel):
    """User response schema"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    force_password_reset: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by_email: Optional[str] = None


class TokenResponse(CamelModel):
    """JWT token response; the refresh token travels in an HTTP-only cookie"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
