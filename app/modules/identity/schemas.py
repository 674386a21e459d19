"""Identity schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.enums import RoleEnum


class RoleRead(BaseModel):
    """Role response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: RoleEnum


class UserCreate(BaseModel):
    """Self-service registration; admins are provisioned by script."""

    name: str = Field(min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    phone_number: str | None = Field(default=None, max_length=32)
    role: RoleEnum = RoleEnum.STUDENT

    @field_validator("role")
    @classmethod
    def reject_admin_role(cls, value: RoleEnum) -> RoleEnum:
        if value == RoleEnum.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str


class AccessToken(BaseModel):
    """Bearer token response."""

    access_token: str
    token_type: str = "bearer"


class BlockUpdate(BaseModel):
    """Admin update of a user's blocked flag."""

    is_blocked: bool


class UserSummary(BaseModel):
    """Public identity of a request or booking party."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr


class UserRead(BaseModel):
    """User output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: EmailStr
    phone_number: str | None
    is_active: bool
    is_blocked: bool
    role: RoleRead
    created_at: datetime
    updated_at: datetime
