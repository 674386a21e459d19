"""Tutors schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _clean_items(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    cleaned: list[str] = []
    for value in values:
        item = value.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


class TutorProfileUpdate(BaseModel):
    """Tutor's own profile edit; omitted fields keep their stored value."""

    subjects: list[str] | None = Field(default=None, max_length=20)
    experience_years: int | None = Field(default=None, ge=0, le=80)
    availability: str | None = Field(default=None, max_length=255)
    monthly_rate: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    education: list[str] | None = Field(default=None, max_length=20)
    about: str | None = Field(default=None, max_length=5000)

    @field_validator("subjects", "education")
    @classmethod
    def strip_items(cls, value: list[str] | None) -> list[str] | None:
        return _clean_items(value)

    @field_validator("availability", "about")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class TutorProfileRead(BaseModel):
    """Tutor profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    subjects: list[str]
    experience_years: int
    availability: str
    monthly_rate: Decimal
    education: list[str]
    about: str
    rating: Decimal
    review_count: int
    profile_complete: bool
    created_at: datetime
    updated_at: datetime


class TutorRead(BaseModel):
    """Public view of a tutor and their profile, if one was filled in."""

    id: UUID
    name: str
    email: EmailStr
    phone_number: str | None
    profile: TutorProfileRead | None
