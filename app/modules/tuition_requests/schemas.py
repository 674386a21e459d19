"""Tuition request schemas."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import RequestDecisionEnum, RequestStatusEnum, WeekdayEnum
from app.modules.booking.schemas import BookingGroups, BookingRead
from app.modules.identity.schemas import UserSummary


class TuitionRequestCreate(BaseModel):
    """Terms a student proposes to a tutor."""

    tutor_id: UUID
    subject: str = Field(min_length=1, max_length=128)
    grade_level: str = Field(min_length=1, max_length=64)
    preferred_days: list[WeekdayEnum] = Field(min_length=1, max_length=7)
    preferred_time: str = Field(min_length=1, max_length=64)
    duration_months: int = Field(ge=1, le=120)
    start_date: date
    monthly_fee: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("subject", "grade_level", "preferred_time", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("preferred_days", mode="before")
    @classmethod
    def normalize_days(cls, value: object) -> object:
        """Accept any letter case and drop repeated days, keeping first-seen order."""
        if not isinstance(value, list):
            return value
        seen: list[object] = []
        for item in value:
            day = item.strip().capitalize() if isinstance(item, str) else item
            if day not in seen:
                seen.append(day)
        return seen


class TuitionRequestRespond(BaseModel):
    """Tutor decision payload."""

    decision: RequestDecisionEnum


class TuitionRequestRead(BaseModel):
    """Tuition request response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    tutor_id: UUID
    student: UserSummary
    tutor: UserSummary
    subject: str
    grade_level: str
    preferred_days: list[str]
    preferred_time: str
    duration_months: int
    start_date: date
    monthly_fee: Decimal
    notes: str | None
    status: RequestStatusEnum
    responded_at: datetime | None
    created_at: datetime
    updated_at: datetime


class TuitionRequestDecisionRead(BaseModel):
    """Outcome of a tutor decision; ``booking`` is set only on accept."""

    request: TuitionRequestRead
    booking: BookingRead | None = None


class RequestGroups(BaseModel):
    """A student's requests partitioned by status."""

    pending: list[TuitionRequestRead]
    accepted: list[TuitionRequestRead]
    rejected: list[TuitionRequestRead]
    total: int

    @classmethod
    def from_grouped(cls, grouped: Mapping[RequestStatusEnum, Sequence[object]]) -> "RequestGroups":
        def serialize(status: RequestStatusEnum) -> list[TuitionRequestRead]:
            return [TuitionRequestRead.model_validate(item) for item in grouped.get(status, ())]

        pending = serialize(RequestStatusEnum.PENDING)
        accepted = serialize(RequestStatusEnum.ACCEPTED)
        rejected = serialize(RequestStatusEnum.REJECTED)
        return cls(
            pending=pending,
            accepted=accepted,
            rejected=rejected,
            total=len(pending) + len(accepted) + len(rejected),
        )


class StudentHistoryRead(BaseModel):
    """Everything a student has requested and booked."""

    requests: RequestGroups
    bookings: BookingGroups
