"""Booking schemas."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import BookingStatusEnum
from app.modules.identity.schemas import UserSummary


class BookingExtendRequest(BaseModel):
    """Extend booking request."""

    additional_months: int = Field(ge=1)


class BookingCancelRequest(BaseModel):
    """Cancel booking request."""

    reason: str | None = Field(default=None, max_length=512)


class BookingExtensionRead(BaseModel):
    """One entry of a booking's extension history."""

    model_config = ConfigDict(from_attributes=True)

    previous_end_date: date
    new_end_date: date
    months: int
    extended_on: datetime
    extended_by_id: UUID | None


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    tuition_request_id: UUID
    student_id: UUID
    tutor_id: UUID
    student: UserSummary
    tutor: UserSummary
    subject: str
    start_date: date
    end_date: date
    days_of_week: list[str]
    time_slot: str
    monthly_fee: Decimal
    status: BookingStatusEnum
    extended: bool
    extension_history: list[BookingExtensionRead] = Field(validation_alias="extensions")
    cancelled_at: datetime | None
    cancellation_reason: str | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingGroups(BaseModel):
    """Bookings partitioned by status."""

    active: list[BookingRead]
    completed: list[BookingRead]
    cancelled: list[BookingRead]
    total: int

    @classmethod
    def from_grouped(cls, grouped: Mapping[BookingStatusEnum, Sequence[object]]) -> "BookingGroups":
        def serialize(status: BookingStatusEnum) -> list[BookingRead]:
            return [BookingRead.model_validate(item) for item in grouped.get(status, ())]

        active = serialize(BookingStatusEnum.ACTIVE)
        completed = serialize(BookingStatusEnum.COMPLETED)
        cancelled = serialize(BookingStatusEnum.CANCELLED)
        return cls(
            active=active,
            completed=completed,
            cancelled=cancelled,
            total=len(active) + len(completed) + len(cancelled),
        )


class ActiveStudentRead(BaseModel):
    """A tutor's active booking together with the student it serves."""

    booking_id: UUID
    subject: str
    start_date: date
    end_date: date
    days_of_week: list[str]
    time_slot: str
    monthly_fee: Decimal
    student: UserSummary


class CompletionSweepRead(BaseModel):
    """Result of one completion sweep."""

    completed: int
    booking_ids: list[UUID]
