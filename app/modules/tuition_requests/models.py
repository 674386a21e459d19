"""Tuition request ORM models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, EntityMixin
from app.core.enums import RequestStatusEnum

if TYPE_CHECKING:
    from app.modules.booking.models import Booking
    from app.modules.identity.models import User


class TuitionRequest(EntityMixin, Base):
    """A student's proposal to one tutor, decided by that tutor exactly once."""

    __tablename__ = "tuition_requests"

    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    tutor_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    subject: Mapped[str] = mapped_column(String(128), nullable=False)
    grade_level: Mapped[str] = mapped_column(String(64), nullable=False)
    preferred_days: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    preferred_time: Mapped[str] = mapped_column(String(64), nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[RequestStatusEnum] = mapped_column(
        SAEnum(RequestStatusEnum, name="request_status_enum", native_enum=False),
        default=RequestStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    student: Mapped["User"] = relationship(foreign_keys=[student_id])
    tutor: Mapped["User"] = relationship(foreign_keys=[tutor_id])
    booking: Mapped["Booking | None"] = relationship(back_populates="tuition_request", uselist=False)
