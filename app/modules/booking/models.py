"""Booking ORM models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, EntityMixin
from app.core.enums import BookingStatusEnum
from app.shared.utils import utc_now

if TYPE_CHECKING:
    from app.modules.identity.models import User
    from app.modules.tuition_requests.models import TuitionRequest


class Booking(EntityMixin, Base):
    """Engagement materialized from exactly one accepted tuition request."""

    __tablename__ = "bookings"

    tuition_request_id: Mapped[UUID] = mapped_column(
        ForeignKey("tuition_requests.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    tutor_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    subject: Mapped[str] = mapped_column(String(128), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    days_of_week: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(64), nullable=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(BookingStatusEnum, name="booking_status_enum", native_enum=False),
        default=BookingStatusEnum.ACTIVE,
        nullable=False,
        index=True,
    )
    extended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    tuition_request: Mapped["TuitionRequest"] = relationship(back_populates="booking")
    student: Mapped["User"] = relationship(foreign_keys=[student_id])
    tutor: Mapped["User"] = relationship(foreign_keys=[tutor_id])
    extensions: Mapped[list["BookingExtension"]] = relationship(
        back_populates="booking",
        order_by="BookingExtension.extended_on",
    )


class BookingExtension(EntityMixin, Base):
    """Append-only record of one end-date extension."""

    __tablename__ = "booking_extensions"

    booking_id: Mapped[UUID] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    previous_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    new_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    months: Mapped[int] = mapped_column(Integer, nullable=False)
    extended_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    extended_by_id: Mapped[UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    booking: Mapped[Booking] = relationship(back_populates="extensions")
