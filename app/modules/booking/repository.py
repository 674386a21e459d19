"""Booking repository layer."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import BookingStatusEnum, RoleEnum
from app.modules.booking.models import Booking, BookingExtension

_LOADED_RELATIONS = ("student", "tutor", "extensions")


class BookingRepository:
    """DB operations for the booking ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _select(self) -> Select[tuple[Booking]]:
        return select(Booking).options(
            selectinload(Booking.student),
            selectinload(Booking.tutor),
            selectinload(Booking.extensions),
        )

    async def create_booking(
        self,
        *,
        tuition_request_id: UUID,
        student_id: UUID,
        tutor_id: UUID,
        subject: str,
        start_date: date,
        end_date: date,
        days_of_week: list[str],
        time_slot: str,
        monthly_fee: Decimal,
    ) -> Booking:
        booking = Booking(
            tuition_request_id=tuition_request_id,
            student_id=student_id,
            tutor_id=tutor_id,
            subject=subject,
            start_date=start_date,
            end_date=end_date,
            days_of_week=days_of_week,
            time_slot=time_slot,
            monthly_fee=monthly_fee,
            status=BookingStatusEnum.ACTIVE,
            extended=False,
        )
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking, attribute_names=list(_LOADED_RELATIONS))
        return booking

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        stmt = (
            self._select()
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def extend_end_date(
        self,
        booking: Booking,
        *,
        previous_end_date: date,
        new_end_date: date,
        months: int,
        extended_on: datetime,
        extended_by_id: UUID,
    ) -> bool:
        """Move end_date forward only if booking is still active at previous_end_date."""
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.status == BookingStatusEnum.ACTIVE,
                Booking.end_date == previous_end_date,
            )
            .values(end_date=new_end_date, extended=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        self.session.add(
            BookingExtension(
                booking_id=booking.id,
                previous_end_date=previous_end_date,
                new_end_date=new_end_date,
                months=months,
                extended_on=extended_on,
                extended_by_id=extended_by_id,
            ),
        )
        await self.session.flush()
        await self.session.refresh(
            booking,
            attribute_names=["end_date", "extended", "status", "updated_at", "extensions"],
        )
        return True

    async def cancel_booking(
        self,
        booking: Booking,
        *,
        cancelled_at: datetime,
        reason: str | None,
    ) -> bool:
        """Compare-and-set active -> cancelled."""
        stmt = (
            update(Booking)
            .where(Booking.id == booking.id, Booking.status == BookingStatusEnum.ACTIVE)
            .values(
                status=BookingStatusEnum.CANCELLED,
                cancelled_at=cancelled_at,
                cancellation_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self.session.refresh(
            booking,
            attribute_names=["status", "cancelled_at", "cancellation_reason", "updated_at"],
        )
        return True

    async def complete_ended_bookings(self, *, today: date, completed_at: datetime) -> list[UUID]:
        """Mark every active booking whose end date has passed as completed."""
        stmt = (
            update(Booking)
            .where(Booking.status == BookingStatusEnum.ACTIVE, Booking.end_date < today)
            .values(status=BookingStatusEnum.COMPLETED, completed_at=completed_at)
            .returning(Booking.id)
            .execution_options(synchronize_session=False)
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_bookings(
        self,
        *,
        user_id: UUID,
        role_name: RoleEnum,
        status: BookingStatusEnum | None = None,
    ) -> list[Booking]:
        stmt = self._select()
        if role_name == RoleEnum.STUDENT:
            stmt = stmt.where(Booking.student_id == user_id)
        elif role_name == RoleEnum.TUTOR:
            stmt = stmt.where(Booking.tutor_id == user_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status)

        stmt = stmt.order_by(Booking.created_at.desc())
        return list((await self.session.scalars(stmt)).all())
