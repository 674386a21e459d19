"""Booking ledger: materialize, extend, cancel and complete bookings."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from app.core.config import get_settings
from app.core.enums import BookingStatusEnum, RoleEnum
from app.core.metrics import record_transition
from app.modules.audit.repository import AuditRepository
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.identity.models import User
from app.modules.lifecycle.policy import LifecycleOperation, LifecyclePolicy, actor_role, ensure_can_view
from app.modules.tuition_requests.models import TuitionRequest
from app.shared.exceptions import ConflictException, NotFoundException, ValidationException
from app.shared.utils import add_months, utc_now, utc_today

settings = get_settings()
logger = logging.getLogger(__name__)


def group_by_status(bookings: Iterable[Booking]) -> dict[BookingStatusEnum, list[Booking]]:
    """Partition bookings by status, preserving input order inside each group."""
    grouped: dict[BookingStatusEnum, list[Booking]] = {status: [] for status in BookingStatusEnum}
    for booking in bookings:
        grouped[booking.status].append(booking)
    return grouped


class BookingService:
    """Booking domain service owning every Booking state change."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        audit_repository: AuditRepository,
        policy: LifecyclePolicy,
        *,
        max_extension_months: int | None = None,
    ) -> None:
        self.booking_repository = booking_repository
        self.audit_repository = audit_repository
        self.policy = policy
        self.max_extension_months = (
            settings.booking_max_extension_months if max_extension_months is None else max_extension_months
        )

    async def _get_or_404(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("No booking found with that ID")
        return booking

    async def create_from_request(self, request: TuitionRequest, actor: User) -> Booking:
        """Materialize the booking for a request that has just been accepted."""
        booking = await self.booking_repository.create_booking(
            tuition_request_id=request.id,
            student_id=request.student_id,
            tutor_id=request.tutor_id,
            subject=request.subject,
            start_date=request.start_date,
            end_date=add_months(request.start_date, request.duration_months),
            days_of_week=list(request.preferred_days),
            time_slot=request.preferred_time,
            monthly_fee=request.monthly_fee,
        )
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="booking.created",
            entity_type="booking",
            entity_id=str(booking.id),
            payload={
                "tuition_request_id": str(request.id),
                "start_date": booking.start_date.isoformat(),
                "end_date": booking.end_date.isoformat(),
            },
        )
        record_transition("booking", "created")
        return booking

    async def get_booking(self, booking_id: UUID, actor: User) -> Booking:
        """Read one booking as one of its parties or an admin."""
        booking = await self._get_or_404(booking_id)
        ensure_can_view(actor, student_id=booking.student_id, tutor_id=booking.tutor_id)
        return booking

    async def extend_booking(self, booking_id: UUID, actor: User, additional_months: int) -> Booking:
        """Push an active booking's end date forward and record the change."""
        booking = await self._get_or_404(booking_id)
        self.policy.ensure_party(
            LifecycleOperation.EXTEND_BOOKING,
            actor,
            student_id=booking.student_id,
            tutor_id=booking.tutor_id,
        )
        if booking.status != BookingStatusEnum.ACTIVE:
            raise ConflictException(f"Cannot extend a booking that is already {booking.status}")
        if additional_months < 1:
            raise ValidationException(
                "Additional months must be at least 1",
                details=[{"field": "additional_months", "message": "must be >= 1"}],
            )
        if additional_months > self.max_extension_months:
            raise ValidationException(
                f"A booking can be extended by at most {self.max_extension_months} months at once",
                details=[
                    {
                        "field": "additional_months",
                        "message": f"must be <= {self.max_extension_months}",
                    },
                ],
            )

        previous_end_date = booking.end_date
        new_end_date = add_months(previous_end_date, additional_months)
        extended = await self.booking_repository.extend_end_date(
            booking,
            previous_end_date=previous_end_date,
            new_end_date=new_end_date,
            months=additional_months,
            extended_on=utc_now(),
            extended_by_id=actor.id,
        )
        if not extended:
            current = await self._get_or_404(booking_id)
            if current.status != BookingStatusEnum.ACTIVE:
                raise ConflictException(f"Cannot extend a booking that is already {current.status}")
            raise ConflictException(
                f"Booking end date changed concurrently to {current.end_date.isoformat()}",
            )

        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="booking.extended",
            entity_type="booking",
            entity_id=str(booking.id),
            payload={
                "previous_end_date": previous_end_date.isoformat(),
                "new_end_date": new_end_date.isoformat(),
                "months": additional_months,
            },
        )
        record_transition("booking", "extended")
        logger.info(
            "Booking %s extended by %s month(s) to %s by %s",
            booking.id,
            additional_months,
            new_end_date,
            actor.id,
        )
        return booking

    async def cancel_booking(self, booking_id: UUID, actor: User, reason: str | None = None) -> Booking:
        """Cancel an active booking. Cancellation is terminal."""
        booking = await self._get_or_404(booking_id)
        self.policy.ensure_party(
            LifecycleOperation.CANCEL_BOOKING,
            actor,
            student_id=booking.student_id,
            tutor_id=booking.tutor_id,
        )
        if booking.status != BookingStatusEnum.ACTIVE:
            raise ConflictException(f"Cannot cancel a booking that is already {booking.status}")

        cancelled = await self.booking_repository.cancel_booking(
            booking,
            cancelled_at=utc_now(),
            reason=reason,
        )
        if not cancelled:
            current = await self._get_or_404(booking_id)
            raise ConflictException(f"Cannot cancel a booking that is already {current.status}")

        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="booking.cancelled",
            entity_type="booking",
            entity_id=str(booking.id),
            payload={"reason": reason, "cancelled_by_role": actor_role(actor).value},
        )
        record_transition("booking", "cancelled")
        logger.info("Booking %s cancelled by %s", booking.id, actor.id)
        return booking

    async def complete_ended_bookings(self, today: date | None = None) -> list[UUID]:
        """Move active bookings whose end date is before ``today`` to completed."""
        today = today or utc_today()
        completed_ids = await self.booking_repository.complete_ended_bookings(
            today=today,
            completed_at=utc_now(),
        )
        for booking_id in completed_ids:
            await self.audit_repository.create_audit_log(
                actor_id=None,
                action="booking.completed",
                entity_type="booking",
                entity_id=str(booking_id),
                payload={"swept_on": today.isoformat()},
            )
        record_transition("booking", "completed", len(completed_ids))
        return completed_ids

    async def list_bookings(self, actor: User) -> dict[BookingStatusEnum, list[Booking]]:
        """Role-scoped bookings grouped by status, newest first."""
        bookings = await self.booking_repository.list_bookings(
            user_id=actor.id,
            role_name=actor_role(actor),
        )
        return group_by_status(bookings)

    async def list_active_students(self, actor: User) -> list[Booking]:
        """Active bookings of a tutor, with the student loaded."""
        return await self.booking_repository.list_bookings(
            user_id=actor.id,
            role_name=RoleEnum.TUTOR,
            status=BookingStatusEnum.ACTIVE,
        )
