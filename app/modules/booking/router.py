"""Booking API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends

from app.modules.booking.schemas import (
    ActiveStudentRead,
    BookingCancelRequest,
    BookingExtendRequest,
    BookingGroups,
    BookingRead,
    CompletionSweepRead,
)
from app.modules.identity.schemas import UserSummary
from app.modules.identity.service import get_current_user
from app.modules.lifecycle.service import LifecycleService, get_lifecycle_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=BookingGroups)
async def list_my_bookings(
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> BookingGroups:
    """List bookings for current user grouped by status."""
    grouped = await service.list_bookings(current_user)
    return BookingGroups.from_grouped(grouped)


@router.get("/students/active", response_model=list[ActiveStudentRead])
async def list_active_students(
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> list[ActiveStudentRead]:
    """Students the current tutor is actively teaching."""
    bookings = await service.list_active_students(current_user)
    return [
        ActiveStudentRead(
            booking_id=booking.id,
            subject=booking.subject,
            start_date=booking.start_date,
            end_date=booking.end_date,
            days_of_week=booking.days_of_week,
            time_slot=booking.time_slot,
            monthly_fee=booking.monthly_fee,
            student=UserSummary.model_validate(booking.student),
        )
        for booking in bookings
    ]


@router.post("/complete-ended", response_model=CompletionSweepRead)
async def complete_ended_bookings(
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> CompletionSweepRead:
    """Mark bookings whose end date has passed as completed (admin task endpoint)."""
    booking_ids = await service.complete_ended_bookings(current_user)
    return CompletionSweepRead(completed=len(booking_ids), booking_ids=booking_ids)


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Read a single booking."""
    booking = await service.get_booking(current_user, booking_id)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/extend", response_model=BookingRead)
async def extend_booking(
    booking_id: UUID,
    payload: BookingExtendRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Extend an active booking by whole calendar months."""
    booking = await service.extend_booking(current_user, booking_id, payload.additional_months)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancelRequest | None = Body(default=None),
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Cancel an active booking."""
    reason = payload.reason if payload is not None else None
    booking = await service.cancel_booking(current_user, booking_id, reason)
    return BookingRead.model_validate(booking)
