"""Tuition request API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.enums import RequestStatusEnum
from app.modules.booking.schemas import BookingGroups, BookingRead
from app.modules.identity.service import get_current_user
from app.modules.lifecycle.service import LifecycleService, get_lifecycle_service
from app.modules.tuition_requests.schemas import (
    RequestGroups,
    StudentHistoryRead,
    TuitionRequestCreate,
    TuitionRequestDecisionRead,
    TuitionRequestRead,
    TuitionRequestRespond,
)
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", response_model=TuitionRequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: TuitionRequestCreate,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> TuitionRequestRead:
    """Send a tuition request to a tutor."""
    request = await service.create_request(current_user, payload)
    return TuitionRequestRead.model_validate(request)


@router.get("", response_model=Page[TuitionRequestRead])
async def list_requests(
    status_filter: RequestStatusEnum | None = Query(default=None, alias="status"),
    pagination=Depends(get_pagination_params),
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> Page[TuitionRequestRead]:
    """List requests sent or received by the current user, newest first."""
    items, total = await service.list_requests(
        current_user,
        status=status_filter,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    serialized = [TuitionRequestRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/history", response_model=StudentHistoryRead)
async def get_student_history(
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> StudentHistoryRead:
    """Student's requests and bookings grouped by status."""
    requests, bookings = await service.get_student_history(current_user)
    return StudentHistoryRead(
        requests=RequestGroups.from_grouped(requests),
        bookings=BookingGroups.from_grouped(bookings),
    )


@router.get("/{request_id}", response_model=TuitionRequestRead)
async def get_request(
    request_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> TuitionRequestRead:
    """Read a single request."""
    request = await service.get_request(current_user, request_id)
    return TuitionRequestRead.model_validate(request)


@router.post("/{request_id}/respond", response_model=TuitionRequestDecisionRead)
async def respond_to_request(
    request_id: UUID,
    payload: TuitionRequestRespond,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> TuitionRequestDecisionRead:
    """Accept or reject a pending request; accepting returns the new booking."""
    request, booking = await service.respond_to_request(current_user, request_id, payload.decision)
    return TuitionRequestDecisionRead(
        request=TuitionRequestRead.model_validate(request),
        booking=BookingRead.model_validate(booking) if booking is not None else None,
    )
