"""Lifecycle coordinator: role gating and request -> booking orchestration."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, RequestDecisionEnum, RequestStatusEnum
from app.modules.audit.repository import AuditRepository
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.booking.service import BookingService
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.lifecycle.policy import LifecycleOperation, LifecyclePolicy
from app.modules.tuition_requests.models import TuitionRequest
from app.modules.tuition_requests.repository import TuitionRequestRepository
from app.modules.tuition_requests.schemas import TuitionRequestCreate
from app.modules.tuition_requests.service import TuitionRequestService


class LifecycleService:
    """Entry point for every state-changing lifecycle operation.

    The acting user is passed explicitly into each call. The role check happens
    here; the ledgers then match the actor against the record's stored parties.
    """

    def __init__(
        self,
        request_service: TuitionRequestService,
        booking_service: BookingService,
        policy: LifecyclePolicy,
    ) -> None:
        self.request_service = request_service
        self.booking_service = booking_service
        self.policy = policy

    async def create_request(self, actor: User, payload: TuitionRequestCreate) -> TuitionRequest:
        self.policy.ensure_role(LifecycleOperation.CREATE_REQUEST, actor)
        return await self.request_service.create_request(payload, actor)

    async def respond_to_request(
        self,
        actor: User,
        request_id: UUID,
        decision: RequestDecisionEnum,
    ) -> tuple[TuitionRequest, Booking | None]:
        self.policy.ensure_role(LifecycleOperation.RESPOND_TO_REQUEST, actor)
        return await self.request_service.respond(request_id, actor, decision)

    async def extend_booking(self, actor: User, booking_id: UUID, additional_months: int) -> Booking:
        self.policy.ensure_role(LifecycleOperation.EXTEND_BOOKING, actor)
        return await self.booking_service.extend_booking(booking_id, actor, additional_months)

    async def cancel_booking(self, actor: User, booking_id: UUID, reason: str | None = None) -> Booking:
        self.policy.ensure_role(LifecycleOperation.CANCEL_BOOKING, actor)
        return await self.booking_service.cancel_booking(booking_id, actor, reason)

    async def complete_ended_bookings(self, actor: User) -> list[UUID]:
        self.policy.ensure_role(LifecycleOperation.COMPLETE_ENDED_BOOKINGS, actor)
        return await self.booking_service.complete_ended_bookings()

    async def list_requests(
        self,
        actor: User,
        *,
        status: RequestStatusEnum | None,
        limit: int,
        offset: int,
    ) -> tuple[list[TuitionRequest], int]:
        return await self.request_service.list_requests(actor, status=status, limit=limit, offset=offset)

    async def get_request(self, actor: User, request_id: UUID) -> TuitionRequest:
        return await self.request_service.get_request(request_id, actor)

    async def list_bookings(self, actor: User) -> dict[BookingStatusEnum, list[Booking]]:
        return await self.booking_service.list_bookings(actor)

    async def get_booking(self, actor: User, booking_id: UUID) -> Booking:
        return await self.booking_service.get_booking(booking_id, actor)

    async def list_active_students(self, actor: User) -> list[Booking]:
        self.policy.ensure_role(LifecycleOperation.VIEW_ACTIVE_STUDENTS, actor)
        return await self.booking_service.list_active_students(actor)

    async def get_student_history(
        self,
        actor: User,
    ) -> tuple[dict[RequestStatusEnum, list[TuitionRequest]], dict[BookingStatusEnum, list[Booking]]]:
        """Requests and bookings of one student, each grouped by status."""
        self.policy.ensure_role(LifecycleOperation.VIEW_STUDENT_HISTORY, actor)
        requests, _ = await self.request_service.list_requests(actor)
        grouped_requests: dict[RequestStatusEnum, list[TuitionRequest]] = {
            status: [] for status in RequestStatusEnum
        }
        for request in requests:
            grouped_requests[request.status].append(request)
        grouped_bookings = await self.booking_service.list_bookings(actor)
        return grouped_requests, grouped_bookings


def build_lifecycle_service(session: AsyncSession, settings: Settings | None = None) -> LifecycleService:
    """Wire both ledgers onto one session so a lifecycle operation shares one transaction."""
    settings = settings or get_settings()
    policy = LifecyclePolicy.from_settings(settings)
    audit_repository = AuditRepository(session)
    booking_service = BookingService(
        booking_repository=BookingRepository(session),
        audit_repository=audit_repository,
        policy=policy,
        max_extension_months=settings.booking_max_extension_months,
    )
    request_service = TuitionRequestService(
        repository=TuitionRequestRepository(session),
        identity_repository=IdentityRepository(session),
        booking_service=booking_service,
        audit_repository=audit_repository,
        policy=policy,
    )
    return LifecycleService(request_service, booking_service, policy)


async def get_lifecycle_service(session: AsyncSession = Depends(get_db_session)) -> LifecycleService:
    """Dependency provider for the lifecycle coordinator."""
    return build_lifecycle_service(session)
