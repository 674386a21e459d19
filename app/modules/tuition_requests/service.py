"""Request ledger: create tuition requests and record the tutor's decision."""

from __future__ import annotations

import logging
from uuid import UUID

from app.core.enums import RequestDecisionEnum, RequestStatusEnum, RoleEnum
from app.core.metrics import record_transition
from app.modules.audit.repository import AuditRepository
from app.modules.booking.models import Booking
from app.modules.booking.service import BookingService
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.lifecycle.policy import LifecycleOperation, LifecyclePolicy, actor_role, ensure_can_view
from app.modules.tuition_requests.models import TuitionRequest
from app.modules.tuition_requests.repository import TuitionRequestRepository
from app.modules.tuition_requests.schemas import TuitionRequestCreate
from app.shared.exceptions import ConflictException, NotFoundException
from app.shared.utils import utc_now

logger = logging.getLogger(__name__)

_DECISION_STATUS = {
    RequestDecisionEnum.ACCEPT: RequestStatusEnum.ACCEPTED,
    RequestDecisionEnum.REJECT: RequestStatusEnum.REJECTED,
}


def _already_decided(status: RequestStatusEnum) -> ConflictException:
    return ConflictException(f"This request has already been {status}")


class TuitionRequestService:
    """Tuition request domain service."""

    def __init__(
        self,
        repository: TuitionRequestRepository,
        identity_repository: IdentityRepository,
        booking_service: BookingService,
        audit_repository: AuditRepository,
        policy: LifecyclePolicy,
    ) -> None:
        self.repository = repository
        self.identity_repository = identity_repository
        self.booking_service = booking_service
        self.audit_repository = audit_repository
        self.policy = policy

    async def create_request(self, payload: TuitionRequestCreate, student: User) -> TuitionRequest:
        """Persist a new pending request addressed to an active tutor."""
        tutor = await self.identity_repository.get_user_by_id(payload.tutor_id)
        if tutor is None or actor_role(tutor) != RoleEnum.TUTOR or not tutor.can_act:
            raise NotFoundException("Tutor not found")

        request = await self.repository.create_request(
            student_id=student.id,
            tutor_id=tutor.id,
            subject=payload.subject,
            grade_level=payload.grade_level,
            preferred_days=[day.value for day in payload.preferred_days],
            preferred_time=payload.preferred_time,
            duration_months=payload.duration_months,
            start_date=payload.start_date,
            monthly_fee=payload.monthly_fee,
            notes=payload.notes,
        )
        await self.audit_repository.create_audit_log(
            actor_id=student.id,
            action="tuition_request.created",
            entity_type="tuition_request",
            entity_id=str(request.id),
            payload={"tutor_id": str(tutor.id), "subject": request.subject},
        )
        record_transition("tuition_request", "created")
        return request

    async def respond(
        self,
        request_id: UUID,
        tutor: User,
        decision: RequestDecisionEnum,
    ) -> tuple[TuitionRequest, Booking | None]:
        """Accept or reject a pending request; accepting also creates its booking."""
        request = await self.repository.get_request_by_id(request_id)
        if request is None:
            raise NotFoundException("No request found with that ID")

        self.policy.ensure_party(
            LifecycleOperation.RESPOND_TO_REQUEST,
            tutor,
            student_id=request.student_id,
            tutor_id=request.tutor_id,
        )
        if request.status != RequestStatusEnum.PENDING:
            raise _already_decided(request.status)

        new_status = _DECISION_STATUS[decision]
        swapped = await self.repository.transition_status(
            request,
            expected=RequestStatusEnum.PENDING,
            new=new_status,
            responded_at=utc_now(),
        )
        if not swapped:
            current = await self.repository.get_request_by_id(request_id)
            if current is None:
                raise NotFoundException("No request found with that ID")
            raise _already_decided(current.status)

        booking = None
        if new_status == RequestStatusEnum.ACCEPTED:
            booking = await self.booking_service.create_from_request(request, tutor)

        await self.audit_repository.create_audit_log(
            actor_id=tutor.id,
            action=f"tuition_request.{new_status}",
            entity_type="tuition_request",
            entity_id=str(request.id),
            payload={"booking_id": str(booking.id) if booking else None},
        )
        record_transition("tuition_request", str(new_status))
        logger.info("Tuition request %s %s by tutor %s", request.id, new_status, tutor.id)
        return request, booking

    async def get_request(self, request_id: UUID, actor: User) -> TuitionRequest:
        """Read one request as one of its parties or an admin."""
        request = await self.repository.get_request_by_id(request_id)
        if request is None:
            raise NotFoundException("No request found with that ID")
        ensure_can_view(actor, student_id=request.student_id, tutor_id=request.tutor_id)
        return request

    async def list_requests(
        self,
        actor: User,
        *,
        status: RequestStatusEnum | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[TuitionRequest], int]:
        """Role-scoped requests, newest first; admins see every request."""
        return await self.repository.list_requests(
            user_id=actor.id,
            role_name=actor_role(actor),
            status=status,
            limit=limit,
            offset=offset,
        )
