from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

import app.modules.tuition_requests.service as request_service_module
from app.core.config import Settings
from app.core.enums import BookingStatusEnum, RequestDecisionEnum, RequestStatusEnum, RoleEnum
from app.modules.booking.service import BookingService
from app.modules.lifecycle.policy import LifecyclePolicy
from app.modules.lifecycle.service import LifecycleService
from app.modules.tuition_requests.schemas import TuitionRequestCreate
from app.modules.tuition_requests.service import TuitionRequestService
from app.shared.exceptions import AuthorizationException, ConflictException, NotFoundException

FIXED_NOW = datetime(2024, 1, 2, 8, 30, tzinfo=UTC)


@dataclass
class FakeTuitionRequest:
    id: UUID
    student_id: UUID
    tutor_id: UUID
    subject: str
    grade_level: str
    preferred_days: list[str]
    preferred_time: str
    duration_months: int
    start_date: date
    monthly_fee: Decimal
    notes: str | None
    status: RequestStatusEnum = RequestStatusEnum.PENDING
    responded_at: datetime | None = None


class FakeTuitionRequestRepository:
    def __init__(self, requests: dict[UUID, FakeTuitionRequest] | None = None) -> None:
        self._requests: dict[UUID, FakeTuitionRequest] = requests or {}

    async def create_request(self, **terms) -> FakeTuitionRequest:
        request = FakeTuitionRequest(id=uuid4(), **terms)
        self._requests[request.id] = request
        return replace(request)

    async def get_request_by_id(self, request_id: UUID) -> FakeTuitionRequest | None:
        stored = self._requests.get(request_id)
        return replace(stored) if stored is not None else None

    async def transition_status(
        self,
        request: FakeTuitionRequest,
        *,
        expected: RequestStatusEnum,
        new: RequestStatusEnum,
        responded_at: datetime,
    ) -> bool:
        stored = self._requests[request.id]
        if stored.status != expected:
            return False
        for target in (stored, request):
            target.status = new
            target.responded_at = responded_at
        return True

    async def list_requests(
        self,
        *,
        user_id: UUID,
        role_name: RoleEnum,
        status: RequestStatusEnum | None,
        limit: int | None,
        offset: int,
    ) -> tuple[list[FakeTuitionRequest], int]:
        items = list(self._requests.values())
        if role_name == RoleEnum.STUDENT:
            items = [item for item in items if item.student_id == user_id]
        elif role_name == RoleEnum.TUTOR:
            items = [item for item in items if item.tutor_id == user_id]
        if status is not None:
            items = [item for item in items if item.status == status]
        total = len(items)
        end = None if limit is None else offset + limit
        return items[offset:end], total


class FakeIdentityRepository:
    def __init__(self, users: list[SimpleNamespace]) -> None:
        self._users = {user.id: user for user in users}

    async def get_user_by_id(self, user_id: UUID) -> SimpleNamespace | None:
        return self._users.get(user_id)


class FakeBookingRepository:
    def __init__(self) -> None:
        self.bookings: list[SimpleNamespace] = []

    async def create_booking(self, **values) -> SimpleNamespace:
        booking = SimpleNamespace(
            id=uuid4(),
            status=BookingStatusEnum.ACTIVE,
            extended=False,
            extensions=[],
            **values,
        )
        self.bookings.append(booking)
        return booking

    async def list_bookings(
        self,
        *,
        user_id: UUID,
        role_name: RoleEnum,
        status: BookingStatusEnum | None = None,
    ) -> list[SimpleNamespace]:
        return [item for item in self.bookings if item.student_id == user_id]


class FakeAuditRepository:
    def __init__(self) -> None:
        self.actions: list[str] = []

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> None:
        self.actions.append(action)


def make_user(role: RoleEnum, *, is_active: bool = True, is_blocked: bool = False) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        role=SimpleNamespace(name=role),
        is_active=is_active,
        is_blocked=is_blocked,
        can_act=is_active and not is_blocked,
    )


@dataclass
class Harness:
    coordinator: LifecycleService
    requests: FakeTuitionRequestRepository
    bookings: FakeBookingRepository
    audit: FakeAuditRepository


def make_harness(
    users: list[SimpleNamespace],
    requests: dict[UUID, FakeTuitionRequest] | None = None,
    request_repository: FakeTuitionRequestRepository | None = None,
) -> Harness:
    policy = LifecyclePolicy.from_settings(Settings(_env_file=None))
    request_repo = request_repository or FakeTuitionRequestRepository(requests)
    booking_repo = FakeBookingRepository()
    audit_repo = FakeAuditRepository()
    booking_service = BookingService(
        booking_repository=booking_repo,
        audit_repository=audit_repo,
        policy=policy,
    )
    request_service = TuitionRequestService(
        repository=request_repo,
        identity_repository=FakeIdentityRepository(users),
        booking_service=booking_service,
        audit_repository=audit_repo,
        policy=policy,
    )
    return Harness(
        coordinator=LifecycleService(request_service, booking_service, policy),
        requests=request_repo,
        bookings=booking_repo,
        audit=audit_repo,
    )


def make_payload(tutor_id: UUID, **overrides) -> TuitionRequestCreate:
    data = {
        "tutor_id": tutor_id,
        "subject": "Chemistry",
        "grade_level": "Grade 10",
        "preferred_days": ["Monday", "Thursday"],
        "preferred_time": "16:00",
        "duration_months": 3,
        "start_date": date(2024, 2, 1),
        "monthly_fee": Decimal("150.00"),
    }
    data.update(overrides)
    return TuitionRequestCreate(**data)


def make_pending(student_id: UUID, tutor_id: UUID) -> FakeTuitionRequest:
    return FakeTuitionRequest(
        id=uuid4(),
        student_id=student_id,
        tutor_id=tutor_id,
        subject="Biology",
        grade_level="Grade 8",
        preferred_days=["Tuesday"],
        preferred_time="18:30",
        duration_months=2,
        start_date=date(2024, 1, 1),
        monthly_fee=Decimal("90.00"),
        notes=None,
    )


@pytest.mark.asyncio
async def test_student_creates_pending_request() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    harness = make_harness([student, tutor])

    request = await harness.coordinator.create_request(student, make_payload(tutor.id))

    assert request.status == RequestStatusEnum.PENDING
    assert request.student_id == student.id
    assert request.tutor_id == tutor.id
    assert request.preferred_days == ["Monday", "Thursday"]
    assert request.responded_at is None
    assert harness.audit.actions == ["tuition_request.created"]


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [RoleEnum.TUTOR, RoleEnum.ADMIN])
async def test_only_students_create_requests(role: RoleEnum) -> None:
    actor = make_user(role)
    tutor = make_user(RoleEnum.TUTOR)
    harness = make_harness([actor, tutor])

    with pytest.raises(AuthorizationException, match="Only students"):
        await harness.coordinator.create_request(actor, make_payload(tutor.id))


@pytest.mark.asyncio
async def test_request_to_unknown_or_unavailable_tutor_is_not_found() -> None:
    student = make_user(RoleEnum.STUDENT)
    blocked_tutor = make_user(RoleEnum.TUTOR, is_blocked=True)
    other_student = make_user(RoleEnum.STUDENT)
    harness = make_harness([student, blocked_tutor, other_student])

    for tutor_id in (uuid4(), blocked_tutor.id, other_student.id):
        with pytest.raises(NotFoundException, match="Tutor not found"):
            await harness.coordinator.create_request(student, make_payload(tutor_id))


def test_request_payload_validation() -> None:
    tutor_id = uuid4()
    with pytest.raises(ValidationError):
        make_payload(tutor_id, subject="   ")
    with pytest.raises(ValidationError):
        make_payload(tutor_id, preferred_days=[])
    with pytest.raises(ValidationError):
        make_payload(tutor_id, preferred_days=["Someday"])
    with pytest.raises(ValidationError):
        make_payload(tutor_id, duration_months=0)
    with pytest.raises(ValidationError):
        make_payload(tutor_id, monthly_fee=Decimal("-1"))


def test_request_payload_normalizes_days() -> None:
    payload = make_payload(uuid4(), preferred_days=["monday", " FRIDAY", "Monday"])
    assert [day.value for day in payload.preferred_days] == ["Monday", "Friday"]


@pytest.mark.asyncio
async def test_accept_creates_exactly_one_matching_booking(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(request_service_module, "utc_now", lambda: FIXED_NOW)
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor], {pending.id: pending})

    request, booking = await harness.coordinator.respond_to_request(
        tutor,
        pending.id,
        RequestDecisionEnum.ACCEPT,
    )

    assert request.status == RequestStatusEnum.ACCEPTED
    assert request.responded_at == FIXED_NOW
    assert booking is not None
    assert harness.bookings.bookings == [booking]
    assert booking.tuition_request_id == pending.id
    assert booking.student_id == student.id
    assert booking.tutor_id == tutor.id
    assert booking.start_date == date(2024, 1, 1)
    assert booking.end_date == date(2024, 3, 1)
    assert booking.days_of_week == ["Tuesday"]
    assert booking.time_slot == "18:30"
    assert booking.monthly_fee == Decimal("90.00")
    assert booking.status == BookingStatusEnum.ACTIVE
    assert harness.audit.actions == ["booking.created", "tuition_request.accepted"]


@pytest.mark.asyncio
async def test_reject_creates_no_booking() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor], {pending.id: pending})

    request, booking = await harness.coordinator.respond_to_request(
        tutor,
        pending.id,
        RequestDecisionEnum.REJECT,
    )

    assert request.status == RequestStatusEnum.REJECTED
    assert booking is None
    assert harness.bookings.bookings == []


@pytest.mark.asyncio
async def test_decided_request_cannot_be_decided_again() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor], {pending.id: pending})

    await harness.coordinator.respond_to_request(tutor, pending.id, RequestDecisionEnum.REJECT)

    with pytest.raises(ConflictException, match="already been rejected"):
        await harness.coordinator.respond_to_request(tutor, pending.id, RequestDecisionEnum.ACCEPT)
    assert harness.bookings.bookings == []


@pytest.mark.asyncio
async def test_only_assigned_tutor_can_respond() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    other_tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor, other_tutor], {pending.id: pending})

    with pytest.raises(AuthorizationException, match="assigned to you"):
        await harness.coordinator.respond_to_request(other_tutor, pending.id, RequestDecisionEnum.ACCEPT)
    with pytest.raises(AuthorizationException, match="Only tutors"):
        await harness.coordinator.respond_to_request(student, pending.id, RequestDecisionEnum.ACCEPT)

    stored = await harness.requests.get_request_by_id(pending.id)
    assert stored.status == RequestStatusEnum.PENDING


@pytest.mark.asyncio
async def test_respond_to_unknown_request_is_not_found() -> None:
    tutor = make_user(RoleEnum.TUTOR)
    harness = make_harness([tutor])

    with pytest.raises(NotFoundException):
        await harness.coordinator.respond_to_request(tutor, uuid4(), RequestDecisionEnum.ACCEPT)


class RacingRequestRepository(FakeTuitionRequestRepository):
    """A concurrent decision lands between the service's read and its update."""

    async def transition_status(self, request: FakeTuitionRequest, **kwargs) -> bool:
        self._requests[request.id].status = RequestStatusEnum.ACCEPTED
        return await super().transition_status(request, **kwargs)


@pytest.mark.asyncio
async def test_concurrent_decision_loser_gets_conflict_and_no_booking() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness(
        [student, tutor],
        request_repository=RacingRequestRepository({pending.id: pending}),
    )

    with pytest.raises(ConflictException, match="already been accepted"):
        await harness.coordinator.respond_to_request(tutor, pending.id, RequestDecisionEnum.REJECT)

    assert harness.bookings.bookings == []
    assert harness.audit.actions == []


@pytest.mark.asyncio
async def test_list_requests_is_scoped_to_the_actor() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    admin = make_user(RoleEnum.ADMIN)
    mine = make_pending(student.id, tutor.id)
    foreign = make_pending(uuid4(), uuid4())
    harness = make_harness([student, tutor, admin], {mine.id: mine, foreign.id: foreign})

    student_items, student_total = await harness.coordinator.list_requests(
        student,
        status=None,
        limit=20,
        offset=0,
    )
    admin_items, admin_total = await harness.coordinator.list_requests(
        admin,
        status=RequestStatusEnum.PENDING,
        limit=20,
        offset=0,
    )

    assert [item.id for item in student_items] == [mine.id]
    assert student_total == 1
    assert admin_total == 2
    assert len(admin_items) == 2


@pytest.mark.asyncio
async def test_get_request_rejects_non_party() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    pending = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor], {pending.id: pending})

    assert (await harness.coordinator.get_request(tutor, pending.id)).id == pending.id
    with pytest.raises(AuthorizationException):
        await harness.coordinator.get_request(make_user(RoleEnum.STUDENT), pending.id)


@pytest.mark.asyncio
async def test_student_history_groups_requests_and_bookings() -> None:
    student = make_user(RoleEnum.STUDENT)
    tutor = make_user(RoleEnum.TUTOR)
    first = make_pending(student.id, tutor.id)
    second = make_pending(student.id, tutor.id)
    harness = make_harness([student, tutor], {first.id: first, second.id: second})

    await harness.coordinator.respond_to_request(tutor, first.id, RequestDecisionEnum.ACCEPT)
    requests, bookings = await harness.coordinator.get_student_history(student)

    assert [item.id for item in requests[RequestStatusEnum.ACCEPTED]] == [first.id]
    assert [item.id for item in requests[RequestStatusEnum.PENDING]] == [second.id]
    assert requests[RequestStatusEnum.REJECTED] == []
    assert len(bookings[BookingStatusEnum.ACTIVE]) == 1

    with pytest.raises(AuthorizationException):
        await harness.coordinator.get_student_history(tutor)
