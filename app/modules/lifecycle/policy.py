"""Role allow-lists for lifecycle operations.

Every check compares the actor's stored role and id with what the record
stores. Client-supplied role claims never take part.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Protocol
from uuid import UUID

from app.core.config import Settings
from app.core.enums import RoleEnum
from app.shared.exceptions import AuthorizationException


class LifecycleOperation(StrEnum):
    """Operations gated by the lifecycle policy."""

    CREATE_REQUEST = "create_request"
    RESPOND_TO_REQUEST = "respond_to_request"
    EXTEND_BOOKING = "extend_booking"
    CANCEL_BOOKING = "cancel_booking"
    COMPLETE_ENDED_BOOKINGS = "complete_ended_bookings"
    VIEW_STUDENT_HISTORY = "view_student_history"
    VIEW_ACTIVE_STUDENTS = "view_active_students"


_DENIED_MESSAGES: dict[LifecycleOperation, str] = {
    LifecycleOperation.CREATE_REQUEST: "Only students can create tuition requests",
    LifecycleOperation.RESPOND_TO_REQUEST: "Only tutors can respond to tuition requests",
    LifecycleOperation.EXTEND_BOOKING: "Your role cannot extend bookings",
    LifecycleOperation.CANCEL_BOOKING: "Your role cannot cancel bookings",
    LifecycleOperation.COMPLETE_ENDED_BOOKINGS: "Only admin can complete ended bookings",
    LifecycleOperation.VIEW_STUDENT_HISTORY: "Only students can access their history",
    LifecycleOperation.VIEW_ACTIVE_STUDENTS: "Only tutors can access this information",
}

_NOT_PARTY_MESSAGES: dict[LifecycleOperation, str] = {
    LifecycleOperation.RESPOND_TO_REQUEST: "You can only respond to requests assigned to you",
    LifecycleOperation.EXTEND_BOOKING: "You can only extend your own bookings",
    LifecycleOperation.CANCEL_BOOKING: "You can only cancel your own bookings",
}


class Actor(Protocol):
    """Minimal shape of an acting user."""

    id: UUID
    role: object


def actor_role(actor: Actor) -> RoleEnum:
    return RoleEnum(actor.role.name)  # type: ignore[attr-defined]


class LifecyclePolicy:
    """Explicit per-operation role allow-list."""

    def __init__(self, allowed_roles: Mapping[LifecycleOperation, Iterable[RoleEnum]]) -> None:
        missing = set(LifecycleOperation) - set(allowed_roles)
        if missing:
            raise ValueError(f"No role allow-list for: {', '.join(sorted(missing))}")
        self._allowed = {operation: frozenset(roles) for operation, roles in allowed_roles.items()}

    @classmethod
    def from_settings(cls, settings: Settings) -> "LifecyclePolicy":
        return cls(
            {
                LifecycleOperation.CREATE_REQUEST: {RoleEnum.STUDENT},
                LifecycleOperation.RESPOND_TO_REQUEST: {RoleEnum.TUTOR},
                LifecycleOperation.EXTEND_BOOKING: settings.booking_extend_roles,
                LifecycleOperation.CANCEL_BOOKING: settings.booking_cancel_roles,
                LifecycleOperation.COMPLETE_ENDED_BOOKINGS: {RoleEnum.ADMIN},
                LifecycleOperation.VIEW_STUDENT_HISTORY: {RoleEnum.STUDENT},
                LifecycleOperation.VIEW_ACTIVE_STUDENTS: {RoleEnum.TUTOR},
            },
        )

    def roles_for(self, operation: LifecycleOperation) -> frozenset[RoleEnum]:
        return self._allowed[operation]

    def ensure_role(self, operation: LifecycleOperation, actor: Actor) -> None:
        """Reject actors whose stored role is not allowed for the operation."""
        if actor_role(actor) not in self._allowed[operation]:
            raise AuthorizationException(_DENIED_MESSAGES[operation])

    def ensure_party(
        self,
        operation: LifecycleOperation,
        actor: Actor,
        *,
        student_id: UUID,
        tutor_id: UUID,
    ) -> None:
        """Reject actors that are not the record's party in an allowed role."""
        role = actor_role(actor)
        allowed = self._allowed[operation]
        if role == RoleEnum.STUDENT and RoleEnum.STUDENT in allowed and actor.id == student_id:
            return
        if role == RoleEnum.TUTOR and RoleEnum.TUTOR in allowed and actor.id == tutor_id:
            return
        raise AuthorizationException(
            _NOT_PARTY_MESSAGES.get(operation, "You are not a party to this record"),
        )


def ensure_can_view(actor: Actor, *, student_id: UUID, tutor_id: UUID) -> None:
    """Reads are open to the record's parties and to admins."""
    if actor_role(actor) == RoleEnum.ADMIN:
        return
    if actor.id in (student_id, tutor_id):
        return
    raise AuthorizationException("You are not a party to this record")
