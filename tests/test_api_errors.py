from __future__ import annotations

from collections.abc import AsyncIterator
from types import SimpleNamespace
from uuid import uuid4

import httpx
import pytest

import app.main as main_module
from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.identity.service import get_current_user
from app.modules.lifecycle.service import get_lifecycle_service
from app.modules.tutors.service import get_tutors_service
from app.shared.exceptions import (
    AuthorizationException,
    ConflictException,
    NotFoundException,
    ValidationException,
)

PREFIX = main_module.settings.api_prefix


class StubCoordinator:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls: list[str] = []

    async def extend_booking(self, actor, booking_id, additional_months):
        self.calls.append("extend_booking")
        raise self.error

    async def cancel_booking(self, actor, booking_id, reason=None):
        self.calls.append("cancel_booking")
        raise self.error

    async def respond_to_request(self, actor, request_id, decision):
        self.calls.append("respond_to_request")
        raise self.error


async def _no_session() -> AsyncIterator[None]:
    yield None


def _client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=main_module.app)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


@pytest.fixture
def override_dependencies():
    app = main_module.app
    app.dependency_overrides[get_db_session] = _no_session

    def _install(coordinator: StubCoordinator | None = None, role: RoleEnum = RoleEnum.STUDENT) -> None:
        actor = SimpleNamespace(id=uuid4(), role=SimpleNamespace(name=role))
        app.dependency_overrides[get_current_user] = lambda: actor
        if coordinator is not None:
            app.dependency_overrides[get_lifecycle_service] = lambda: coordinator

    yield _install
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_missing_token_is_401_with_error_envelope(override_dependencies) -> None:
    async with _client() as client:
        response = await client.post(f"{PREFIX}/bookings/{uuid4()}/extend", json={"additional_months": 1})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {"error": {"code": "unauthenticated", "message": "Not authenticated"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (NotFoundException("No booking found with that ID"), 404, "not_found"),
        (AuthorizationException("You can only extend your own bookings"), 403, "forbidden"),
        (ConflictException("Cannot extend a booking that is already cancelled"), 409, "conflict"),
    ],
)
async def test_domain_errors_map_to_status_codes(
    override_dependencies,
    error: Exception,
    status_code: int,
    code: str,
) -> None:
    coordinator = StubCoordinator(error)
    override_dependencies(coordinator)

    async with _client() as client:
        response = await client.post(f"{PREFIX}/bookings/{uuid4()}/extend", json={"additional_months": 1})

    assert response.status_code == status_code
    assert response.json()["error"] == {"code": code, "message": str(error)}
    assert coordinator.calls == ["extend_booking"]


@pytest.mark.asyncio
async def test_validation_error_carries_details(override_dependencies) -> None:
    error = ValidationException(
        "A booking can be extended by at most 24 months at once",
        details=[{"field": "additional_months", "message": "must be <= 24"}],
    )
    override_dependencies(StubCoordinator(error))

    async with _client() as client:
        response = await client.post(f"{PREFIX}/bookings/{uuid4()}/extend", json={"additional_months": 30})

    assert response.status_code == 422
    body = response.json()["error"]
    assert body["code"] == "validation_error"
    assert body["details"] == [{"field": "additional_months", "message": "must be <= 24"}]


@pytest.mark.asyncio
async def test_malformed_body_is_rejected_before_the_coordinator(override_dependencies) -> None:
    coordinator = StubCoordinator(RuntimeError("should not be called"))
    override_dependencies(coordinator, RoleEnum.TUTOR)

    async with _client() as client:
        extend = await client.post(f"{PREFIX}/bookings/{uuid4()}/extend", json={"additional_months": 0})
        respond = await client.post(f"{PREFIX}/requests/{uuid4()}/respond", json={"decision": "maybe"})

    for response in (extend, respond):
        assert response.status_code == 422
        body = response.json()["error"]
        assert body["code"] == "validation_error"
        assert body["message"] == "Request validation failed"
    assert extend.json()["error"]["details"][0]["field"] == "additional_months"
    assert respond.json()["error"]["details"][0]["field"] == "decision"
    assert coordinator.calls == []


@pytest.mark.asyncio
async def test_cancel_accepts_empty_body(override_dependencies) -> None:
    coordinator = StubCoordinator(ConflictException("Cannot cancel a booking that is already completed"))
    override_dependencies(coordinator)

    async with _client() as client:
        response = await client.post(f"{PREFIX}/bookings/{uuid4()}/cancel")

    assert response.status_code == 409
    assert coordinator.calls == ["cancel_booking"]


class StubTutorsService:
    async def get_tutor(self, tutor_id):
        raise NotFoundException("No tutor found with that ID")


@pytest.mark.asyncio
async def test_unknown_tutor_is_404_without_a_token() -> None:
    app = main_module.app
    app.dependency_overrides[get_tutors_service] = StubTutorsService
    try:
        async with _client() as client:
            response = await client.get(f"{PREFIX}/tutors/{uuid4()}")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 404
    assert response.json() == {"error": {"code": "not_found", "message": "No tutor found with that ID"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "path", "role"),
    [
        ("GET", "/identity/users", RoleEnum.TUTOR),
        ("PUT", "/tutors/me/profile", RoleEnum.STUDENT),
    ],
)
async def test_role_restricted_routes_reject_other_roles(
    override_dependencies,
    method: str,
    path: str,
    role: RoleEnum,
) -> None:
    override_dependencies(role=role)

    async with _client() as client:
        response = await client.request(method, f"{PREFIX}{path}", json={"about": "Patient maths tutor"})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "forbidden"
