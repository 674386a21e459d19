"""Identity API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.enums import RoleEnum
from app.modules.identity.schemas import AccessToken, BlockUpdate, LoginRequest, UserCreate, UserRead
from app.modules.identity.service import (
    IdentityService,
    get_current_user,
    get_identity_service,
    require_roles,
)
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/identity", tags=["identity"])


@router.post("/auth/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    service: IdentityService = Depends(get_identity_service),
) -> UserRead:
    """Register a new student or tutor account."""
    user = await service.register(payload)
    return UserRead.model_validate(user)


@router.post("/auth/login", response_model=AccessToken)
async def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> AccessToken:
    """Sign in by email/password and return a bearer token."""
    return await service.login(payload)


@router.get("/users/me", response_model=UserRead)
async def get_me(current_user=Depends(get_current_user)) -> UserRead:
    """Return profile of authenticated user."""
    return UserRead.model_validate(current_user)


@router.get("/users", response_model=Page[UserRead])
async def list_users(
    role: RoleEnum | None = Query(default=None),
    pagination=Depends(get_pagination_params),
    service: IdentityService = Depends(get_identity_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> Page[UserRead]:
    """List accounts, newest first."""
    items, total = await service.list_users(
        current_user,
        limit=pagination.limit,
        offset=pagination.offset,
        role_name=role,
    )
    serialized = [UserRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.put("/users/{user_id}/blocked", response_model=UserRead)
async def set_user_blocked(
    user_id: UUID,
    payload: BlockUpdate,
    service: IdentityService = Depends(get_identity_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> UserRead:
    """Block or unblock an account."""
    user = await service.set_blocked(current_user, user_id, payload.is_blocked)
    return UserRead.model_validate(user)
