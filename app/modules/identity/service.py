"""Identity business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    oauth2_scheme,
    verify_password,
)
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.schemas import AccessToken, LoginRequest, UserCreate
from app.shared.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

BLOCKED_ACCOUNT_MESSAGE = "Your account has been blocked. Please contact admin."


class IdentityService:
    """Identity domain service."""

    def __init__(self, repository: IdentityRepository) -> None:
        self.repository = repository

    async def ensure_default_roles(self) -> None:
        """Ensure all default roles exist."""
        for role_name in RoleEnum:
            role = await self.repository.get_role_by_name(role_name)
            if role is None:
                await self.repository.create_role(role_name)

    async def register(self, payload: UserCreate) -> User:
        """Register a new student or tutor account."""
        existing_user = await self.repository.get_user_by_email(payload.email)
        if existing_user is not None:
            raise ConflictException("Email already in use")

        role = await self.repository.get_role_by_name(payload.role)
        if role is None:
            raise NotFoundException("Role not found")

        return await self.repository.create_user(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
            phone_number=payload.phone_number,
            role_id=role.id,
        )

    async def login(self, payload: LoginRequest) -> AccessToken:
        """Authenticate user and issue an access token."""
        user = await self.repository.get_user_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise AuthenticationException("Incorrect email or password")
        if not user.is_active:
            raise AuthenticationException("User is inactive")
        if user.is_blocked:
            raise AuthorizationException(BLOCKED_ACCOUNT_MESSAGE)

        return AccessToken(access_token=create_access_token(subject=str(user.id), role=user.role.name))

    async def get_user_from_access_token(self, token: str) -> User:
        """Resolve the acting user from an access token.

        The role used for every authorization decision is the one stored on the
        user record, never the ``role`` claim carried in the token.
        """
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise AuthenticationException("Invalid access token")

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationException("Token subject is missing")
        try:
            user_id = UUID(subject)
        except ValueError as exc:
            raise AuthenticationException("Token subject is malformed") from exc

        user = await self.repository.get_user_by_id(user_id)
        if user is None:
            raise AuthenticationException("User not found")
        if not user.is_active:
            raise AuthenticationException("User is inactive")
        if user.is_blocked:
            raise AuthorizationException(BLOCKED_ACCOUNT_MESSAGE)
        return user

    async def list_users(
        self,
        actor: User,
        *,
        limit: int,
        offset: int,
        role_name: RoleEnum | None = None,
    ) -> tuple[list[User], int]:
        """List every account, newest first (admin only)."""
        if actor.role.name != RoleEnum.ADMIN:
            raise AuthorizationException("Only admin can list users")
        return await self.repository.list_users(limit=limit, offset=offset, role_name=role_name)

    async def set_blocked(self, actor: User, user_id: UUID, is_blocked: bool) -> User:
        """Block or unblock an account (admin only)."""
        if actor.role.name != RoleEnum.ADMIN:
            raise AuthorizationException("Only admin can block users")
        if actor.id == user_id:
            raise ConflictException("Admins cannot change their own blocked flag")

        user = await self.repository.get_user_by_id(user_id)
        if user is None:
            raise NotFoundException("User not found")

        user = await self.repository.set_blocked(user, is_blocked)
        logger.info("User %s blocked=%s by admin %s", user.id, is_blocked, actor.id)
        return user


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(IdentityRepository(session))


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> User:
    """Resolve currently authenticated user from bearer token."""
    if not token:
        raise AuthenticationException("Not authenticated")
    return await service.get_user_from_access_token(token)


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.name not in roles:
            raise AuthorizationException("Operation not permitted for your role")
        return current_user

    return _checker
