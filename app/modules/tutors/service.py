"""Tutors business logic layer."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.modules.tutors.models import TutorProfile
from app.modules.tutors.repository import TutorsRepository
from app.modules.tutors.schemas import TutorProfileUpdate
from app.shared.exceptions import AuthorizationException, NotFoundException

logger = logging.getLogger(__name__)


def _blank_profile_values() -> dict:
    return {
        "subjects": [],
        "experience_years": 0,
        "availability": "",
        "monthly_rate": Decimal("0"),
        "education": [],
        "about": "",
    }


class TutorsService:
    """Tutor profile reads and the tutor's own profile edits."""

    def __init__(self, repository: TutorsRepository, identity_repository: IdentityRepository) -> None:
        self.repository = repository
        self.identity_repository = identity_repository

    async def get_tutor(self, tutor_id: UUID) -> tuple[User, TutorProfile | None]:
        """Return a bookable tutor and their profile.

        Blocked or deactivated tutors are reported as missing, the same way
        request creation treats them.
        """
        tutor = await self.identity_repository.get_user_by_id(tutor_id)
        if tutor is None or tutor.role.name != RoleEnum.TUTOR or not tutor.can_act:
            raise NotFoundException("No tutor found with that ID")
        profile = await self.repository.get_profile_by_user_id(tutor.id)
        return tutor, profile

    async def update_own_profile(self, actor: User, payload: TutorProfileUpdate) -> TutorProfile:
        """Create the actor's profile on first edit, otherwise apply the given fields."""
        if actor.role.name != RoleEnum.TUTOR:
            raise AuthorizationException("Only tutors can update tutor profiles")

        changes = payload.model_dump(exclude_none=True)
        profile = await self.repository.get_profile_by_user_id(actor.id)
        if profile is None:
            profile = await self.repository.create_profile(actor.id, **{**_blank_profile_values(), **changes})
        else:
            profile = await self.repository.update_profile(profile, **changes)

        logger.info(
            "Tutor %s updated profile fields=%s complete=%s",
            actor.id,
            sorted(changes),
            profile.profile_complete,
        )
        return profile


async def get_tutors_service(session: AsyncSession = Depends(get_db_session)) -> TutorsService:
    """Dependency provider for tutors service."""
    return TutorsService(TutorsRepository(session), IdentityRepository(session))
