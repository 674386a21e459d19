"""Tutors repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.tutors.models import TutorProfile


class TutorsRepository:
    """DB operations for tutor profiles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_profile_by_user_id(self, user_id: UUID) -> TutorProfile | None:
        stmt = select(TutorProfile).where(TutorProfile.user_id == user_id)
        return await self.session.scalar(stmt)

    async def create_profile(self, user_id: UUID, **values) -> TutorProfile:
        profile = TutorProfile(user_id=user_id, **values)
        profile.profile_complete = profile.check_completeness()
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def update_profile(self, profile: TutorProfile, **changes) -> TutorProfile:
        for key, value in changes.items():
            setattr(profile, key, value)
        profile.profile_complete = profile.check_completeness()
        await self.session.flush()
        return profile
