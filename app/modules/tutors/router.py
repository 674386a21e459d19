"""Tutors API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.enums import RoleEnum
from app.modules.identity.service import require_roles
from app.modules.tutors.schemas import TutorProfileRead, TutorProfileUpdate, TutorRead
from app.modules.tutors.service import TutorsService, get_tutors_service

router = APIRouter(prefix="/tutors", tags=["tutors"])


@router.put("/me/profile", response_model=TutorProfileRead)
async def update_my_profile(
    payload: TutorProfileUpdate,
    service: TutorsService = Depends(get_tutors_service),
    current_user=Depends(require_roles(RoleEnum.TUTOR)),
) -> TutorProfileRead:
    """Create or update the current tutor's profile."""
    profile = await service.update_own_profile(current_user, payload)
    return TutorProfileRead.model_validate(profile)


@router.get("/{tutor_id}", response_model=TutorRead)
async def get_tutor(
    tutor_id: UUID,
    service: TutorsService = Depends(get_tutors_service),
) -> TutorRead:
    """Public tutor details."""
    tutor, profile = await service.get_tutor(tutor_id)
    return TutorRead(
        id=tutor.id,
        name=tutor.name,
        email=tutor.email,
        phone_number=tutor.phone_number,
        profile=TutorProfileRead.model_validate(profile) if profile is not None else None,
    )
