"""Tutors ORM models."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, EntityMixin
from app.modules.identity.models import User

MIN_ABOUT_LENGTH = 10


class TutorProfile(EntityMixin, Base):
    """Teaching profile owned by exactly one tutor account."""

    __tablename__ = "tutor_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    subjects: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    experience_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    availability: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    monthly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    education: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    about: Mapped[str] = mapped_column(Text, default="", nullable=False)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0"), nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    profile_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    user: Mapped[User] = relationship()

    def check_completeness(self) -> bool:
        """A profile is complete once it can be shown to students."""
        return bool(
            self.subjects
            and self.experience_years
            and self.availability
            and self.monthly_rate
            and len(self.about or "") > MIN_ABOUT_LENGTH
        )
