"""Tuition request repository layer."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import RequestStatusEnum, RoleEnum
from app.modules.tuition_requests.models import TuitionRequest


class TuitionRequestRepository:
    """DB operations for the request ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _select(self) -> Select[tuple[TuitionRequest]]:
        return select(TuitionRequest).options(
            selectinload(TuitionRequest.student),
            selectinload(TuitionRequest.tutor),
        )

    async def create_request(
        self,
        *,
        student_id: UUID,
        tutor_id: UUID,
        subject: str,
        grade_level: str,
        preferred_days: list[str],
        preferred_time: str,
        duration_months: int,
        start_date: date,
        monthly_fee: Decimal,
        notes: str | None,
    ) -> TuitionRequest:
        request = TuitionRequest(
            student_id=student_id,
            tutor_id=tutor_id,
            subject=subject,
            grade_level=grade_level,
            preferred_days=preferred_days,
            preferred_time=preferred_time,
            duration_months=duration_months,
            start_date=start_date,
            monthly_fee=monthly_fee,
            notes=notes,
            status=RequestStatusEnum.PENDING,
        )
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request, attribute_names=["student", "tutor"])
        return request

    async def get_request_by_id(self, request_id: UUID) -> TuitionRequest | None:
        stmt = (
            self._select()
            .where(TuitionRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def transition_status(
        self,
        request: TuitionRequest,
        *,
        expected: RequestStatusEnum,
        new: RequestStatusEnum,
        responded_at: datetime,
    ) -> bool:
        """Compare-and-set the status; False when another writer got there first."""
        stmt = (
            update(TuitionRequest)
            .where(TuitionRequest.id == request.id, TuitionRequest.status == expected)
            .values(status=new, responded_at=responded_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self.session.refresh(request, attribute_names=["status", "responded_at", "updated_at"])
        return True

    async def list_requests(
        self,
        *,
        user_id: UUID,
        role_name: RoleEnum,
        status: RequestStatusEnum | None,
        limit: int | None,
        offset: int,
    ) -> tuple[list[TuitionRequest], int]:
        base_stmt = self._select()
        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(TuitionRequest.student_id == user_id)
        elif role_name == RoleEnum.TUTOR:
            base_stmt = base_stmt.where(TuitionRequest.tutor_id == user_id)
        if status is not None:
            base_stmt = base_stmt.where(TuitionRequest.status == status)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(TuitionRequest.created_at.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total
