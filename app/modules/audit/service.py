"""Audit journal read access."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.audit.models import AuditLog
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.shared.exceptions import AuthorizationException


class AuditService:
    """Admin view over lifecycle audit entries."""

    def __init__(self, repository: AuditRepository) -> None:
        self.repository = repository

    async def list_logs(
        self,
        actor: User,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditLog], int]:
        """List audit logs, newest first (admin only)."""
        if actor.role.name != RoleEnum.ADMIN:
            raise AuthorizationException("Only admin can view audit logs")
        return await self.repository.list_audit_logs(
            entity_type=entity_type,
            entity_id=entity_id,
            limit=limit,
            offset=offset,
        )


async def get_audit_service(session: AsyncSession = Depends(get_db_session)) -> AuditService:
    """Dependency provider for audit service."""
    return AuditService(AuditRepository(session))
