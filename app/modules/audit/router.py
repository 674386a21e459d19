"""Audit API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.modules.audit.schemas import AuditEntryRead
from app.modules.audit.service import AuditService, get_audit_service
from app.modules.identity.service import get_current_user
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("/logs", response_model=Page[AuditEntryRead])
async def list_logs(
    entity_type: str | None = Query(default=None, max_length=64),
    entity_id: str | None = Query(default=None, max_length=64),
    pagination=Depends(get_pagination_params),
    service: AuditService = Depends(get_audit_service),
    current_user=Depends(get_current_user),
) -> Page[AuditEntryRead]:
    """List lifecycle audit entries, optionally for one entity."""
    items, total = await service.list_logs(
        current_user,
        entity_type=entity_type,
        entity_id=entity_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    serialized = [AuditEntryRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
