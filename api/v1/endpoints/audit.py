# app/api/v1/endpoints/audit.py
from fastapi import APIRouter, Depends, Query
from typing import Optional

from core.dependencies import get_audit_service
from core.permissions import Actor, require_roles
from schemas.audit import AuditLogRead
from services.audit_service import AuditService
from utils.pagination import PaginatedResponse

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[AuditLogRead])
async def list_audit_logs(
        vendor_id: Optional[str] = Query(None),
        action: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(50, ge=1, le=200),
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: AuditService = Depends(get_audit_service)
):
    """Audit trail, most recent first"""
    return await service.query(vendor_id=vendor_id, action=action, page=page, limit=limit)
