"""
Audit API

Admin-only access to the hash-chained audit log
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.database import get_db
from app.core.response import success_response, paged_response, ResponseModel, PagedResponseModel
from app.core.timeutils import utc_now
from app.models.audit import AuditEventResponse, AuditVerifyRequest, AuditVerifyResult
from app.models.user import User
from app.services.audit import search_events, export_csv, verify_chain

router = APIRouter()


@router.get("/events", summary="Search audit events", response_model=PagedResponseModel[AuditEventResponse])
async def get_audit_events(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    actor_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Newest first"""
    events, total = await search_events(
        db,
        skip=(page - 1) * page_size,
        limit=page_size,
        action=action,
        resource_type=resource_type,
        actor_id=actor_id,
        start=start,
        end=end,
    )
    items = [AuditEventResponse.model_validate(e).model_dump() for e in events]
    return paged_response(items, total, page, page_size)


@router.get("/events/export", summary="Export audit events as CSV")
async def export_audit_events(
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    actor_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    content = await export_csv(
        db,
        action=action,
        resource_type=resource_type,
        actor_id=actor_id,
        start=start,
        end=end,
    )
    filename = f"audit-{utc_now().strftime('%Y%m%d-%H%M%S')}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/verify", summary="Verify the audit hash chain", response_model=ResponseModel[AuditVerifyResult])
async def verify_audit_chain(
    data: Optional[AuditVerifyRequest] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Recompute hashes for the events in the window

    Without a body the last few days are checked.
    """
    data = data or AuditVerifyRequest()
    result = await verify_chain(db, start=data.start, end=data.end)
    message = "Audit chain intact" if result["is_valid"] else "Audit chain broken"
    return success_response(data=AuditVerifyResult(**result).model_dump(), message=message)
