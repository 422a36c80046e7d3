"""
Deletion workflow API

Soft-deleted records, restores and the approval requests that turn a soft
delete into a permanent one. Admin only.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin, require_user
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import ForbiddenException
from app.crud import deletion_approval_crud
from app.models.deletion import (
    DeletionApproval,
    RestoreRequest,
    ApprovalCreate,
    ApprovalReject,
    DeletionApprovalResponse,
    SoftDeletedItem,
)
from app.models.user import User
from app.services import deletion
from app.services.audit import log_audit_event

router = APIRouter()


async def soft_delete_resource(
    *,
    resource_type: str,
    resource_id: str,
    reason: str,
    request: Request,
    db: AsyncSession,
    user: User,
) -> dict:
    """
    Shared DELETE handler for jobs, candidates and feedbacks

    A refused attempt is committed to the audit log before the 403 goes out.
    """
    if not user.is_admin:
        await log_audit_event(
            db,
            action="DELETE_ATTEMPT_DENIED",
            resource_type=resource_type,
            resource_id=resource_id,
            payload={"reason": "Non-admin user attempted deletion", "attempted_by": user.email},
            actor=user,
            request=request,
        )
        await db.commit()
        raise ForbiddenException("Only admins can delete resources")

    await deletion.soft_delete(
        db,
        resource_type=resource_type,
        resource_id=resource_id,
        reason=reason,
        actor=user,
        request=request,
    )
    return success_response(
        data={"resource_type": resource_type, "resource_id": resource_id, "recoverable": True},
        message="Moved to trash; an admin can restore it or request permanent deletion",
    )


@router.get("/soft-deleted", summary="List soft-deleted records", response_model=ResponseModel[list[SoftDeletedItem]])
async def get_soft_deleted(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    items = await deletion.list_soft_deleted(db)
    return success_response(data=[SoftDeletedItem.model_validate(i).model_dump() for i in items])


@router.post("/restore", summary="Restore a soft-deleted record", response_model=DictResponse)
async def restore_resource(
    data: RestoreRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await deletion.restore(
        db,
        resource_type=data.resource_type,
        resource_id=data.resource_id,
        actor=admin,
        request=request,
    )
    return success_response(
        data={"resource_type": data.resource_type, "resource_id": data.resource_id},
        message="Record restored",
    )


@router.get("/approvals", summary="List deletion requests", response_model=PagedResponseModel[DeletionApprovalResponse])
async def get_approvals(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None, description="pending | approved | rejected"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    skip = (page - 1) * page_size
    conditions = [DeletionApproval.status == status] if status else []
    approvals = await deletion_approval_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await deletion_approval_crud.count(db, conditions=conditions)
    items = [DeletionApprovalResponse.model_validate(a).model_dump() for a in approvals]
    return paged_response(items, total, page, page_size)


@router.post("/approvals", summary="Request permanent deletion", response_model=ResponseModel[DeletionApprovalResponse])
async def create_approval(
    data: ApprovalCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if not user.is_admin:
        raise ForbiddenException("Only admins can request permanent deletion")
    approval = await deletion.request_approval(
        db,
        resource_type=data.resource_type,
        resource_id=data.resource_id,
        reason=data.reason,
        actor=user,
        request=request,
    )
    return success_response(
        data=DeletionApprovalResponse.model_validate(approval).model_dump(),
        message="Deletion request created",
    )


@router.post("/approvals/{approval_id}/approve", summary="Approve deletion request", response_model=ResponseModel[DeletionApprovalResponse])
async def approve_approval(
    approval_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    approval = await deletion.approve(db, approval_id=approval_id, actor=admin, request=request)
    return success_response(
        data=DeletionApprovalResponse.model_validate(approval).model_dump(),
        message="Deletion request approved",
    )


@router.post("/approvals/{approval_id}/reject", summary="Reject deletion request", response_model=ResponseModel[DeletionApprovalResponse])
async def reject_approval(
    approval_id: str,
    data: ApprovalReject,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    approval = await deletion.reject(
        db,
        approval_id=approval_id,
        rejection_reason=data.rejection_reason,
        actor=admin,
        request=request,
    )
    return success_response(
        data=DeletionApprovalResponse.model_validate(approval).model_dump(),
        message="Deletion request rejected",
    )


@router.post("/approvals/{approval_id}/execute", summary="Execute approved deletion", response_model=ResponseModel[DeletionApprovalResponse])
async def execute_approval(
    approval_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    approval = await deletion.execute(db, approval_id=approval_id, actor=admin, request=request)
    return success_response(
        data=DeletionApprovalResponse.model_validate(approval).model_dump(),
        message="Record permanently deleted",
    )
