"""
Deletion workflow

soft delete (admin) -> approval request -> approve / reject -> execute.
Only an approved request turns a soft-deleted row into a hard delete, and
both steps keep a snapshot of the row as it was.
"""
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from fastapi import Request
from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ConflictException, NotFoundException
from app.core.timeutils import utc_now
from app.crud import (
    candidate_crud,
    job_crud,
    feedback_crud,
    share_link_crud,
    deletion_approval_crud,
    snapshot_crud,
)
from app.crud.base import CRUDBase
from app.models.candidate import Candidate
from app.models.deletion import (
    DeletionApproval,
    ApprovalStatus,
    DeletionType,
    ResourceType,
    RiskLevel,
)
from app.models.feedback import Feedback
from app.models.scorecard import CandidateScorecard
from app.models.user import User
from app.services.audit import log_audit_event

HIGH_RISK_MAX_DEPENDENCIES = 10

RISK_REASONS = {
    RiskLevel.MEDIUM.value: "Low-risk deletion",
    RiskLevel.HIGH.value: "Resource has active dependencies",
    RiskLevel.CRITICAL.value: "Resource has many active dependencies (>10)",
}


@dataclass(frozen=True)
class DeletableResource:
    crud: CRUDBase
    action_prefix: str
    display_name: Callable


RESOURCES: Dict[str, DeletableResource] = {
    ResourceType.CANDIDATE.value: DeletableResource(
        candidate_crud, "CANDIDATE", lambda obj: obj.full_name
    ),
    ResourceType.JOB.value: DeletableResource(
        job_crud, "JOB", lambda obj: obj.title
    ),
    ResourceType.FEEDBACK.value: DeletableResource(
        feedback_crud, "FEEDBACK", lambda obj: (obj.comment or "")[:50]
    ),
}


def risk_for_dependencies(count: int) -> str:
    if count == 0:
        return RiskLevel.MEDIUM.value
    if count <= HIGH_RISK_MAX_DEPENDENCIES:
        return RiskLevel.HIGH.value
    return RiskLevel.CRITICAL.value


def _resource(resource_type: str) -> DeletableResource:
    try:
        return RESOURCES[resource_type]
    except KeyError:
        raise BadRequestException(f"Unsupported resource type: {resource_type}")


async def count_dependencies(db: AsyncSession, resource_type: str, resource_id: str) -> int:
    """Active rows that would go with the resource"""
    if resource_type == ResourceType.JOB.value:
        result = await db.execute(
            select(func.count()).select_from(Candidate)
            .where(Candidate.job_id == resource_id, Candidate.deleted_at.is_(None))
        )
        return result.scalar() or 0
    if resource_type == ResourceType.CANDIDATE.value:
        scorecards = await db.execute(
            select(func.count()).select_from(CandidateScorecard)
            .where(CandidateScorecard.candidate_id == resource_id)
        )
        feedbacks = await db.execute(
            select(func.count()).select_from(Feedback)
            .where(Feedback.candidate_id == resource_id, Feedback.deleted_at.is_(None))
        )
        return (scorecards.scalar() or 0) + (feedbacks.scalar() or 0)
    return 0


async def assess_risk(db: AsyncSession, resource_type: str, resource_id: str) -> tuple:
    """(risk level, reason, dependency count)"""
    count = await count_dependencies(db, resource_type, resource_id)
    level = risk_for_dependencies(count)
    return level, RISK_REASONS[level], count


async def _take_snapshot(
    db: AsyncSession,
    resource_type: str,
    obj,
    deletion_type: DeletionType,
    correlation_id: str,
    actor: User,
) -> dict:
    data = obj.model_dump(mode="json")
    await snapshot_crud.create(db, obj_in={
        "resource_type": resource_type,
        "resource_id": obj.id,
        "deletion_type": deletion_type.value,
        "snapshot_data": data,
        "correlation_id": correlation_id,
        "created_by": actor.id,
    })
    return data


async def _ensure_no_pending(db: AsyncSession, resource_type: str, resource_id: str) -> None:
    if await deletion_approval_crud.get_pending(db, resource_type, resource_id):
        raise ConflictException("A deletion request is already pending for this resource")


# ==================== Soft delete / restore ====================

async def soft_delete(
    db: AsyncSession,
    *,
    resource_type: str,
    resource_id: str,
    reason: str,
    actor: User,
    request: Optional[Request] = None,
):
    resource = _resource(resource_type)
    obj = await resource.crud.get(db, resource_id)
    if obj is None:
        raise NotFoundException(f"{resource_type} not found: {resource_id}")
    if obj.is_deleted:
        raise ConflictException("Resource is already deleted")
    await _ensure_no_pending(db, resource_type, resource_id)

    risk_level, _, dependencies = await assess_risk(db, resource_type, resource_id)
    logger.info(f"Deletion risk for {resource_type} {resource_id}: {risk_level}")

    correlation_id = str(uuid.uuid4())
    snapshot = await _take_snapshot(db, resource_type, obj, DeletionType.SOFT, correlation_id, actor)

    obj = await resource.crud.update(db, db_obj=obj, obj_in={
        "deleted_at": utc_now(),
        "deleted_by": actor.id,
        "deleted_reason": reason,
        "deletion_type": DeletionType.SOFT.value,
    })
    if resource_type == ResourceType.JOB.value:
        await share_link_crud.retire_for_job(db, resource_id)

    await log_audit_event(
        db,
        action=f"{resource.action_prefix}_SOFT_DELETE",
        resource_type=resource_type,
        resource_id=resource_id,
        payload={
            "resource_name": resource.display_name(obj),
            "reason": reason,
            "risk_level": risk_level,
            "dependencies": dependencies,
            "recoverable": True,
            "snapshot": snapshot,
        },
        actor=actor,
        request=request,
        correlation_id=correlation_id,
    )
    logger.info(f"Soft-deleted {resource_type} {resource_id}")
    return obj


async def restore(
    db: AsyncSession,
    *,
    resource_type: str,
    resource_id: str,
    actor: User,
    request: Optional[Request] = None,
):
    resource = _resource(resource_type)
    obj = await resource.crud.get(db, resource_id)
    if obj is None:
        raise NotFoundException(f"{resource_type} not found: {resource_id}")
    if not obj.is_deleted:
        raise ConflictException("Resource is not deleted")
    await _ensure_no_pending(db, resource_type, resource_id)

    obj = await resource.crud.update(db, db_obj=obj, obj_in={
        "deleted_at": None,
        "deleted_by": None,
        "deleted_reason": None,
        "deletion_type": None,
    })
    await log_audit_event(
        db,
        action=f"{resource.action_prefix}_RESTORE",
        resource_type=resource_type,
        resource_id=resource_id,
        payload={"resource_name": resource.display_name(obj)},
        actor=actor,
        request=request,
    )
    logger.info(f"Restored {resource_type} {resource_id}")
    return obj


async def list_soft_deleted(db: AsyncSession) -> List[dict]:
    items = []
    for resource_type, resource in RESOURCES.items():
        model = resource.crud.model
        rows = await resource.crud.get_multi(
            db,
            limit=1000,
            order_by=model.deleted_at.desc(),
            conditions=[model.deleted_at.is_not(None)],
            include_deleted=True,
        )
        for obj in rows:
            items.append({
                "resource_type": resource_type,
                "resource_id": obj.id,
                "name": resource.display_name(obj),
                "deleted_at": obj.deleted_at,
                "deleted_by": obj.deleted_by,
                "deleted_reason": obj.deleted_reason,
            })
    return items


# ==================== Approvals ====================

async def request_approval(
    db: AsyncSession,
    *,
    resource_type: str,
    resource_id: str,
    reason: str,
    actor: User,
    request: Optional[Request] = None,
) -> DeletionApproval:
    resource = _resource(resource_type)
    obj = await resource.crud.get(db, resource_id)
    if obj is None:
        raise NotFoundException(f"{resource_type} not found: {resource_id}")
    if not obj.is_deleted:
        raise BadRequestException("Only soft-deleted resources can be permanently deleted")
    await _ensure_no_pending(db, resource_type, resource_id)

    risk_level, risk_reason, dependencies = await assess_risk(db, resource_type, resource_id)
    correlation_id = str(uuid.uuid4())
    name = resource.display_name(obj)

    approval = await deletion_approval_crud.create(db, obj_in={
        "resource_type": resource_type,
        "resource_id": resource_id,
        "requested_by": actor.id,
        "deletion_reason": reason,
        "risk_level": risk_level,
        "requires_mfa": risk_level == RiskLevel.CRITICAL.value,
        "correlation_id": correlation_id,
        "details": {
            "resource_name": name,
            "risk_reason": risk_reason,
            "dependencies": dependencies,
        },
    })
    await log_audit_event(
        db,
        action="DELETE_APPROVAL_REQUEST",
        resource_type=resource_type,
        resource_id=resource_id,
        payload={
            "resource_name": name,
            "reason": reason,
            "risk_level": risk_level,
            "approval_id": approval.id,
        },
        actor=actor,
        request=request,
        correlation_id=correlation_id,
    )
    return approval


async def _get_approval(db: AsyncSession, approval_id: str) -> DeletionApproval:
    approval = await deletion_approval_crud.get(db, approval_id)
    if approval is None:
        raise NotFoundException(f"Deletion request not found: {approval_id}")
    return approval


async def approve(
    db: AsyncSession,
    *,
    approval_id: str,
    actor: User,
    request: Optional[Request] = None,
) -> DeletionApproval:
    approval = await _get_approval(db, approval_id)
    if approval.status != ApprovalStatus.PENDING.value:
        raise ConflictException(f"Deletion request is already {approval.status}")

    approval = await deletion_approval_crud.update(db, db_obj=approval, obj_in={
        "status": ApprovalStatus.APPROVED.value,
        "approved_by": actor.id,
        "approved_at": utc_now(),
    })
    await log_audit_event(
        db,
        action="DELETE_APPROVAL_GRANTED",
        resource_type=approval.resource_type,
        resource_id=approval.resource_id,
        payload={"approval_id": approval.id, "risk_level": approval.risk_level},
        actor=actor,
        request=request,
        correlation_id=approval.correlation_id,
    )
    return approval


async def reject(
    db: AsyncSession,
    *,
    approval_id: str,
    rejection_reason: str,
    actor: User,
    request: Optional[Request] = None,
) -> DeletionApproval:
    if not (rejection_reason or "").strip():
        raise BadRequestException("A rejection reason is required")
    approval = await _get_approval(db, approval_id)
    if approval.status != ApprovalStatus.PENDING.value:
        raise ConflictException(f"Deletion request is already {approval.status}")

    approval = await deletion_approval_crud.update(db, db_obj=approval, obj_in={
        "status": ApprovalStatus.REJECTED.value,
        "approved_by": actor.id,
        "approved_at": utc_now(),
        "rejection_reason": rejection_reason.strip(),
    })
    await log_audit_event(
        db,
        action="DELETE_APPROVAL_REJECTED",
        resource_type=approval.resource_type,
        resource_id=approval.resource_id,
        payload={"approval_id": approval.id, "rejection_reason": approval.rejection_reason},
        actor=actor,
        request=request,
        correlation_id=approval.correlation_id,
    )
    return approval


async def execute(
    db: AsyncSession,
    *,
    approval_id: str,
    actor: User,
    request: Optional[Request] = None,
) -> DeletionApproval:
    """Hard-delete the resource of an approved request; dependent rows cascade"""
    approval = await _get_approval(db, approval_id)
    if approval.status != ApprovalStatus.APPROVED.value:
        raise ConflictException("Deletion request is not approved")
    if approval.executed_at is not None:
        raise ConflictException("Deletion request was already executed")

    resource = _resource(approval.resource_type)
    obj = await resource.crud.get(db, approval.resource_id)
    if obj is None:
        raise NotFoundException(f"{approval.resource_type} not found: {approval.resource_id}")
    if not obj.is_deleted:
        raise ConflictException("Resource was restored; request a new deletion")

    name = resource.display_name(obj)
    snapshot = await _take_snapshot(
        db, approval.resource_type, obj, DeletionType.HARD, approval.correlation_id, actor
    )
    await resource.crud.delete(db, id=obj.id)

    approval = await deletion_approval_crud.update(db, db_obj=approval, obj_in={"executed_at": utc_now()})
    await log_audit_event(
        db,
        action=f"{resource.action_prefix}_HARD_DELETE",
        resource_type=approval.resource_type,
        resource_id=approval.resource_id,
        payload={
            "resource_name": name,
            "reason": approval.deletion_reason,
            "approval_id": approval.id,
            "irreversible": True,
            "snapshot": snapshot,
        },
        actor=actor,
        request=request,
        correlation_id=approval.correlation_id,
    )
    logger.info(f"Hard-deleted {approval.resource_type} {approval.resource_id} (request {approval.id})")
    return approval
