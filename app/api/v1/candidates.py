"""
Candidates API (candidatos)

Candidate records, the candidate funnel board and drag-and-drop moves
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user, get_current_user
from app.api.v1.deletions import soft_delete_resource
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import NotFoundException, BadRequestException
from app.core.timeutils import utc_now
from app.crud import candidate_crud, job_crud
from app.models.candidate import (
    Candidate,
    CandidateCreate,
    CandidateUpdate,
    CandidateMove,
    CandidateResponse,
    CandidateListResponse,
)
from app.models.user import User
from app.services.audit import log_audit_event
from app.services.job_events import (
    record_candidate_added,
    record_candidate_moved,
    record_candidate_removed,
)
from app.services.pipeline import (
    CANDIDATE_STAGES,
    CANDIDATE_BOARD_STAGES,
    CANDIDATE_INITIAL_STAGE,
    get_stage,
    plan_transition,
    is_rejected_status,
    InvalidStageError,
)

router = APIRouter()


async def _get_candidate_or_404(db: AsyncSession, candidate_id: str) -> Candidate:
    candidate = await candidate_crud.get_active(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    return candidate


async def _check_job(db: AsyncSession, job_id: Optional[str]) -> None:
    if job_id and not await job_crud.get_active(db, job_id):
        raise NotFoundException(f"Job not found: {job_id}")


async def _to_response(db: AsyncSession, candidate: Candidate) -> dict:
    response = CandidateResponse.model_validate(candidate)
    if candidate.job_id:
        job = await job_crud.get(db, candidate.job_id)
        response.job_title = job.title if job else None
    return response.model_dump()


@router.get("", summary="List candidates", response_model=PagedResponseModel[CandidateListResponse])
async def get_candidates(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_slug: Optional[str] = Query(None),
    job_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Name or e-mail"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    conditions = candidate_crud.filters(status_slug=status_slug, job_id=job_id, search=search)
    candidates = await candidate_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await candidate_crud.count(db, conditions=conditions)
    items = [CandidateListResponse.model_validate(c).model_dump() for c in candidates]
    return paged_response(items, total, page, page_size)


@router.get("/board", summary="Candidate funnel board", response_model=DictResponse)
async def get_candidate_board(
    job_id: Optional[str] = Query(None),
    recruiter: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Name or e-mail"),
    db: AsyncSession = Depends(get_db),
):
    conditions = candidate_crud.filters(job_id=job_id, recruiter=recruiter, search=search)
    candidates = await candidate_crud.list_filtered(db, conditions)

    columns = []
    for stage in CANDIDATE_BOARD_STAGES:
        cards = [
            CandidateListResponse.model_validate(c).model_dump()
            for c in candidates if c.status_slug == stage.slug
        ]
        columns.append({
            "slug": stage.slug,
            "name": stage.name,
            "order": stage.order,
            "count": len(cards),
            "candidates": cards,
        })
    return success_response(data={"columns": columns})


@router.post("", summary="Create candidate", response_model=ResponseModel[CandidateResponse])
async def create_candidate(
    data: CandidateCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    stage = get_stage(CANDIDATE_STAGES, data.status_slug or CANDIDATE_INITIAL_STAGE)
    if stage is None:
        raise BadRequestException(f"Unknown stage: {data.status_slug}")
    if is_rejected_status(stage.slug):
        raise BadRequestException("New candidates cannot start in a rejected status")
    await _check_job(db, data.job_id)

    fields = data.model_dump(exclude={"status_slug"})
    fields["email"] = str(data.email).lower()
    fields.update(status=stage.name, status_slug=stage.slug, status_order=stage.order)
    candidate = await candidate_crud.create(db, obj_in=fields)

    if candidate.job_id:
        await record_candidate_added(
            db,
            job_id=candidate.job_id,
            candidate_id=candidate.id,
            candidate_name=candidate.full_name,
            actor=user,
            origin=candidate.origin,
        )
    await log_audit_event(
        db,
        action="CANDIDATE_CREATE",
        resource_type="candidate",
        resource_id=candidate.id,
        payload={"full_name": candidate.full_name, "job_id": candidate.job_id},
        actor=user,
        request=request,
    )
    return success_response(data=await _to_response(db, candidate), message="Candidate created")


@router.get("/{candidate_id}", summary="Get candidate", response_model=ResponseModel[CandidateResponse])
async def get_candidate(
    candidate_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    candidate = await _get_candidate_or_404(db, candidate_id)
    if user is not None:
        await log_audit_event(
            db,
            action="CANDIDATE_VIEW",
            resource_type="candidate",
            resource_id=candidate.id,
            actor=user,
            request=request,
        )
    return success_response(data=await _to_response(db, candidate))


@router.patch("/{candidate_id}", summary="Update candidate", response_model=ResponseModel[CandidateResponse])
async def update_candidate(
    candidate_id: str,
    data: CandidateUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Update candidate fields

    Sending job_id (null to unlink) moves the candidate between jobs and
    records the removal and the addition on each job's timeline.
    """
    candidate = await _get_candidate_or_404(db, candidate_id)

    changes = data.model_dump(exclude_unset=True)
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    old_job_id = candidate.job_id
    job_changed = "job_id" in data.model_fields_set and data.job_id != old_job_id
    if job_changed:
        await _check_job(db, data.job_id)
        changes["job_id"] = data.job_id

    candidate = await candidate_crud.update(db, db_obj=candidate, obj_in=changes)

    if job_changed:
        if old_job_id:
            await record_candidate_removed(
                db,
                job_id=old_job_id,
                candidate_id=candidate.id,
                candidate_name=candidate.full_name,
                actor=user,
            )
        if candidate.job_id:
            await record_candidate_added(
                db,
                job_id=candidate.job_id,
                candidate_id=candidate.id,
                candidate_name=candidate.full_name,
                actor=user,
                origin=candidate.origin,
            )

    await log_audit_event(
        db,
        action="CANDIDATE_UPDATE",
        resource_type="candidate",
        resource_id=candidate.id,
        payload={"fields": sorted(changes)},
        actor=user,
        request=request,
    )
    return success_response(data=await _to_response(db, candidate), message="Candidate updated")


@router.post("/{candidate_id}/move", summary="Move candidate to another status", response_model=DictResponse)
async def move_candidate(
    candidate_id: str,
    data: CandidateMove,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Drag-and-drop on the candidate board

    Rejecting a candidate requires feedback_given, which is stamped on the
    record together with who rejected and when. Leaving a rejected status
    clears those stamps.
    """
    candidate = await _get_candidate_or_404(db, candidate_id)
    try:
        transition = plan_transition(CANDIDATE_STAGES, candidate.status_slug, data.to_status)
    except InvalidStageError as e:
        raise BadRequestException(str(e))

    if transition is not None:
        changes = {
            "status": transition.target.name,
            "status_slug": transition.target.slug,
            "status_order": transition.target.order,
        }
        if is_rejected_status(transition.target.slug):
            if data.feedback_given is None:
                raise BadRequestException(
                    "Say whether feedback was already given before rejecting the candidate"
                )
            changes.update(
                rejection_feedback_given=data.feedback_given,
                rejected_at=utc_now(),
                rejected_by=user.id,
            )
        elif is_rejected_status(candidate.status_slug):
            changes.update(rejection_feedback_given=None, rejected_at=None, rejected_by=None)

        candidate = await candidate_crud.update(db, db_obj=candidate, obj_in=changes)

        if candidate.job_id:
            await record_candidate_moved(
                db,
                job_id=candidate.job_id,
                candidate_name=candidate.full_name,
                transition=transition,
                actor=user,
            )
        payload = transition.payload()
        if is_rejected_status(transition.target.slug):
            payload["feedback_given"] = data.feedback_given
        await log_audit_event(
            db,
            action="CANDIDATE_UPDATE",
            resource_type="candidate",
            resource_id=candidate.id,
            payload=payload,
            actor=user,
            request=request,
        )
        logger.info(f"Candidate {candidate.id}: {transition.description}")

    return success_response(data={
        "changed": transition is not None,
        "candidate": await _to_response(db, candidate),
    })


@router.delete("/{candidate_id}", summary="Soft-delete candidate", response_model=DictResponse)
async def delete_candidate(
    candidate_id: str,
    request: Request,
    reason: str = Query(..., min_length=1, max_length=1000),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    return await soft_delete_resource(
        resource_type="candidate",
        resource_id=candidate_id,
        reason=reason,
        request=request,
        db=db,
        user=user,
    )
