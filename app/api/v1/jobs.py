"""
Job requisitions API (vagas)
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
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
from app.crud import job_crud, job_event_crud, company_crud
from app.models.job import (
    Job,
    JobCreate,
    JobUpdate,
    JobMove,
    JobResponse,
    JobListResponse,
    salary_range_is_valid,
)
from app.models.job_event import JobEvent, JobEventResponse
from app.models.user import User
from app.services.audit import log_audit_event
from app.services.job_events import record_stage_change
from app.services.pipeline import (
    JOB_STAGES,
    JOB_BOARD_STAGES,
    calculate_progress,
    plan_transition,
    InvalidStageError,
)
from app.services.salary import format_salary_range

router = APIRouter()

SALARY_RANGE_ERROR = "Minimum salary cannot be greater than maximum salary"


def _to_response(job: Job, candidate_count: int = 0) -> dict:
    response = JobResponse.model_validate(job)
    response.progress = calculate_progress(JOB_STAGES, job.status_slug)
    response.salary_range = format_salary_range(job.salary_min, job.salary_max, job.salary_mode)
    response.candidate_count = candidate_count
    return response.model_dump()


def _to_list_item(job: Job, candidate_count: int = 0) -> dict:
    item = JobListResponse.model_validate(job)
    item.progress = calculate_progress(JOB_STAGES, job.status_slug)
    item.candidate_count = candidate_count
    return item.model_dump()


async def _get_job_or_404(db: AsyncSession, job_id: str) -> Job:
    job = await job_crud.get_active(db, job_id)
    if not job:
        raise NotFoundException(f"Job not found: {job_id}")
    return job


@router.get("", summary="List jobs", response_model=PagedResponseModel[JobListResponse])
async def get_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_slug: Optional[str] = Query(None, description="Stage slug"),
    recruiter: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Title or client name"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    conditions = job_crud.filters(status_slug=status_slug, recruiter=recruiter, search=search)
    jobs = await job_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await job_crud.count(db, conditions=conditions)
    counts = await job_crud.candidate_counts(db, [j.id for j in jobs])
    items = [_to_list_item(j, counts.get(j.id, 0)) for j in jobs]
    return paged_response(items, total, page, page_size)


@router.get("/board", summary="Job funnel board", response_model=DictResponse)
async def get_job_board(
    recruiter: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """One column per board stage, oldest job first"""
    jobs = await job_crud.list_all(db)
    if recruiter:
        jobs = [j for j in jobs if j.recruiter == recruiter]
    counts = await job_crud.candidate_counts(db, [j.id for j in jobs])

    columns = []
    for stage in JOB_BOARD_STAGES:
        cards = [_to_list_item(j, counts.get(j.id, 0)) for j in jobs if j.status_slug == stage.slug]
        columns.append({
            "slug": stage.slug,
            "name": stage.name,
            "order": stage.order,
            "progress": calculate_progress(JOB_STAGES, stage.slug),
            "count": len(cards),
            "jobs": cards,
        })
    return success_response(data={"columns": columns})


@router.post("", summary="Create job", response_model=ResponseModel[JobResponse])
async def create_job(
    data: JobCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if not salary_range_is_valid(data.salary_min, data.salary_max):
        raise BadRequestException(SALARY_RANGE_ERROR)
    if data.company_id and not await company_crud.get(db, data.company_id):
        raise NotFoundException(f"Company not found: {data.company_id}")

    job = await job_crud.create(db, obj_in=data.model_dump())
    await log_audit_event(
        db,
        action="JOB_CREATE",
        resource_type="job",
        resource_id=job.id,
        payload={"title": job.title, "company_name": job.company_name},
        actor=user,
        request=request,
    )
    logger.info(f"Job created: {job.id} ({job.title})")
    return success_response(data=_to_response(job), message="Job created")


@router.get("/{job_id}", summary="Get job", response_model=ResponseModel[JobResponse])
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    job = await _get_job_or_404(db, job_id)
    count = await job_crud.candidate_count(db, job.id)
    return success_response(data=_to_response(job, count))


@router.patch("/{job_id}", summary="Update job", response_model=ResponseModel[JobResponse])
async def update_job(
    job_id: str,
    data: JobUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    job = await _get_job_or_404(db, job_id)

    changes = data.model_dump(exclude_unset=True)
    salary_min = changes.get("salary_min", job.salary_min)
    salary_max = changes.get("salary_max", job.salary_max)
    if not salary_range_is_valid(salary_min, salary_max):
        raise BadRequestException(SALARY_RANGE_ERROR)
    if changes.get("company_id") and not await company_crud.get(db, changes["company_id"]):
        raise NotFoundException(f"Company not found: {changes['company_id']}")

    job = await job_crud.update(db, db_obj=job, obj_in=changes)
    await log_audit_event(
        db,
        action="JOB_UPDATE",
        resource_type="job",
        resource_id=job.id,
        payload={"fields": sorted(changes)},
        actor=user,
        request=request,
    )
    count = await job_crud.candidate_count(db, job.id)
    return success_response(data=_to_response(job, count), message="Job updated")


@router.post("/{job_id}/move", summary="Move job to another stage", response_model=DictResponse)
async def move_job(
    job_id: str,
    data: JobMove,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Drag-and-drop on the job board

    Dropping a card on its own column changes nothing. Otherwise the stage
    is written, then an ETAPA_ALTERADA event and a JOB_UPDATE audit entry
    are appended on a best-effort basis.
    """
    job = await _get_job_or_404(db, job_id)
    try:
        transition = plan_transition(JOB_STAGES, job.status_slug, data.to_stage)
    except InvalidStageError as e:
        raise BadRequestException(str(e))

    if transition is not None:
        job = await job_crud.update(db, db_obj=job, obj_in={
            "status": transition.target.name,
            "status_slug": transition.target.slug,
            "status_order": transition.target.order,
            "last_status_change_at": utc_now(),
        })
        await record_stage_change(db, job_id=job.id, transition=transition, actor=user)
        await log_audit_event(
            db,
            action="JOB_UPDATE",
            resource_type="job",
            resource_id=job.id,
            payload=transition.payload(),
            actor=user,
            request=request,
        )
        logger.info(f"Job {job.id}: {transition.description}")

    count = await job_crud.candidate_count(db, job.id)
    return success_response(data={
        "changed": transition is not None,
        "job": _to_response(job, count),
    })


@router.get("/{job_id}/events", summary="Job activity timeline", response_model=PagedResponseModel[JobEventResponse])
async def get_job_events(
    job_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    await _get_job_or_404(db, job_id)
    skip = (page - 1) * page_size
    conditions = [JobEvent.job_id == job_id]
    events = await job_event_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await job_event_crud.count(db, conditions=conditions)
    items = [JobEventResponse.model_validate(e).model_dump() for e in events]
    return paged_response(items, total, page, page_size)


@router.delete("/{job_id}", summary="Soft-delete job", response_model=DictResponse)
async def delete_job(
    job_id: str,
    request: Request,
    reason: str = Query(..., min_length=1, max_length=1000),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    return await soft_delete_resource(
        resource_type="job",
        resource_id=job_id,
        reason=reason,
        request=request,
        db=db,
        user=user,
    )
