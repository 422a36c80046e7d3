"""
Public API

Endpoints reached through links handed to clients and candidates; no user
header is expected here.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Header, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, DictResponse
from app.core.exceptions import BadRequestException, NotFoundException
from app.core.timeutils import utc_now
from app.crud import (
    candidate_crud,
    job_crud,
    feedback_crud,
    feedback_request_crud,
    share_link_crud,
    candidate_scorecard_crud,
)
from app.models.candidate import Candidate
from app.models.feedback import FeedbackKind, FeedbackTokenInfo, PublicFeedbackSubmit
from app.models.job import Job
from app.models.job_event import JobEventType
from app.models.share_link import LinkType, PublicApplication
from app.services.audit import log_audit_event, client_info
from app.services.feedback import resolve_token, strip_html
from app.services.job_events import record_candidate_added, record_job_event
from app.services.pipeline import (
    JOB_STAGES,
    CANDIDATE_STAGES,
    CANDIDATE_BOARD_STAGES,
    CANDIDATE_APPLIED_STAGE,
    calculate_progress,
    get_stage,
)
from app.services.salary import format_salary_range
from app.services.share_links import check_link
from app.services.tags import inherit_job_tags

router = APIRouter()

SHARE_LINK_ORIGIN = "share_link"


async def _job_or_404(db: AsyncSession, job_id: str) -> Job:
    job = await job_crud.get_active(db, job_id)
    if not job:
        raise NotFoundException("Job is no longer available")
    return job


def _job_ad(job: Job) -> dict:
    return {
        "job_id": job.id,
        "title": job.title,
        "company_name": job.company_name,
        "work_model": job.work_model,
        "salary_range": format_salary_range(job.salary_min, job.salary_max, job.salary_mode),
        "description": job.description,
    }


# ==================== Client feedback ====================

@router.get("/feedback/{token}", summary="Validate a feedback token", response_model=ResponseModel[FeedbackTokenInfo])
async def validate_feedback_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    feedback_request = await resolve_token(db, token)
    candidate = await candidate_crud.get(db, feedback_request.candidate_id)
    job = await job_crud.get(db, feedback_request.job_id)
    return success_response(data=FeedbackTokenInfo(
        request_id=feedback_request.id,
        candidate_name=candidate.full_name if candidate else "",
        job_title=job.title if job else "",
        company_name=job.company_name if job else "",
        expires_at=feedback_request.expires_at,
        allow_multiple=feedback_request.allow_multiple,
    ).model_dump())


@router.post("/feedback", summary="Submit client feedback", response_model=DictResponse)
async def submit_feedback(
    data: PublicFeedbackSubmit,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Store a client's answer

    Free text is stripped of HTML. The candidate's feedback counter is
    bumped and the answer shows up on the job timeline.
    """
    feedback_request = await resolve_token(db, data.token)
    comment = strip_html(data.comment)
    if len(comment) < 10:
        raise BadRequestException("Comment is too short (at least 10 characters)")

    client = client_info(request)
    feedback = await feedback_crud.create(db, obj_in={
        "candidate_id": feedback_request.candidate_id,
        "job_id": feedback_request.job_id,
        "request_id": feedback_request.id,
        "kind": FeedbackKind.CLIENTE.value,
        "rating": data.rating,
        "disposition": strip_html(data.disposition) or None,
        "quick_tags": [strip_html(tag) for tag in data.quick_tags],
        "comment": comment,
        "sender_name": strip_html(data.sender_name) or None,
        "sender_email": data.sender_email,
        "author_id": feedback_request.requested_by,
        "ip_address": client["ip"] or "unknown",
        "user_agent": client["user_agent"] or "unknown",
    })

    now = utc_now()
    await feedback_request_crud.update(db, db_obj=feedback_request, obj_in={"answered_at": now})

    candidate = await candidate_crud.get(db, feedback_request.candidate_id)
    if candidate is not None:
        await candidate_crud.update(db, db_obj=candidate, obj_in={
            "total_feedbacks": (candidate.total_feedbacks or 0) + 1,
            "last_feedback_at": now,
        })
        await record_job_event(
            db,
            job_id=feedback_request.job_id,
            event_type=JobEventType.FEEDBACK_ADICIONADO,
            description=f'Feedback do cliente recebido para "{candidate.full_name}" ({data.rating}/5)',
            payload={"candidate_id": candidate.id, "feedback_id": feedback.id, "rating": data.rating},
        )

    await log_audit_event(
        db,
        action="FEEDBACK_CREATE",
        resource_type="feedback",
        resource_id=feedback.id,
        payload={"request_id": feedback_request.id, "rating": data.rating, "kind": feedback.kind},
        request=request,
    )
    logger.info(f"Client feedback {feedback.id} received for request {feedback_request.id}")
    return success_response(
        data={"feedback_id": feedback.id},
        message="Feedback received. Thank you!",
        code=201,
    )


# ==================== Share links ====================

@router.get("/share/{token}", summary="Public job ad", response_model=DictResponse)
async def get_shared_job(
    token: str,
    x_link_password: Optional[str] = Header(None, alias="X-Link-Password"),
    db: AsyncSession = Depends(get_db),
):
    link = check_link(await share_link_crud.get_by_token(db, token), LinkType.APPLICATION, x_link_password)
    job = await _job_or_404(db, link.job_id)
    return success_response(data=_job_ad(job))


@router.post("/share/{token}/apply", summary="Apply through a share link", response_model=DictResponse)
async def apply_through_link(
    token: str,
    data: PublicApplication,
    db: AsyncSession = Depends(get_db),
):
    link = check_link(
        await share_link_crud.get_by_token(db, token),
        LinkType.APPLICATION,
        data.password,
        submitting=True,
    )
    job = await _job_or_404(db, link.job_id)

    stage = get_stage(CANDIDATE_STAGES, CANDIDATE_APPLIED_STAGE)
    fields = data.model_dump(exclude={"password"})
    fields.update(
        email=str(data.email).lower(),
        full_name=strip_html(data.full_name),
        job_id=job.id,
        recruiter=job.recruiter,
        origin=SHARE_LINK_ORIGIN,
        status=stage.name,
        status_slug=stage.slug,
        status_order=stage.order,
    )
    candidate = await candidate_crud.create(db, obj_in=fields)
    await share_link_crud.update(db, db_obj=link, obj_in={"submissions_count": link.submissions_count + 1})
    await inherit_job_tags(db, job_id=job.id, candidate_id=candidate.id)
    await record_candidate_added(
        db,
        job_id=job.id,
        candidate_id=candidate.id,
        candidate_name=candidate.full_name,
        origin=SHARE_LINK_ORIGIN,
    )
    logger.info(f"Application {candidate.id} received through link {link.id}")
    return success_response(
        data={"candidate_id": candidate.id, "job_id": job.id},
        message="Application received",
        code=201,
    )


@router.get("/client-view/{token}", summary="Client view of a job pipeline", response_model=DictResponse)
async def get_client_view(
    token: str,
    x_link_password: Optional[str] = Header(None, alias="X-Link-Password"),
    db: AsyncSession = Depends(get_db),
):
    link = check_link(await share_link_crud.get_by_token(db, token), LinkType.CLIENT_VIEW, x_link_password)
    job = await _job_or_404(db, link.job_id)

    candidates = await candidate_crud.list_for_job(db, job.id)
    matches = await candidate_scorecard_crud.latest_match(db, [c.id for c in candidates])

    def card(c: Candidate) -> dict:
        return {
            "id": c.id,
            "full_name": c.full_name,
            "city": c.city,
            "state": c.state,
            "status": c.status,
            "match_percentage": matches.get(c.id),
        }

    columns = [
        {
            "slug": stage.slug,
            "name": stage.name,
            "candidates": [card(c) for c in candidates if c.status_slug == stage.slug],
        }
        for stage in CANDIDATE_BOARD_STAGES
    ]
    job_data = _job_ad(job)
    job_data.update(
        status=job.status,
        status_slug=job.status_slug,
        progress=calculate_progress(JOB_STAGES, job.status_slug),
    )
    return success_response(data={
        "job": job_data,
        "columns": columns,
        "total_candidates": sum(len(column["candidates"]) for column in columns),
    })
