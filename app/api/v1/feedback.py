"""
Feedback API

Recruiters create one-off feedback links for a client; internal notes are
kept per candidate. The public side of the link lives in public.py.
"""
import uuid
from datetime import timedelta
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
from app.api.v1.deletions import soft_delete_resource
from app.core.config import settings
from app.core.database import get_db
from app.core.response import success_response, ResponseModel, DictResponse
from app.core.exceptions import NotFoundException
from app.core.timeutils import utc_now
from app.crud import feedback_request_crud, feedback_crud, candidate_crud, job_crud
from app.models.feedback import (
    FeedbackKind,
    FeedbackRequestCreate,
    FeedbackRequestLink,
    InternalFeedbackCreate,
    FeedbackResponse,
)
from app.models.user import User
from app.services.audit import log_audit_event

router = APIRouter()


def feedback_link(token: str) -> str:
    return f"{settings.public_base_url}/feedback/{token}"


@router.post("/feedback-requests", summary="Create a client feedback link", response_model=ResponseModel[FeedbackRequestLink])
async def create_feedback_request(
    data: FeedbackRequestCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    job = await job_crud.get_active(db, data.job_id)
    if not job:
        raise NotFoundException(f"Job not found: {data.job_id}")
    candidate = await candidate_crud.get_active(db, data.candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {data.candidate_id}")

    days = data.expires_in_days or settings.feedback_link_expiry_days
    feedback_request = await feedback_request_crud.create(db, obj_in={
        "job_id": job.id,
        "candidate_id": candidate.id,
        "token": str(uuid.uuid4()),
        "expires_at": utc_now() + timedelta(days=days),
        "allow_multiple": data.allow_multiple,
        "requested_by": user.id,
    })
    return success_response(
        data=FeedbackRequestLink(
            request_id=feedback_request.id,
            feedback_link=feedback_link(feedback_request.token),
            expires_at=feedback_request.expires_at,
        ).model_dump(),
        message="Feedback link created",
    )


@router.get("/candidates/{candidate_id}/feedbacks", summary="Candidate feedbacks", response_model=ResponseModel[list[FeedbackResponse]])
async def get_candidate_feedbacks(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await candidate_crud.get_active(db, candidate_id):
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    feedbacks = await feedback_crud.list_for_candidate(db, candidate_id)
    return success_response(data=[FeedbackResponse.model_validate(f).model_dump() for f in feedbacks])


@router.post("/candidates/{candidate_id}/feedbacks", summary="Add internal feedback", response_model=ResponseModel[FeedbackResponse])
async def create_internal_feedback(
    candidate_id: str,
    data: InternalFeedbackCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    candidate = await candidate_crud.get_active(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    job_id = data.job_id or candidate.job_id
    if data.job_id and not await job_crud.get_active(db, data.job_id):
        raise NotFoundException(f"Job not found: {data.job_id}")

    feedback = await feedback_crud.create(db, obj_in={
        "candidate_id": candidate.id,
        "job_id": job_id,
        "kind": FeedbackKind.INTERNO.value,
        "rating": data.rating,
        "comment": data.comment,
        "author_id": user.id,
    })
    await log_audit_event(
        db,
        action="FEEDBACK_CREATE",
        resource_type="feedback",
        resource_id=feedback.id,
        payload={"candidate_id": candidate.id, "kind": feedback.kind},
        actor=user,
        request=request,
    )
    return success_response(data=FeedbackResponse.model_validate(feedback).model_dump(), message="Feedback added")


@router.delete("/feedbacks/{feedback_id}", summary="Soft-delete feedback", response_model=DictResponse)
async def delete_feedback(
    feedback_id: str,
    request: Request,
    reason: str = Query(..., min_length=1, max_length=1000),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    return await soft_delete_resource(
        resource_type="feedback",
        resource_id=feedback_id,
        reason=reason,
        request=request,
        db=db,
        user=user,
    )
