"""
Tags API

The tag catalogue and the tags attached to jobs and candidates
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
from app.core.database import get_db
from app.core.response import success_response, ResponseModel
from app.core.exceptions import NotFoundException, BadRequestException, ConflictException
from app.crud import tag_crud, job_crud, candidate_crud
from app.models.tag import (
    TagCategory,
    TagCreate,
    TagIds,
    TagResponse,
    CandidateTagResponse,
    MANUAL_REASON,
)
from app.models.user import User
from app.services.tags import slugify

router = APIRouter()


async def _check_tags(db: AsyncSession, tag_ids: list) -> None:
    found = {t.id for t in await tag_crud.get_many(db, tag_ids)}
    missing = [tag_id for tag_id in tag_ids if tag_id not in found]
    if missing:
        raise BadRequestException(f"Unknown tags: {', '.join(missing)}")


async def _job_or_404(db: AsyncSession, job_id: str):
    job = await job_crud.get_active(db, job_id)
    if not job:
        raise NotFoundException(f"Job not found: {job_id}")
    return job


async def _candidate_or_404(db: AsyncSession, candidate_id: str):
    candidate = await candidate_crud.get_active(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    return candidate


async def _candidate_tags(db: AsyncSession, candidate_id: str) -> list:
    return [
        CandidateTagResponse(
            id=link.id,
            tag_id=tag.id,
            label=tag.label,
            category=tag.category,
            added_by=link.added_by,
            added_reason=link.added_reason,
            added_at=link.created_at,
        ).model_dump()
        for link, tag in await tag_crud.candidate_tags(db, candidate_id)
    ]


def _tag_list(tags) -> list:
    return [TagResponse.model_validate(t).model_dump() for t in tags]


# ==================== Catalogue ====================

@router.get("/tags", summary="List active tags", response_model=ResponseModel[list[TagResponse]])
async def get_tags(
    category: Optional[TagCategory] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    tags = await tag_crud.list_active(db, category.value if category else None)
    return success_response(data=_tag_list(tags))


@router.post("/tags", summary="Create tag", response_model=ResponseModel[TagResponse])
async def create_tag(
    data: TagCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if await tag_crud.get_by_label(db, data.label, data.category):
        raise ConflictException("A tag with this label already exists in this category")
    tag = await tag_crud.create(db, obj_in={
        "label": data.label,
        "category": data.category,
        "slug": slugify(data.label),
        "created_by": user.id,
    })
    logger.info(f"Tag created: {tag.category}/{tag.slug}")
    return success_response(data=TagResponse.model_validate(tag).model_dump(), message="Tag created")


# ==================== Jobs ====================

@router.get("/jobs/{job_id}/tags", summary="Job tags", response_model=ResponseModel[list[TagResponse]])
async def get_job_tags(job_id: str, db: AsyncSession = Depends(get_db)):
    await _job_or_404(db, job_id)
    return success_response(data=_tag_list(await tag_crud.job_tags(db, job_id)))


@router.put("/jobs/{job_id}/tags", summary="Replace job tags", response_model=ResponseModel[list[TagResponse]])
async def set_job_tags(
    job_id: str,
    data: TagIds,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    await _job_or_404(db, job_id)
    await _check_tags(db, data.tag_ids)
    await tag_crud.set_job_tags(db, job_id, data.tag_ids)
    return success_response(data=_tag_list(await tag_crud.job_tags(db, job_id)))


# ==================== Candidates ====================

@router.get("/candidates/{candidate_id}/tags", summary="Candidate tags", response_model=ResponseModel[list[CandidateTagResponse]])
async def get_candidate_tags(candidate_id: str, db: AsyncSession = Depends(get_db)):
    await _candidate_or_404(db, candidate_id)
    return success_response(data=await _candidate_tags(db, candidate_id))


@router.post("/candidates/{candidate_id}/tags", summary="Tag a candidate", response_model=ResponseModel[list[CandidateTagResponse]])
async def add_candidate_tags(
    candidate_id: str,
    data: TagIds,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """Tags the candidate already has are skipped"""
    await _candidate_or_404(db, candidate_id)
    if not data.tag_ids:
        raise BadRequestException("Select at least one tag")
    await _check_tags(db, data.tag_ids)
    added = await tag_crud.add_candidate_tags(
        db, candidate_id, data.tag_ids, added_by=user.id, added_reason=MANUAL_REASON
    )
    return success_response(data=await _candidate_tags(db, candidate_id), message=f"{added} tag(s) added")


@router.delete("/candidates/{candidate_id}/tags/{tag_id}", summary="Remove a candidate tag", response_model=ResponseModel[list[CandidateTagResponse]])
async def remove_candidate_tag(
    candidate_id: str,
    tag_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    await _candidate_or_404(db, candidate_id)
    if not await tag_crud.remove_candidate_tag(db, candidate_id, tag_id):
        raise NotFoundException("Tag is not attached to this candidate")
    return success_response(data=await _candidate_tags(db, candidate_id), message="Tag removed")
