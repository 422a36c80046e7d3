"""
Share links API

Recruiter-side management of a job's public links
"""
from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
from app.core.database import get_db
from app.core.response import success_response, ResponseModel, MessageResponse
from app.core.exceptions import NotFoundException
from app.crud import share_link_crud, job_crud
from app.models.share_link import ShareLink, ShareLinkCreate, ShareLinkResponse
from app.models.user import User
from app.services.share_links import generate_token, hash_password, share_url

router = APIRouter()


def _to_response(link: ShareLink) -> dict:
    response = ShareLinkResponse.model_validate(link)
    response.has_password = link.password_hash is not None
    response.url = share_url(link)
    return response.model_dump()


async def _get_link_or_404(db: AsyncSession, link_id: str) -> ShareLink:
    link = await share_link_crud.get(db, link_id)
    if not link or link.deleted:
        raise NotFoundException(f"Share link not found: {link_id}")
    return link


@router.post("/jobs/{job_id}/share-links", summary="Create share link", response_model=ResponseModel[ShareLinkResponse])
async def create_share_link(
    job_id: str,
    data: ShareLinkCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    job = await job_crud.get_active(db, job_id)
    if not job:
        raise NotFoundException(f"Job not found: {job_id}")

    link = await share_link_crud.create(db, obj_in={
        "job_id": job.id,
        "link_type": data.link_type,
        "token": generate_token(),
        "password_hash": hash_password(data.password) if data.password else None,
        "expires_at": data.expires_at,
        "max_submissions": data.max_submissions,
        "created_by": user.id,
    })
    logger.info(f"Share link {link.id} ({link.link_type}) created for job {job.id}")
    return success_response(data=_to_response(link), message="Share link created")


@router.get("/jobs/{job_id}/share-links", summary="List a job's share links", response_model=ResponseModel[list[ShareLinkResponse]])
async def get_share_links(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    if not await job_crud.get_active(db, job_id):
        raise NotFoundException(f"Job not found: {job_id}")
    links = await share_link_crud.list_for_job(db, job_id)
    return success_response(data=[_to_response(link) for link in links])


@router.post("/share-links/{link_id}/toggle", summary="Enable or disable a share link", response_model=ResponseModel[ShareLinkResponse])
async def toggle_share_link(
    link_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    link = await _get_link_or_404(db, link_id)
    link = await share_link_crud.update(db, db_obj=link, obj_in={"active": not link.active})
    return success_response(
        data=_to_response(link),
        message="Share link enabled" if link.active else "Share link disabled",
    )


@router.post("/share-links/{link_id}/regenerate", summary="Issue a new token", response_model=ResponseModel[ShareLinkResponse])
async def regenerate_share_link(
    link_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """The previous URL stops working immediately"""
    link = await _get_link_or_404(db, link_id)
    link = await share_link_crud.update(db, db_obj=link, obj_in={"token": generate_token()})
    return success_response(data=_to_response(link), message="Share link regenerated")


@router.delete("/share-links/{link_id}", summary="Delete share link", response_model=MessageResponse)
async def delete_share_link(
    link_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    link = await _get_link_or_404(db, link_id)
    await share_link_crud.update(db, db_obj=link, obj_in={"active": False, "deleted": True})
    return success_response(message="Share link deleted")
