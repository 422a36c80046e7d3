"""
Reports API
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user, require_admin
from app.core.database import get_db
from app.core.response import success_response, DictResponse
from app.models.user import User
from app.services import reports

router = APIRouter()


@router.get("/overview", summary="Recruitment overview", response_model=DictResponse)
async def get_overview(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    return success_response(data=await reports.overview(db))


@router.get("/stale-jobs", summary="Open jobs stuck in one stage", response_model=DictResponse)
async def get_stale_jobs(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    items = await reports.stale_jobs(db)
    return success_response(data={"items": items, "total": len(items)})


@router.post("/stale-jobs/check", summary="Notify recruiters about stale jobs", response_model=DictResponse)
async def check_stale_jobs(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
):
    """Meant for a daily scheduler; safe to run repeatedly"""
    return success_response(data=await reports.check_stale_jobs(db))
