"""
Stale job notification CRUD
"""
from typing import Set, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.stale_job import JobStageNotification
from .base import CRUDBase


class CRUDJobStageNotification(CRUDBase[JobStageNotification]):

    async def notified_pairs(self, db: AsyncSession) -> Set[Tuple[str, str]]:
        result = await db.execute(select(self.model.job_id, self.model.stage_slug))
        return set(result.all())


stage_notification_crud = CRUDJobStageNotification(JobStageNotification)
