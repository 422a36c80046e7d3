"""
Share link CRUD
"""
from typing import Optional, List
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timeutils import utc_now
from app.models.share_link import ShareLink
from .base import CRUDBase


class CRUDShareLink(CRUDBase[ShareLink]):

    async def get_by_token(self, db: AsyncSession, token: str) -> Optional[ShareLink]:
        result = await db.execute(
            select(self.model).where(self.model.token == token)
        )
        return result.scalar_one_or_none()

    async def list_for_job(self, db: AsyncSession, job_id: str) -> List[ShareLink]:
        result = await db.execute(
            select(self.model)
            .where(self.model.job_id == job_id, self.model.deleted.is_(False))
            .order_by(self.model.created_at.desc())
        )
        return list(result.scalars().all())

    async def retire_for_job(self, db: AsyncSession, job_id: str) -> None:
        """Deactivate and hide every link of a job"""
        await db.execute(
            update(self.model)
            .where(self.model.job_id == job_id)
            .values(active=False, deleted=True, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )


share_link_crud = CRUDShareLink(ShareLink)
