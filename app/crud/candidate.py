"""
Candidate CRUD
"""
from typing import Optional, List
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.candidate import Candidate
from .base import CRUDBase


class CRUDCandidate(CRUDBase[Candidate]):

    def filters(
        self,
        *,
        status_slug: Optional[str] = None,
        job_id: Optional[str] = None,
        recruiter: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list:
        conditions = []
        if status_slug:
            conditions.append(self.model.status_slug == status_slug)
        if job_id:
            conditions.append(self.model.job_id == job_id)
        if recruiter:
            conditions.append(self.model.recruiter == recruiter)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(self.model.full_name).like(pattern),
                func.lower(self.model.email).like(pattern),
            ))
        return conditions

    async def list_filtered(self, db: AsyncSession, conditions: list) -> List[Candidate]:
        result = await db.execute(
            select(self.model)
            .where(self.model.deleted_at.is_(None), *conditions)
            .order_by(self.model.created_at)
        )
        return list(result.scalars().all())

    async def list_for_job(self, db: AsyncSession, job_id: str) -> List[Candidate]:
        return await self.list_filtered(db, [self.model.job_id == job_id])


candidate_crud = CRUDCandidate(Candidate)
