"""
Job requisition CRUD
"""
from typing import Optional, List, Dict
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job import Job
from app.models.candidate import Candidate
from .base import CRUDBase


class CRUDJob(CRUDBase[Job]):

    def filters(
        self,
        *,
        status_slug: Optional[str] = None,
        recruiter: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list:
        conditions = []
        if status_slug:
            conditions.append(self.model.status_slug == status_slug)
        if recruiter:
            conditions.append(self.model.recruiter == recruiter)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(self.model.title).like(pattern),
                func.lower(self.model.company_name).like(pattern),
            ))
        return conditions

    async def list_all(self, db: AsyncSession) -> List[Job]:
        """Every non-deleted job, oldest first (board and reports)"""
        result = await db.execute(
            select(self.model)
            .where(self.model.deleted_at.is_(None))
            .order_by(self.model.created_at)
        )
        return list(result.scalars().all())

    async def candidate_counts(self, db: AsyncSession, job_ids: List[str]) -> Dict[str, int]:
        if not job_ids:
            return {}
        result = await db.execute(
            select(Candidate.job_id, func.count())
            .where(Candidate.job_id.in_(job_ids), Candidate.deleted_at.is_(None))
            .group_by(Candidate.job_id)
        )
        return {job_id: count for job_id, count in result.all()}

    async def candidate_count(self, db: AsyncSession, job_id: str) -> int:
        counts = await self.candidate_counts(db, [job_id])
        return counts.get(job_id, 0)


job_crud = CRUDJob(Job)
