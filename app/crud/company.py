"""
Company CRUD
"""
from typing import Optional, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company
from app.models.job import Job
from .base import CRUDBase


class CRUDCompany(CRUDBase[Company]):

    async def get_by_cnpj(self, db: AsyncSession, cnpj: str) -> Optional[Company]:
        result = await db.execute(
            select(self.model).where(self.model.cnpj == cnpj)
        )
        return result.scalar_one_or_none()

    async def job_counts(self, db: AsyncSession) -> Dict[str, int]:
        """Non-deleted jobs per company id"""
        result = await db.execute(
            select(Job.company_id, func.count())
            .where(Job.company_id.is_not(None), Job.deleted_at.is_(None))
            .group_by(Job.company_id)
        )
        return {company_id: count for company_id, count in result.all()}


company_crud = CRUDCompany(Company)
