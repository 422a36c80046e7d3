"""
Tag CRUD

The tag catalogue plus the job and candidate link tables
"""
from typing import List, Optional, Sequence
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tag import Tag, JobTag, CandidateTag
from .base import CRUDBase


class CRUDTag(CRUDBase[Tag]):

    async def get_by_label(self, db: AsyncSession, label: str, category: str) -> Optional[Tag]:
        result = await db.execute(
            select(self.model).where(
                self.model.label == label,
                self.model.category == category,
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self, db: AsyncSession, category: Optional[str] = None) -> List[Tag]:
        query = select(self.model).where(self.model.active.is_(True))
        if category:
            query = query.where(self.model.category == category)
        result = await db.execute(query.order_by(self.model.category, self.model.label))
        return list(result.scalars().all())

    async def get_many(self, db: AsyncSession, tag_ids: Sequence[str]) -> List[Tag]:
        if not tag_ids:
            return []
        result = await db.execute(select(self.model).where(self.model.id.in_(tag_ids)))
        return list(result.scalars().all())

    # ========== Jobs ==========

    async def job_tags(self, db: AsyncSession, job_id: str) -> List[Tag]:
        result = await db.execute(
            select(Tag)
            .join(JobTag, JobTag.tag_id == Tag.id)
            .where(JobTag.job_id == job_id)
            .order_by(Tag.category, Tag.label)
        )
        return list(result.scalars().all())

    async def set_job_tags(self, db: AsyncSession, job_id: str, tag_ids: Sequence[str]) -> None:
        await db.execute(delete(JobTag).where(JobTag.job_id == job_id))
        db.add_all([JobTag(job_id=job_id, tag_id=tag_id) for tag_id in dict.fromkeys(tag_ids)])
        await db.flush()

    # ========== Candidates ==========

    async def candidate_tags(self, db: AsyncSession, candidate_id: str) -> list:
        """(link, tag) pairs, newest first"""
        result = await db.execute(
            select(CandidateTag, Tag)
            .join(Tag, Tag.id == CandidateTag.tag_id)
            .where(CandidateTag.candidate_id == candidate_id)
            .order_by(CandidateTag.created_at.desc())
        )
        return list(result.all())

    async def add_candidate_tags(
        self,
        db: AsyncSession,
        candidate_id: str,
        tag_ids: Sequence[str],
        *,
        added_by: Optional[str] = None,
        added_reason: Optional[str] = None,
    ) -> int:
        """Attach tags the candidate does not have yet; returns how many were added"""
        result = await db.execute(
            select(CandidateTag.tag_id).where(CandidateTag.candidate_id == candidate_id)
        )
        existing = set(result.scalars().all())
        new_ids = [tag_id for tag_id in dict.fromkeys(tag_ids) if tag_id not in existing]
        db.add_all([
            CandidateTag(
                candidate_id=candidate_id,
                tag_id=tag_id,
                added_by=added_by,
                added_reason=added_reason,
            )
            for tag_id in new_ids
        ])
        await db.flush()
        return len(new_ids)

    async def remove_candidate_tag(self, db: AsyncSession, candidate_id: str, tag_id: str) -> bool:
        result = await db.execute(
            delete(CandidateTag).where(
                CandidateTag.candidate_id == candidate_id,
                CandidateTag.tag_id == tag_id,
            )
        )
        return result.rowcount > 0


tag_crud = CRUDTag(Tag)
