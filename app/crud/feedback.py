"""
Feedback CRUD
"""
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.feedback import Feedback, FeedbackRequest
from .base import CRUDBase


class CRUDFeedbackRequest(CRUDBase[FeedbackRequest]):

    async def get_by_token(self, db: AsyncSession, token: str) -> Optional[FeedbackRequest]:
        result = await db.execute(
            select(self.model).where(self.model.token == token)
        )
        return result.scalar_one_or_none()


class CRUDFeedback(CRUDBase[Feedback]):

    async def list_for_candidate(self, db: AsyncSession, candidate_id: str) -> List[Feedback]:
        return await self.get_multi(
            db,
            limit=500,
            conditions=[self.model.candidate_id == candidate_id],
        )


feedback_request_crud = CRUDFeedbackRequest(FeedbackRequest)
feedback_crud = CRUDFeedback(Feedback)
