"""
User CRUD
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from .base import CRUDBase


class CRUDUser(CRUDBase[User]):

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(self.model).where(self.model.email == email.lower())
        )
        return result.scalar_one_or_none()


user_crud = CRUDUser(User)
