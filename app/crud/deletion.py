"""
Deletion approval and snapshot CRUD
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deletion import DeletionApproval, PreDeleteSnapshot, ApprovalStatus
from .base import CRUDBase


class CRUDDeletionApproval(CRUDBase[DeletionApproval]):

    async def get_pending(
        self, db: AsyncSession, resource_type: str, resource_id: str
    ) -> Optional[DeletionApproval]:
        result = await db.execute(
            select(self.model).where(
                self.model.resource_type == resource_type,
                self.model.resource_id == resource_id,
                self.model.status == ApprovalStatus.PENDING.value,
            ).limit(1)
        )
        return result.scalar_one_or_none()


class CRUDSnapshot(CRUDBase[PreDeleteSnapshot]):
    pass


deletion_approval_crud = CRUDDeletionApproval(DeletionApproval)
snapshot_crud = CRUDSnapshot(PreDeleteSnapshot)
