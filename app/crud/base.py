"""
CRUD base class

Works on SQLModel objects directly; no model_dump() round trips
"""
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.core.timeutils import utc_now

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=SQLModel)


class CRUDBase(Generic[ModelType]):
    """
    Generic CRUD operations

    Soft-deletable models (those with deleted_at) hide deleted rows from
    get_multi/count unless include_deleted is set; get() always sees them.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    @property
    def soft_deletable(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _visible(self, conditions: Sequence, include_deleted: bool) -> list:
        conditions = list(conditions)
        if self.soft_deletable and not include_deleted:
            conditions.append(self.model.deleted_at.is_(None))
        return conditions

    async def get(self, db: AsyncSession, id: str) -> Optional[ModelType]:
        result = await db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_active(self, db: AsyncSession, id: str) -> Optional[ModelType]:
        """Like get(), but a soft-deleted row counts as missing"""
        obj = await self.get(db, id)
        if obj is not None and self.soft_deletable and obj.is_deleted:
            return None
        return obj

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        order_by: Any = None,
        conditions: Sequence = (),
        include_deleted: bool = False,
    ) -> List[ModelType]:
        query = select(self.model).where(*self._visible(conditions, include_deleted))
        if order_by is not None:
            query = query.order_by(order_by)
        else:
            query = query.order_by(self.model.created_at.desc())
        query = query.offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        *,
        conditions: Sequence = (),
        include_deleted: bool = False,
    ) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(self.model)
            .where(*self._visible(conditions, include_deleted))
        )
        return result.scalar() or 0

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: CreateSchemaType | Dict[str, Any]
    ) -> ModelType:
        if isinstance(obj_in, dict):
            db_obj = self.model(**obj_in)
        else:
            db_obj = self.model.model_validate(obj_in)

        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        Apply the given fields

        A dict is applied as is (None clears a column); a schema only
        contributes the non-null fields the client actually sent.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)

        for field, value in update_data.items():
            setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utc_now()

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: str) -> bool:
        obj = await self.get(db, id)
        if obj:
            await db.delete(obj)
            await db.flush()
            return True
        return False
