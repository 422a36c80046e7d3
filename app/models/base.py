"""
SQLModel base classes

Shared fields and mixins
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from app.core.timeutils import utc_now


class SQLModelBase(SQLModel):
    """
    Base config for every schema class
    """
    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "use_enum_values": True,
    }


class TimestampMixin(SQLModel):
    """Timestamp mixin for table models"""
    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        description="Created at"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        description="Updated at"
    )


class IDMixin(SQLModel):
    """ID mixin for table models"""
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        description="Primary key"
    )


class SoftDeleteMixin(SQLModel):
    """
    Soft-delete stamps

    A row with deleted_at set is hidden from listings until an admin either
    restores it or hard-deletes it through an approved deletion request.
    """
    deleted_at: Optional[datetime] = Field(default=None, index=True)
    deleted_by: Optional[str] = Field(default=None, max_length=36)
    deleted_reason: Optional[str] = Field(default=None)
    deletion_type: Optional[str] = Field(default=None, max_length=10)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class TimestampResponse(SQLModelBase):
    """Response base carrying id and timestamps"""
    id: str
    created_at: datetime
    updated_at: datetime
