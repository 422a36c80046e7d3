"""
Tag models

Labels grouped by category, attached to jobs and to candidates. A candidate
applying through a job link inherits the job's tags.
"""
from datetime import datetime
from typing import Optional, List
from enum import Enum
from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse

MANUAL_REASON = "manual"
APPLICATION_REASON_PREFIX = "application_via_vaga:"


class TagCategory(str, Enum):
    AREA = "area"
    ROLE = "role"
    SKILL = "skill"
    SENIORITY = "seniority"
    LOCATION = "location"


# ==================== Tables ====================

class Tag(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("label", "category", name="uq_tags_label_category"),)

    label: str = Field(..., max_length=100)
    category: str = Field(..., max_length=20, index=True)
    slug: str = Field(..., max_length=120)
    active: bool = Field(default=True)
    created_by: Optional[str] = Field(None, max_length=36)


class JobTag(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "job_tags"
    __table_args__ = (UniqueConstraint("job_id", "tag_id", name="uq_job_tags_job_tag"),)

    job_id: str = Field(..., foreign_key="jobs.id", ondelete="CASCADE", max_length=36, index=True)
    tag_id: str = Field(..., foreign_key="tags.id", ondelete="CASCADE", max_length=36)


class CandidateTag(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "candidate_tags"
    __table_args__ = (UniqueConstraint("candidate_id", "tag_id", name="uq_candidate_tags_candidate_tag"),)

    candidate_id: str = Field(
        ..., foreign_key="candidates.id", ondelete="CASCADE", max_length=36, index=True
    )
    tag_id: str = Field(..., foreign_key="tags.id", ondelete="CASCADE", max_length=36)
    added_by: Optional[str] = Field(None, max_length=36)
    # "manual" or "application_via_vaga:<job id>"
    added_reason: Optional[str] = Field(None, max_length=80)


# ==================== Requests ====================

class TagCreate(SQLModelBase):
    label: str = Field(..., min_length=1, max_length=100)
    category: TagCategory


class TagIds(SQLModelBase):
    tag_ids: List[str] = Field(default_factory=list)


# ==================== Responses ====================

class TagResponse(TimestampResponse):
    label: str
    category: str
    slug: str
    active: bool


class CandidateTagResponse(SQLModelBase):
    id: str
    tag_id: str
    label: str
    category: str
    added_by: Optional[str]
    added_reason: Optional[str]
    added_at: datetime
