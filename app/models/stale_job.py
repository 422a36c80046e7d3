"""
Stale job notifications

One row per (job, stage) pair the recruiter was already warned about, so a
job parked in a stage is flagged once for that stage.
"""
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin


class JobStageNotification(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "job_stage_notifications"
    __table_args__ = (UniqueConstraint("job_id", "stage_slug", name="uq_job_stage_notifications_job_stage"),)

    job_id: str = Field(..., foreign_key="jobs.id", ondelete="CASCADE", max_length=36, index=True)
    stage_slug: str = Field(..., max_length=40)
    recruiter: Optional[str] = Field(None, max_length=200)
    title: str = Field(..., max_length=200)
    body: str
