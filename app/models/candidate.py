"""
Candidate model (candidato)

A candidate is tied to zero or one job requisition and moves through the
CANDIDATE_STAGES funnel.
"""
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, field_validator
from sqlmodel import Field

from app.services.pipeline import CANDIDATE_STAGES, CANDIDATE_INITIAL_STAGE, get_stage
from app.services.salary import coerce_currency
from .base import SQLModelBase, TimestampMixin, IDMixin, SoftDeleteMixin, TimestampResponse

_INITIAL = get_stage(CANDIDATE_STAGES, CANDIDATE_INITIAL_STAGE)


# ==================== Table ====================

class Candidate(SQLModelBase, SoftDeleteMixin, TimestampMixin, IDMixin, table=True):
    __tablename__ = "candidates"

    # ========== Identity ==========
    full_name: str = Field(..., max_length=200, index=True)
    email: str = Field(..., max_length=255, index=True)
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)

    # ========== Profile ==========
    area: Optional[str] = Field(None, max_length=50)
    level: Optional[str] = Field(None, max_length=50)
    recruiter: Optional[str] = Field(None, max_length=200, index=True)
    salary_expectation: Optional[float] = None
    origin: Optional[str] = Field(None, max_length=40)

    # ========== Pipeline ==========
    job_id: Optional[str] = Field(
        default=None, foreign_key="jobs.id", ondelete="SET NULL", max_length=36, index=True
    )
    status: str = Field(default=_INITIAL.name, max_length=60)
    status_slug: str = Field(default=_INITIAL.slug, max_length=40, index=True)
    status_order: int = Field(default=_INITIAL.order)

    # ========== Rejection ==========
    rejection_feedback_given: Optional[bool] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = Field(None, max_length=36)

    # ========== Feedback counters ==========
    total_feedbacks: int = Field(default=0)
    last_feedback_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, name={self.full_name}, status={self.status_slug})>"


# ==================== Requests ====================

class CandidateCreate(SQLModelBase):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    area: Optional[str] = Field(None, max_length=50)
    level: Optional[str] = Field(None, max_length=50)
    recruiter: Optional[str] = Field(None, max_length=200)
    salary_expectation: Optional[float] = Field(None, ge=0)
    origin: Optional[str] = Field(None, max_length=40)
    job_id: Optional[str] = None
    status_slug: Optional[str] = Field(None, description="Initial status slug; defaults to the talent pool")

    @field_validator("salary_expectation", mode="before")
    @classmethod
    def salary_text(cls, v):
        return coerce_currency(v)


class CandidateUpdate(SQLModelBase):
    """An explicit null clears an optional field; null job_id unlinks the job"""
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    area: Optional[str] = Field(None, max_length=50)
    level: Optional[str] = Field(None, max_length=50)
    recruiter: Optional[str] = Field(None, max_length=200)
    salary_expectation: Optional[float] = Field(None, ge=0)
    job_id: Optional[str] = None

    @field_validator("salary_expectation", mode="before")
    @classmethod
    def salary_text(cls, v):
        return coerce_currency(v)

    @field_validator("full_name", "email")
    @classmethod
    def required_fields_stay_set(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v


class CandidateMove(SQLModelBase):
    to_status: str = Field(..., min_length=1, description="Target status slug")
    feedback_given: Optional[bool] = Field(
        None, description="Required when moving to a rejected status"
    )


# ==================== Responses ====================

class CandidateResponse(TimestampResponse):
    full_name: str
    email: str
    phone: Optional[str]
    city: Optional[str]
    state: Optional[str]
    area: Optional[str]
    level: Optional[str]
    recruiter: Optional[str]
    salary_expectation: Optional[float]
    origin: Optional[str]
    job_id: Optional[str]
    status: str
    status_slug: str
    status_order: int
    rejection_feedback_given: Optional[bool]
    rejected_at: Optional[datetime]
    total_feedbacks: int
    last_feedback_at: Optional[datetime]
    job_title: Optional[str] = None


class CandidateListResponse(TimestampResponse):
    full_name: str
    email: str
    recruiter: Optional[str]
    job_id: Optional[str]
    status: str
    status_slug: str
