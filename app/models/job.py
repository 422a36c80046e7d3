"""
Job requisition model (vaga)

A job moves through the fixed JOB_STAGES funnel; status, status_slug and
status_order are always written together.
"""
from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import field_validator
from sqlmodel import Field

from app.core.timeutils import utc_now
from app.services.pipeline import JOB_STAGES, JOB_INITIAL_STAGE, get_stage
from app.services.salary import coerce_currency
from .base import SQLModelBase, TimestampMixin, IDMixin, SoftDeleteMixin, TimestampResponse

_INITIAL = get_stage(JOB_STAGES, JOB_INITIAL_STAGE)


class JobPriority(str, Enum):
    BAIXA = "Baixa"
    NORMAL = "Normal"
    ALTA = "Alta"
    CRITICA = "Crítica"


class WorkModel(str, Enum):
    PRESENCIAL = "Presencial"
    HIBRIDO = "Híbrido"
    REMOTO = "Remoto"


class SalaryMode(str, Enum):
    A_COMBINAR = "A_COMBINAR"


def salary_range_is_valid(salary_min: Optional[float], salary_max: Optional[float]) -> bool:
    return salary_min is None or salary_max is None or salary_min <= salary_max


# ==================== Base fields ====================

class JobBase(SQLModelBase):
    title: str = Field(..., min_length=1, max_length=200, description="Job title", index=True)
    company_id: Optional[str] = Field(
        None, foreign_key="companies.id", ondelete="SET NULL", max_length=36, description="Client company"
    )
    company_name: str = Field(..., min_length=1, max_length=200, description="Client name as shown")
    recruiter: Optional[str] = Field(None, max_length=200, index=True)
    priority: JobPriority = Field(JobPriority.NORMAL)
    work_model: Optional[WorkModel] = None
    description: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_mode: Optional[SalaryMode] = None


# ==================== Table ====================

class Job(JobBase, SoftDeleteMixin, TimestampMixin, IDMixin, table=True):
    __tablename__ = "jobs"

    priority: str = Field(default=JobPriority.NORMAL.value, max_length=20)
    work_model: Optional[str] = Field(default=None, max_length=20)
    salary_mode: Optional[str] = Field(default=None, max_length=20)

    status: str = Field(default=_INITIAL.name, max_length=60)
    status_slug: str = Field(default=_INITIAL.slug, max_length=40, index=True)
    status_order: int = Field(default=_INITIAL.order)
    # Reset on every stage move; drives stale job detection
    last_status_change_at: Optional[datetime] = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title={self.title}, status={self.status_slug})>"


# ==================== Requests ====================

class JobCreate(JobBase):
    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def salary_text(cls, v):
        return coerce_currency(v)


class JobUpdate(SQLModelBase):
    """
    Partial update

    An explicit null clears an optional field. The salary range is checked
    against the merged row.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    company_id: Optional[str] = None
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    recruiter: Optional[str] = Field(None, max_length=200)
    priority: Optional[JobPriority] = None
    work_model: Optional[WorkModel] = None
    description: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_mode: Optional[SalaryMode] = None

    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def salary_text(cls, v):
        return coerce_currency(v)

    @field_validator("title", "company_name", "priority")
    @classmethod
    def required_fields_stay_set(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v


class JobMove(SQLModelBase):
    to_stage: str = Field(..., min_length=1, description="Target stage slug")


# ==================== Responses ====================

class JobResponse(TimestampResponse):
    title: str
    company_id: Optional[str]
    company_name: str
    recruiter: Optional[str]
    priority: str
    work_model: Optional[str]
    description: Optional[str]
    salary_min: Optional[float]
    salary_max: Optional[float]
    salary_mode: Optional[str]
    status: str
    status_slug: str
    status_order: int
    last_status_change_at: Optional[datetime] = None
    progress: int = Field(0, description="Funnel progress (%)")
    salary_range: str = ""
    candidate_count: int = 0


class JobListResponse(TimestampResponse):
    title: str
    company_name: str
    recruiter: Optional[str]
    priority: str
    status: str
    status_slug: str
    progress: int = 0
    candidate_count: int = 0
