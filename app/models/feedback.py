"""
Feedback models

Feedback requests carry a one-off public token sent to a client; feedbacks
are either answers to such a request (cliente) or recruiter notes (interno).
"""
from datetime import datetime
from typing import Optional, List
from enum import Enum
from pydantic import EmailStr, field_validator
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, SoftDeleteMixin, TimestampResponse


class FeedbackKind(str, Enum):
    CLIENTE = "cliente"
    INTERNO = "interno"


# ==================== Tables ====================

class FeedbackRequest(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "feedback_requests"

    job_id: str = Field(..., foreign_key="jobs.id", ondelete="CASCADE", max_length=36, index=True)
    candidate_id: str = Field(
        ..., foreign_key="candidates.id", ondelete="CASCADE", max_length=36, index=True
    )
    token: str = Field(..., max_length=64, unique=True, index=True)
    expires_at: datetime
    allow_multiple: bool = Field(default=False)
    requested_by: Optional[str] = Field(None, max_length=36)
    answered_at: Optional[datetime] = None


class Feedback(SQLModelBase, SoftDeleteMixin, TimestampMixin, IDMixin, table=True):
    __tablename__ = "feedbacks"

    candidate_id: str = Field(
        ..., foreign_key="candidates.id", ondelete="CASCADE", max_length=36, index=True
    )
    job_id: Optional[str] = Field(
        None, foreign_key="jobs.id", ondelete="SET NULL", max_length=36, index=True
    )
    request_id: Optional[str] = Field(
        None, foreign_key="feedback_requests.id", ondelete="SET NULL", max_length=36
    )
    kind: str = Field(default=FeedbackKind.INTERNO.value, max_length=10)
    rating: Optional[int] = None
    disposition: Optional[str] = Field(None, max_length=100)
    quick_tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    comment: str
    sender_name: Optional[str] = Field(None, max_length=200)
    sender_email: Optional[str] = Field(None, max_length=255)
    author_id: Optional[str] = Field(None, max_length=36)
    ip_address: Optional[str] = Field(None, max_length=64)
    user_agent: Optional[str] = None


# ==================== Requests ====================

class FeedbackRequestCreate(SQLModelBase):
    job_id: str
    candidate_id: str
    allow_multiple: bool = False
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)


class PublicFeedbackSubmit(SQLModelBase):
    token: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    disposition: Optional[str] = Field(None, max_length=100)
    quick_tags: List[str] = Field(default_factory=list, max_length=10)
    comment: str = Field(..., min_length=10, max_length=2000)
    sender_name: Optional[str] = Field(None, max_length=200)
    sender_email: Optional[EmailStr] = None

    @field_validator("quick_tags")
    @classmethod
    def check_tags(cls, v):
        if any(len(tag) > 50 for tag in v):
            raise ValueError("Quick tags must have at most 50 characters")
        return v


class InternalFeedbackCreate(SQLModelBase):
    job_id: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)


# ==================== Responses ====================

class FeedbackRequestLink(SQLModelBase):
    request_id: str
    feedback_link: str
    expires_at: datetime


class FeedbackTokenInfo(SQLModelBase):
    request_id: str
    candidate_name: str
    job_title: str
    company_name: str
    expires_at: datetime
    allow_multiple: bool


class FeedbackResponse(TimestampResponse):
    candidate_id: str
    job_id: Optional[str]
    request_id: Optional[str]
    kind: str
    rating: Optional[int]
    disposition: Optional[str]
    quick_tags: List[str]
    comment: str
    sender_name: Optional[str]
    sender_email: Optional[str]
    author_id: Optional[str]
