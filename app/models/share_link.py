"""
Share link model

Public links to a job: an application form (application) or a read-only
pipeline view for the client (client_view).
"""
from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import EmailStr, field_validator
from sqlmodel import Field

from app.services.salary import coerce_currency
from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class LinkType(str, Enum):
    APPLICATION = "application"
    CLIENT_VIEW = "client_view"


class ShareLink(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "share_links"

    job_id: str = Field(..., foreign_key="jobs.id", ondelete="CASCADE", max_length=36, index=True)
    link_type: str = Field(default=LinkType.APPLICATION.value, max_length=20)
    token: str = Field(..., max_length=64, unique=True, index=True)
    password_hash: Optional[str] = Field(None, max_length=64)
    expires_at: Optional[datetime] = None
    max_submissions: Optional[int] = None
    submissions_count: int = Field(default=0)
    active: bool = Field(default=True)
    deleted: bool = Field(default=False)
    created_by: Optional[str] = Field(None, max_length=36)


class ShareLinkCreate(SQLModelBase):
    link_type: LinkType = LinkType.APPLICATION
    password: Optional[str] = Field(None, min_length=4, max_length=100)
    expires_at: Optional[datetime] = None
    max_submissions: Optional[int] = Field(None, ge=1)


class ShareLinkResponse(TimestampResponse):
    job_id: str
    link_type: str
    token: str
    expires_at: Optional[datetime]
    max_submissions: Optional[int]
    submissions_count: int
    active: bool
    has_password: bool = False
    url: str = ""


class PublicApplication(SQLModelBase):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    salary_expectation: Optional[float] = Field(None, ge=0)
    password: Optional[str] = None

    @field_validator("salary_expectation", mode="before")
    @classmethod
    def salary_text(cls, v):
        return coerce_currency(v)
