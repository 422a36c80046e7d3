"""
Deletion workflow models

A soft-deleted record becomes permanent only through an approved
DeletionApproval; every soft and hard delete stores a snapshot first.
"""
from datetime import datetime
from typing import Optional
from enum import Enum
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class ResourceType(str, Enum):
    CANDIDATE = "candidate"
    JOB = "job"
    FEEDBACK = "feedback"


class RiskLevel(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DeletionType(str, Enum):
    SOFT = "SOFT"
    HARD = "HARD"


# ==================== Tables ====================

class DeletionApproval(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "deletion_approvals"

    resource_type: str = Field(..., max_length=20, index=True)
    resource_id: str = Field(..., max_length=36, index=True)
    requested_by: str = Field(..., max_length=36)
    deletion_reason: str
    risk_level: str = Field(..., max_length=10)
    requires_mfa: bool = Field(default=False)
    status: str = Field(default=ApprovalStatus.PENDING.value, max_length=10, index=True)
    approved_by: Optional[str] = Field(None, max_length=36)
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    executed_at: Optional[datetime] = None
    correlation_id: str = Field(..., max_length=36)
    details: dict = Field(default_factory=dict, sa_column=Column(JSON))


class PreDeleteSnapshot(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "pre_delete_snapshots"

    resource_type: str = Field(..., max_length=20, index=True)
    resource_id: str = Field(..., max_length=36, index=True)
    deletion_type: str = Field(..., max_length=10)
    snapshot_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    correlation_id: str = Field(..., max_length=36)
    created_by: Optional[str] = Field(None, max_length=36)


# ==================== Requests ====================

class RestoreRequest(SQLModelBase):
    resource_type: ResourceType
    resource_id: str


class ApprovalCreate(SQLModelBase):
    resource_type: ResourceType
    resource_id: str
    reason: str = Field(..., min_length=1, max_length=1000)


class ApprovalReject(SQLModelBase):
    rejection_reason: str = Field(..., max_length=1000)


# ==================== Responses ====================

class DeletionApprovalResponse(TimestampResponse):
    resource_type: str
    resource_id: str
    requested_by: str
    deletion_reason: str
    risk_level: str
    requires_mfa: bool
    status: str
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    rejection_reason: Optional[str]
    executed_at: Optional[datetime]
    correlation_id: str
    details: dict


class SoftDeletedItem(SQLModelBase):
    resource_type: str
    resource_id: str
    name: str
    deleted_at: Optional[datetime]
    deleted_by: Optional[str]
    deleted_reason: Optional[str]
