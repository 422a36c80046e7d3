"""
Audit event model

Append-only log; every row is chained to its predecessor through prev_hash.
"""
from datetime import datetime
from typing import Optional
from enum import Enum
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, IDMixin


class AuditAction(str, Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    LOGOUT = "LOGOUT"
    ROLE_ASSIGN = "ROLE_ASSIGN"
    ROLE_REVOKE = "ROLE_REVOKE"
    ADMIN_PRIV_CHANGE = "ADMIN_PRIV_CHANGE"
    CANDIDATE_VIEW = "CANDIDATE_VIEW"
    CANDIDATE_EXPORT = "CANDIDATE_EXPORT"
    CANDIDATE_CREATE = "CANDIDATE_CREATE"
    CANDIDATE_UPDATE = "CANDIDATE_UPDATE"
    CANDIDATE_DELETE = "CANDIDATE_DELETE"
    CANDIDATE_SOFT_DELETE = "CANDIDATE_SOFT_DELETE"
    CANDIDATE_HARD_DELETE = "CANDIDATE_HARD_DELETE"
    CANDIDATE_RESTORE = "CANDIDATE_RESTORE"
    CANDIDATE_IMPORT_XLS = "CANDIDATE_IMPORT_XLS"
    FILE_DOWNLOAD = "FILE_DOWNLOAD"
    JOB_CREATE = "JOB_CREATE"
    JOB_UPDATE = "JOB_UPDATE"
    JOB_DELETE = "JOB_DELETE"
    JOB_SOFT_DELETE = "JOB_SOFT_DELETE"
    JOB_HARD_DELETE = "JOB_HARD_DELETE"
    JOB_RESTORE = "JOB_RESTORE"
    FEEDBACK_CREATE = "FEEDBACK_CREATE"
    FEEDBACK_UPDATE = "FEEDBACK_UPDATE"
    FEEDBACK_DELETE = "FEEDBACK_DELETE"
    FEEDBACK_SOFT_DELETE = "FEEDBACK_SOFT_DELETE"
    FEEDBACK_HARD_DELETE = "FEEDBACK_HARD_DELETE"
    FEEDBACK_RESTORE = "FEEDBACK_RESTORE"
    DELETE_ATTEMPT_DENIED = "DELETE_ATTEMPT_DENIED"
    DELETE_APPROVAL_REQUEST = "DELETE_APPROVAL_REQUEST"
    DELETE_APPROVAL_GRANTED = "DELETE_APPROVAL_GRANTED"
    DELETE_APPROVAL_REJECTED = "DELETE_APPROVAL_REJECTED"
    GDPR_ERASURE_REQUEST = "GDPR_ERASURE_REQUEST"
    GDPR_ERASURE_COMPLETE = "GDPR_ERASURE_COMPLETE"
    RECORD_REDACTED = "RECORD_REDACTED"


class ActorType(str, Enum):
    USER = "user"
    SYSTEM = "system"
    ANONYMOUS = "anonymous"


class AuditEvent(SQLModelBase, IDMixin, table=True):
    __tablename__ = "audit_events"

    sequence: int = Field(..., unique=True, index=True)
    timestamp_utc: datetime = Field(..., index=True)
    actor_id: Optional[str] = Field(None, max_length=36, index=True)
    actor_type: str = Field(default=ActorType.USER.value, max_length=20)
    actor_display_name: Optional[str] = Field(None, max_length=200)
    action: str = Field(..., max_length=40, index=True)
    resource_type: str = Field(..., max_length=40, index=True)
    resource_id: Optional[str] = Field(None, max_length=36, index=True)
    resource_path: Optional[str] = Field(None, max_length=500)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON))
    correlation_id: Optional[str] = Field(None, max_length=64)
    client_ip: Optional[str] = Field(None, max_length=64)
    client_user_agent: Optional[str] = None
    prev_hash: str = Field(..., max_length=64)
    hash: str = Field(..., max_length=64)


class AuditEventResponse(SQLModelBase):
    id: str
    sequence: int
    timestamp_utc: datetime
    actor_id: Optional[str]
    actor_type: str
    actor_display_name: Optional[str]
    action: str
    resource_type: str
    resource_id: Optional[str]
    resource_path: Optional[str]
    payload: dict
    correlation_id: Optional[str]
    client_ip: Optional[str]
    client_user_agent: Optional[str]
    prev_hash: str
    hash: str


class AuditVerifyRequest(SQLModelBase):
    start: Optional[datetime] = Field(None, alias="from")
    end: Optional[datetime] = Field(None, alias="to")


class AuditVerifyResult(SQLModelBase):
    is_valid: bool
    total_events: int
    invalid_count: int
    invalid_event_ids: list[str] = Field(default_factory=list)
