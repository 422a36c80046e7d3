"""
SQLModel models

One module per entity: the table plus its request/response schemas
"""
from .base import SQLModelBase, TimestampMixin, IDMixin, SoftDeleteMixin, TimestampResponse
from .user import User, UserRole, UserCreate, UserUpdate, UserResponse
from .company import Company, CompanyCreate, CompanyUpdate, CompanyMove, CompanyResponse
from .job import (
    Job, JobCreate, JobUpdate, JobMove, JobResponse, JobListResponse,
    JobPriority, WorkModel, SalaryMode, salary_range_is_valid,
)
from .candidate import (
    Candidate, CandidateCreate, CandidateUpdate, CandidateMove,
    CandidateResponse, CandidateListResponse,
)
from .job_event import JobEvent, JobEventType, JobEventResponse
from .scorecard import (
    ScorecardTemplate, ScorecardCriterion, CandidateScorecard, ScorecardEvaluation,
    CriterionCategory, ScaleType, Recommendation, CriterionIn,
    ScorecardTemplateCreate, ScorecardTemplateUpdate, EvaluationIn, CandidateScorecardCreate,
    CriterionResponse, ScorecardTemplateResponse, EvaluationResponse,
    CandidateScorecardResponse, CriterionAverage, EvaluatorComment, CandidateScoreSummary,
)
from .feedback import (
    FeedbackRequest, Feedback, FeedbackKind, FeedbackRequestCreate,
    PublicFeedbackSubmit, InternalFeedbackCreate, FeedbackRequestLink,
    FeedbackTokenInfo, FeedbackResponse,
)
from .share_link import ShareLink, LinkType, ShareLinkCreate, ShareLinkResponse, PublicApplication
from .audit import (
    AuditEvent, AuditAction, ActorType, AuditEventResponse, AuditVerifyRequest, AuditVerifyResult,
)
from .deletion import (
    DeletionApproval, PreDeleteSnapshot, ResourceType, RiskLevel, ApprovalStatus, DeletionType,
    RestoreRequest, ApprovalCreate, ApprovalReject,
    DeletionApprovalResponse, SoftDeletedItem,
)
from .tag import (
    Tag, JobTag, CandidateTag, TagCategory, TagCreate, TagIds, TagResponse, CandidateTagResponse,
)
from .stale_job import JobStageNotification

__all__ = [
    # Base
    "SQLModelBase",
    "TimestampMixin",
    "IDMixin",
    "SoftDeleteMixin",
    "TimestampResponse",
    # User
    "User",
    "UserRole",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    # Company
    "Company",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyMove",
    "CompanyResponse",
    # Job
    "Job",
    "JobCreate",
    "JobUpdate",
    "JobMove",
    "JobResponse",
    "JobListResponse",
    "JobPriority",
    "WorkModel",
    "SalaryMode",
    "salary_range_is_valid",
    # Candidate
    "Candidate",
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateMove",
    "CandidateResponse",
    "CandidateListResponse",
    # Job events
    "JobEvent",
    "JobEventType",
    "JobEventResponse",
    # Scorecards
    "ScorecardTemplate",
    "ScorecardCriterion",
    "CandidateScorecard",
    "ScorecardEvaluation",
    "CriterionCategory",
    "ScaleType",
    "Recommendation",
    "CriterionIn",
    "ScorecardTemplateCreate",
    "ScorecardTemplateUpdate",
    "EvaluationIn",
    "CandidateScorecardCreate",
    "CriterionResponse",
    "ScorecardTemplateResponse",
    "EvaluationResponse",
    "CandidateScorecardResponse",
    "CriterionAverage",
    "EvaluatorComment",
    "CandidateScoreSummary",
    # Feedback
    "FeedbackRequest",
    "Feedback",
    "FeedbackKind",
    "FeedbackRequestCreate",
    "PublicFeedbackSubmit",
    "InternalFeedbackCreate",
    "FeedbackRequestLink",
    "FeedbackTokenInfo",
    "FeedbackResponse",
    # Share links
    "ShareLink",
    "LinkType",
    "ShareLinkCreate",
    "ShareLinkResponse",
    "PublicApplication",
    # Audit
    "AuditEvent",
    "AuditAction",
    "ActorType",
    "AuditEventResponse",
    "AuditVerifyRequest",
    "AuditVerifyResult",
    # Deletion workflow
    "DeletionApproval",
    "PreDeleteSnapshot",
    "ResourceType",
    "RiskLevel",
    "ApprovalStatus",
    "DeletionType",
    "RestoreRequest",
    "ApprovalCreate",
    "ApprovalReject",
    "DeletionApprovalResponse",
    "SoftDeletedItem",
    # Tags
    "Tag",
    "JobTag",
    "CandidateTag",
    "TagCategory",
    "TagCreate",
    "TagIds",
    "TagResponse",
    "CandidateTagResponse",
    # Stale jobs
    "JobStageNotification",
]
