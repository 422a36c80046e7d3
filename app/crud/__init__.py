"""
CRUD module

One CRUDBase subclass per table, exposed as singletons
"""
from .base import CRUDBase
from .user import user_crud
from .company import company_crud
from .job import job_crud
from .candidate import candidate_crud
from .job_event import job_event_crud
from .scorecard import scorecard_template_crud, candidate_scorecard_crud
from .feedback import feedback_request_crud, feedback_crud
from .share_link import share_link_crud
from .deletion import deletion_approval_crud, snapshot_crud
from .tag import tag_crud
from .stale_job import stage_notification_crud

__all__ = [
    "CRUDBase",
    "user_crud",
    "company_crud",
    "job_crud",
    "candidate_crud",
    "job_event_crud",
    "scorecard_template_crud",
    "candidate_scorecard_crud",
    "feedback_request_crud",
    "feedback_crud",
    "share_link_crud",
    "deletion_approval_crud",
    "snapshot_crud",
    "tag_crud",
    "stage_notification_crud",
]
