"""
Job event CRUD
"""
from app.models.job_event import JobEvent
from .base import CRUDBase


class CRUDJobEvent(CRUDBase[JobEvent]):
    pass


job_event_crud = CRUDJobEvent(JobEvent)
