"""
API routing
"""
from fastapi import APIRouter

from .v1 import (
    users,
    companies,
    jobs,
    candidates,
    scorecards,
    feedback,
    share_links,
    public,
    audit,
    deletions,
    reports,
    tags,
)

api_router = APIRouter()

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"]
)
api_router.include_router(
    companies.router,
    prefix="/companies",
    tags=["Companies"]
)
api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["Jobs"]
)
api_router.include_router(
    candidates.router,
    prefix="/candidates",
    tags=["Candidates"]
)
api_router.include_router(
    scorecards.router,
    tags=["Scorecards"]
)
api_router.include_router(
    feedback.router,
    tags=["Feedback"]
)
api_router.include_router(
    share_links.router,
    tags=["Share links"]
)
api_router.include_router(
    public.router,
    prefix="/public",
    tags=["Public"]
)
api_router.include_router(
    audit.router,
    prefix="/audit",
    tags=["Audit"]
)
api_router.include_router(
    deletions.router,
    prefix="/deletions",
    tags=["Deletions"]
)
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"]
)
api_router.include_router(
    tags.router,
    tags=["Tags"]
)
