"""
API v1 routers
"""
from . import (
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

__all__ = [
    "users",
    "companies",
    "jobs",
    "candidates",
    "scorecards",
    "feedback",
    "share_links",
    "public",
    "audit",
    "deletions",
    "reports",
    "tags",
]
