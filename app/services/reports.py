"""
Reporting

Dashboard overview figures and stale job detection, computed from the live
tables
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.core.timeutils import utc_now, as_utc
from app.crud import job_crud, stage_notification_crud
from app.models.candidate import Candidate
from app.models.feedback import Feedback, FeedbackKind
from app.services.pipeline import (
    JOB_STAGES,
    CANDIDATE_STAGES,
    CANDIDATE_INITIAL_STAGE,
    CANDIDATE_FINAL_SLUGS,
    CANDIDATE_REJECTED_SLUGS,
    calculate_progress,
    get_stage,
    is_open_job,
)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def business_days_between(start: Optional[DateLike], end: Optional[DateLike]) -> int:
    """Weekdays from start to end, both ends included; 0 when start is after end"""
    if start is None or end is None:
        return 0
    current = _as_date(start)
    last = _as_date(end)
    count = 0
    while current <= last:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


async def overview(db: AsyncSession, today: Optional[datetime] = None) -> dict:
    today = today or utc_now()

    jobs = await job_crud.list_all(db)
    open_jobs = [j for j in jobs if is_open_job(j.status_slug)]
    days_open = [business_days_between(as_utc(j.created_at), today) for j in open_jobs]

    jobs_per_stage = []
    for stage in JOB_STAGES:
        jobs_per_stage.append({
            "slug": stage.slug,
            "name": stage.name,
            "progress": calculate_progress(JOB_STAGES, stage.slug),
            "count": sum(1 for j in jobs if j.status_slug == stage.slug),
        })

    result = await db.execute(
        select(Candidate.status_slug, func.count())
        .where(Candidate.deleted_at.is_(None))
        .group_by(Candidate.status_slug)
    )
    per_status = dict(result.all())
    candidates_per_status = [
        {"slug": s.slug, "name": s.name, "count": per_status.get(s.slug, 0)}
        for s in CANDIDATE_STAGES
    ]
    active_candidates = sum(
        count for slug, count in per_status.items()
        if slug not in CANDIDATE_FINAL_SLUGS and slug != CANDIDATE_INITIAL_STAGE
    )

    pending_feedback = await db.execute(
        select(func.count()).select_from(Candidate).where(
            Candidate.deleted_at.is_(None),
            Candidate.status_slug.in_(CANDIDATE_REJECTED_SLUGS),
            Candidate.rejection_feedback_given.is_not(True),
        )
    )

    feedback_stats = await db.execute(
        select(func.count(), func.avg(Feedback.rating)).where(
            Feedback.deleted_at.is_(None),
            Feedback.kind == FeedbackKind.CLIENTE.value,
        )
    )
    feedback_count, avg_rating = feedback_stats.one()

    return {
        "open_jobs": len(open_jobs),
        "avg_business_days_open": round(sum(days_open) / len(days_open), 1) if days_open else 0.0,
        "jobs_per_stage": jobs_per_stage,
        "candidates_per_status": candidates_per_status,
        "active_candidates": active_candidates,
        "rejected_without_feedback": pending_feedback.scalar() or 0,
        "client_feedbacks": feedback_count or 0,
        "avg_client_rating": round(float(avg_rating), 1) if avg_rating is not None else None,
    }


# ==================== Stale jobs ====================

async def stale_jobs(db: AsyncSession, now: Optional[datetime] = None) -> list:
    """
    Open jobs whose stage has not changed for settings.stale_job_days

    Seven calendar days stand in for five business days. Longest-parked
    jobs come first.
    """
    now = now or utc_now()
    threshold = now - timedelta(days=settings.stale_job_days)
    notified = await stage_notification_crud.notified_pairs(db)

    items = []
    for job in await job_crud.list_all(db):
        if not is_open_job(job.status_slug):
            continue
        changed_at = as_utc(job.last_status_change_at or job.created_at)
        if changed_at >= threshold:
            continue
        items.append({
            "job_id": job.id,
            "title": job.title,
            "recruiter": job.recruiter,
            "status": job.status,
            "status_slug": job.status_slug,
            "last_status_change_at": changed_at,
            "days_since_change": (now - changed_at).days,
            "notified": (job.id, job.status_slug) in notified,
        })
    items.sort(key=lambda item: item["days_since_change"], reverse=True)
    return items


async def check_stale_jobs(db: AsyncSession, now: Optional[datetime] = None) -> dict:
    """
    Warn recruiters about stale jobs

    Each job is flagged at most once per stage; moving it resets the clock
    and a later stall in the new stage is flagged again. Jobs without a
    recruiter have nobody to warn and are skipped.
    """
    items = await stale_jobs(db, now)
    created = []
    for item in items:
        if item["notified"] or not item["recruiter"]:
            continue
        days = item["days_since_change"]
        stage = get_stage(JOB_STAGES, item["status_slug"])
        notification = await stage_notification_crud.create(db, obj_in={
            "job_id": item["job_id"],
            "stage_slug": item["status_slug"],
            "recruiter": item["recruiter"],
            "title": f"Vaga parada há {days} dias",
            "body": (
                f'A vaga "{item["title"]}" está há {days} dias na etapa '
                f'"{stage.name if stage else item["status_slug"]}". Verifique se há atualizações.'
            ),
        })
        item["notified"] = True
        created.append({
            "job_id": notification.job_id,
            "stage_slug": notification.stage_slug,
            "recruiter": notification.recruiter,
            "title": notification.title,
            "body": notification.body,
        })

    logger.info(f"Stale job check: {len(items)} stale, {len(created)} notification(s) created")
    return {
        "stale_jobs": len(items),
        "notifications_created": len(created),
        "notifications": created,
    }
