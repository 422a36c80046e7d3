"""
Job activity timeline

Event rows are a convenience log: a failed insert is logged and never
undoes the change it describes.
"""
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job_event import JobEvent, JobEventType
from app.models.user import User
from app.services.pipeline import Transition


async def record_job_event(
    db: AsyncSession,
    *,
    job_id: str,
    event_type: JobEventType,
    description: str,
    payload: Optional[dict] = None,
    actor: Optional[User] = None,
) -> bool:
    try:
        async with db.begin_nested():
            db.add(JobEvent(
                job_id=job_id,
                actor_user_id=actor.id if actor else None,
                event_type=event_type.value,
                description=description,
                payload=payload or {},
            ))
            await db.flush()
        return True
    except Exception as e:
        logger.warning(f"Failed to record {event_type.value} for job {job_id}: {e}")
        return False


async def record_stage_change(
    db: AsyncSession,
    *,
    job_id: str,
    transition: Transition,
    actor: Optional[User] = None,
) -> bool:
    return await record_job_event(
        db,
        job_id=job_id,
        event_type=JobEventType.ETAPA_ALTERADA,
        description=transition.description,
        payload=transition.payload(),
        actor=actor,
    )


async def record_candidate_moved(
    db: AsyncSession,
    *,
    job_id: str,
    candidate_name: str,
    transition: Transition,
    actor: Optional[User] = None,
) -> bool:
    payload = transition.payload()
    payload["candidate_name"] = candidate_name
    return await record_job_event(
        db,
        job_id=job_id,
        event_type=JobEventType.CANDIDATO_MOVIDO,
        description=f"{candidate_name}: {transition.description}",
        payload=payload,
        actor=actor,
    )


async def record_candidate_added(
    db: AsyncSession,
    *,
    job_id: str,
    candidate_id: str,
    candidate_name: str,
    actor: Optional[User] = None,
    origin: Optional[str] = None,
) -> bool:
    return await record_job_event(
        db,
        job_id=job_id,
        event_type=JobEventType.CANDIDATO_ADICIONADO,
        description=f'Candidato "{candidate_name}" adicionado à vaga',
        payload={"candidate_id": candidate_id, "candidate_name": candidate_name, "origin": origin},
        actor=actor,
    )


async def record_candidate_removed(
    db: AsyncSession,
    *,
    job_id: str,
    candidate_id: str,
    candidate_name: str,
    actor: Optional[User] = None,
) -> bool:
    return await record_job_event(
        db,
        job_id=job_id,
        event_type=JobEventType.CANDIDATO_REMOVIDO,
        description=f'Candidato "{candidate_name}" removido da vaga',
        payload={"candidate_id": candidate_id, "candidate_name": candidate_name},
        actor=actor,
    )
