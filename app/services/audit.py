"""
Audit log with hash chain

Every event stores the SHA-256 of its own canonical content plus the hash of
the event before it, so editing or removing a row breaks every later link.
"""
import csv
import hashlib
import io
import json
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional

from fastapi import Request
from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.timeutils import utc_now, as_utc
from app.models.audit import AuditEvent, ActorType
from app.models.user import User

GENESIS_HASH = "0" * 64

CSV_COLUMNS = [
    "sequence",
    "timestamp_utc",
    "actor_id",
    "actor_type",
    "actor_display_name",
    "action",
    "resource_type",
    "resource_id",
    "resource_path",
    "correlation_id",
    "client_ip",
    "payload",
    "hash",
]


def _json_safe(payload: Optional[dict]) -> dict:
    return json.loads(json.dumps(payload or {}, default=str))


def canonical_content(event: AuditEvent) -> dict:
    return {
        "sequence": event.sequence,
        "timestamp_utc": as_utc(event.timestamp_utc).isoformat(),
        "actor": {
            "id": event.actor_id,
            "type": event.actor_type,
            "display_name": event.actor_display_name,
        },
        "action": event.action,
        "resource": {
            "type": event.resource_type,
            "id": event.resource_id,
            "path": event.resource_path,
        },
        "payload": event.payload or {},
        "correlation_id": event.correlation_id,
        "client": {
            "ip": event.client_ip,
            "user_agent": event.client_user_agent,
        },
        "prev_hash": event.prev_hash,
    }


def compute_hash(event: AuditEvent) -> str:
    raw = json.dumps(
        canonical_content(event),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def describe_actor(user: Optional[User]) -> dict:
    if user is None:
        return {"id": "anonymous", "type": ActorType.ANONYMOUS.value, "display_name": "Anonymous User"}
    return {
        "id": user.id,
        "type": ActorType.USER.value,
        "display_name": user.full_name or user.email,
    }


def client_info(request: Optional[Request]) -> dict:
    if request is None:
        return {"ip": None, "user_agent": None}
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.headers.get("x-real-ip") or (request.client.host if request.client else None)
    return {"ip": ip, "user_agent": request.headers.get("user-agent")}


async def _chain_head(db: AsyncSession) -> tuple:
    result = await db.execute(
        select(AuditEvent.sequence, AuditEvent.hash)
        .order_by(AuditEvent.sequence.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return 0, GENESIS_HASH
    return row[0], row[1]


async def append_event(
    db: AsyncSession,
    *,
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    resource_path: Optional[str] = None,
    payload: Optional[dict] = None,
    actor: Optional[User] = None,
    request: Optional[Request] = None,
    correlation_id: Optional[str] = None,
) -> AuditEvent:
    """Link a new event to the head of the chain; raises on failure"""
    last_sequence, prev_hash = await _chain_head(db)
    who = describe_actor(actor)
    client = client_info(request)

    event = AuditEvent(
        sequence=last_sequence + 1,
        timestamp_utc=utc_now(),
        actor_id=who["id"],
        actor_type=who["type"],
        actor_display_name=who["display_name"],
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        resource_path=resource_path,
        payload=_json_safe(payload),
        correlation_id=correlation_id,
        client_ip=client["ip"],
        client_user_agent=client["user_agent"],
        prev_hash=prev_hash,
        hash="",
    )
    event.hash = compute_hash(event)
    db.add(event)
    await db.flush()
    return event


async def log_audit_event(db: AsyncSession, **kwargs: Any) -> bool:
    """
    Best-effort audit write

    Runs in a savepoint so a failed insert leaves the caller's transaction
    untouched. Returns False instead of raising.
    """
    try:
        async with db.begin_nested():
            await append_event(db, **kwargs)
        return True
    except Exception as e:
        logger.warning(f"Failed to log audit event {kwargs.get('action')}: {e}")
        return False


# ==================== Verification ====================

def verify_events(events: Iterable[AuditEvent], expected_prev: str) -> List[str]:
    """Ids of events whose hash or link does not check out, in order"""
    invalid = []
    previous_hash = expected_prev
    previous_sequence = None
    for event in events:
        broken = (
            event.prev_hash != previous_hash
            or compute_hash(event) != event.hash
            or (previous_sequence is not None and event.sequence <= previous_sequence)
        )
        if broken:
            invalid.append(event.id)
        previous_hash = event.hash
        previous_sequence = event.sequence
    return invalid


async def verify_chain(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> dict:
    """Check every event stamped within [start, end]; defaults to the last few days"""
    end = as_utc(end) or utc_now()
    start = as_utc(start) or end - timedelta(days=settings.audit_verify_default_days)

    result = await db.execute(
        select(AuditEvent)
        .where(AuditEvent.timestamp_utc >= start, AuditEvent.timestamp_utc <= end)
        .order_by(AuditEvent.sequence)
    )
    events = list(result.scalars().all())

    expected_prev = GENESIS_HASH
    if events:
        prev = await db.execute(
            select(AuditEvent.hash)
            .where(AuditEvent.sequence < events[0].sequence)
            .order_by(AuditEvent.sequence.desc())
            .limit(1)
        )
        expected_prev = prev.scalar_one_or_none() or GENESIS_HASH

    invalid = verify_events(events, expected_prev)
    is_valid = not invalid
    if is_valid:
        logger.info(f"Audit chain verified: {len(events)} events")
    else:
        logger.warning(f"Audit chain broken: {len(invalid)} of {len(events)} events invalid")

    return {
        "is_valid": is_valid,
        "total_events": len(events),
        "invalid_count": len(invalid),
        "invalid_event_ids": invalid,
    }


# ==================== Queries ====================

def _filters(
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    actor_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list:
    conditions = []
    if action:
        conditions.append(AuditEvent.action == action)
    if resource_type:
        conditions.append(AuditEvent.resource_type == resource_type)
    if actor_id:
        conditions.append(AuditEvent.actor_id == actor_id)
    if start:
        conditions.append(AuditEvent.timestamp_utc >= as_utc(start))
    if end:
        conditions.append(AuditEvent.timestamp_utc <= as_utc(end))
    return conditions


async def search_events(
    db: AsyncSession,
    *,
    skip: int = 0,
    limit: int = 50,
    **filters: Any,
) -> tuple:
    conditions = _filters(**filters)
    total = await db.execute(select(func.count()).select_from(AuditEvent).where(*conditions))
    result = await db.execute(
        select(AuditEvent)
        .where(*conditions)
        .order_by(AuditEvent.sequence.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total.scalar() or 0


async def export_csv(db: AsyncSession, **filters: Any) -> str:
    result = await db.execute(
        select(AuditEvent).where(*_filters(**filters)).order_by(AuditEvent.sequence)
    )
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for event in result.scalars().all():
        writer.writerow([
            event.sequence,
            as_utc(event.timestamp_utc).isoformat(),
            event.actor_id,
            event.actor_type,
            event.actor_display_name,
            event.action,
            event.resource_type,
            event.resource_id,
            event.resource_path,
            event.correlation_id,
            event.client_ip,
            json.dumps(event.payload or {}, ensure_ascii=False),
            event.hash,
        ])
    return buffer.getvalue()
