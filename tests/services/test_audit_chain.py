"""
Audit hash chain: canonical hashing and verification of a stored chain
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditEvent
from app.services.audit import (
    GENESIS_HASH,
    append_event,
    compute_hash,
    export_csv,
    log_audit_event,
    search_events,
    verify_chain,
    verify_events,
)


def _event(sequence: int, prev_hash: str, **overrides) -> AuditEvent:
    event = AuditEvent(
        id=f"e{sequence}",
        sequence=sequence,
        timestamp_utc=datetime(2024, 5, 1, 12, sequence, tzinfo=timezone.utc),
        actor_id="u1",
        actor_type="user",
        actor_display_name="Ana",
        action="JOB_CREATE",
        resource_type="job",
        resource_id="j1",
        payload={"title": "Dev"},
        prev_hash=prev_hash,
        hash="",
        **overrides
    )
    event.hash = compute_hash(event)
    return event


def _chain(length: int) -> list:
    events = []
    prev = GENESIS_HASH
    for i in range(1, length + 1):
        event = _event(i, prev)
        events.append(event)
        prev = event.hash
    return events


def test_hash_is_stable_and_hex():
    event = _event(1, GENESIS_HASH)
    assert compute_hash(event) == event.hash
    assert len(event.hash) == 64
    int(event.hash, 16)


def test_hash_ignores_naive_vs_aware_timestamp():
    aware = _event(1, GENESIS_HASH)
    naive = _event(1, GENESIS_HASH)
    naive.timestamp_utc = naive.timestamp_utc.replace(tzinfo=None)
    assert compute_hash(naive) == aware.hash


def test_intact_chain_verifies():
    assert verify_events(_chain(4), GENESIS_HASH) == []


def test_tampered_payload_is_reported():
    events = _chain(4)
    events[1].payload = {"title": "Changed"}
    assert verify_events(events, GENESIS_HASH) == ["e2"]


def test_removed_event_breaks_next_link():
    events = _chain(4)
    del events[1]
    assert verify_events(events, GENESIS_HASH) == ["e3"]


def test_wrong_anchor_is_reported():
    events = _chain(2)
    assert verify_events(events[1:], GENESIS_HASH) == ["e2"]
    assert verify_events(events[1:], events[0].hash) == []


@pytest.mark.asyncio
async def test_stored_chain_round_trip(db_session: AsyncSession):
    first = await append_event(db_session, action="JOB_CREATE", resource_type="job", resource_id="j1")
    assert await log_audit_event(
        db_session, action="JOB_UPDATE", resource_type="job", resource_id="j1", payload={"n": 1}
    )
    await db_session.commit()

    events, total = await search_events(db_session, resource_type="job")
    assert total == 2
    assert [e.sequence for e in events] == [2, 1]
    assert first.prev_hash == GENESIS_HASH
    assert events[0].prev_hash == first.hash
    assert events[0].actor_id == "anonymous"
    assert events[0].actor_type == "anonymous"

    result = await verify_chain(db_session)
    assert result == {"is_valid": True, "total_events": 2, "invalid_count": 0, "invalid_event_ids": []}

    events[0].payload = {"n": 2}
    await db_session.commit()
    result = await verify_chain(db_session)
    assert result["is_valid"] is False
    assert result["invalid_event_ids"] == [events[0].id]


@pytest.mark.asyncio
async def test_export_csv(db_session: AsyncSession):
    await append_event(db_session, action="JOB_CREATE", resource_type="job", payload={"title": "Ação"})
    await append_event(db_session, action="CANDIDATE_VIEW", resource_type="candidate")
    await db_session.commit()

    content = await export_csv(db_session, action="JOB_CREATE")
    lines = content.strip().splitlines()
    assert lines[0].startswith("sequence,timestamp_utc,actor_id")
    assert len(lines) == 2
    assert "Ação" in lines[1]
