"""
Job requisitions API tests
"""
import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event

from app.models.audit import AuditEvent
from app.models.job import Job
from app.models.job_event import JobEvent
from tests.conftest import DataFactory, auth


@pytest.mark.asyncio
async def test_job_crud_flow(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()

    # 1. Create
    job = await factory.create_job(title="Data Engineer")
    assert job["status_slug"] == "a-iniciar"
    assert job["status"] == "A iniciar"
    assert job["progress"] == 10
    assert job["salary_range"] == "R$\u00a08.000 – R$\u00a012.000"

    # 2. Read
    response = await client.get(f"/api/v1/jobs/{job['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Data Engineer"

    # 3. List with search
    response = await client.get("/api/v1/jobs", params={"search": "data"})
    assert response.json()["data"]["total"] == 1
    response = await client.get("/api/v1/jobs", params={"search": "nothing"})
    assert response.json()["data"]["total"] == 0

    # 4. Update
    response = await client.patch(
        f"/api/v1/jobs/{job['id']}",
        json={"salary_mode": "A_COMBINAR", "priority": "Alta"},
        headers=auth(user),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["priority"] == "Alta"
    assert data["salary_range"] == "A combinar"


@pytest.mark.asyncio
async def test_writes_require_a_user(client: AsyncClient):
    response = await client.post("/api/v1/jobs", json={"title": "X", "company_name": "Y"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_salary_range_is_checked(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    response = await client.post(
        "/api/v1/jobs",
        json={"title": "X", "company_name": "Y", "salary_min": 9000, "salary_max": 5000},
        headers=auth(user),
    )
    assert response.status_code == 400

    job = await factory.create_job(salary_min=5000, salary_max=8000)
    response = await client.patch(
        f"/api/v1/jobs/{job['id']}", json={"salary_min": 9000}, headers=auth(user)
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_company_is_rejected(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    response = await client.post(
        "/api/v1/jobs",
        json={"title": "X", "company_name": "Y", "company_id": "missing"},
        headers=auth(user),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_move_job_records_timeline(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()

    response = await client.post(
        f"/api/v1/jobs/{job['id']}/move", json={"to_stage": "triagem"}, headers=auth(user)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["changed"] is True
    assert data["job"]["status"] == "Triagem"
    assert data["job"]["status_order"] == 3
    assert data["job"]["progress"] == 30

    # dropping on the same column writes nothing
    response = await client.post(
        f"/api/v1/jobs/{job['id']}/move", json={"to_stage": "triagem"}, headers=auth(user)
    )
    assert response.json()["data"]["changed"] is False

    response = await client.get(f"/api/v1/jobs/{job['id']}/events")
    events = response.json()["data"]["items"]
    assert len(events) == 1
    assert events[0]["event_type"] == "ETAPA_ALTERADA"
    assert events[0]["description"] == 'Etapa alterada de "A iniciar" para "Triagem"'
    assert events[0]["actor_user_id"] == user["id"]
    assert events[0]["payload"]["new_status_slug"] == "triagem"


@pytest.mark.asyncio
async def test_move_job_to_unknown_stage(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    response = await client.post(
        f"/api/v1/jobs/{job['id']}/move", json={"to_stage": "limbo"}, headers=auth(user)
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_job_board(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    first = await factory.create_job()
    second = await factory.create_job()
    await factory.create_candidate(job_id=first["id"])
    await client.post(
        f"/api/v1/jobs/{second['id']}/move", json={"to_stage": "cancelada"}, headers=auth(user)
    )

    response = await client.get("/api/v1/jobs/board")
    columns = response.json()["data"]["columns"]
    slugs = [c["slug"] for c in columns]
    assert "cancelada" not in slugs
    assert slugs[0] == "a-iniciar"

    first_column = columns[0]
    assert first_column["count"] == 1
    assert first_column["jobs"][0]["id"] == first["id"]
    assert first_column["jobs"][0]["candidate_count"] == 1


@pytest.mark.asyncio
async def test_get_missing_job(client: AsyncClient):
    response = await client.get("/api/v1/jobs/missing")
    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_patch_clears_optional_fields(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job(salary_mode="A_COMBINAR")
    assert job["salary_range"] == "A combinar"

    response = await client.patch(
        f"/api/v1/jobs/{job['id']}",
        json={"salary_mode": None, "salary_min": None, "recruiter": None},
        headers=auth(user),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["salary_mode"] is None
    assert data["salary_min"] is None
    assert data["recruiter"] is None
    assert data["salary_range"] == "Até R$\u00a012.000"

    # an explicit null still counts when checking the merged range
    response = await client.patch(
        f"/api/v1/jobs/{job['id']}",
        json={"salary_min": 20000},
        headers=auth(user),
    )
    assert response.status_code == 400

    response = await client.patch(f"/api/v1/jobs/{job['id']}", json={"title": None}, headers=auth(user))
    assert response.status_code == 422


def _fail_insert(mapper, connection, target):
    raise RuntimeError("insert rejected")


@pytest.mark.asyncio
async def test_move_job_survives_event_and_audit_failures(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()

    event.listen(JobEvent, "before_insert", _fail_insert)
    event.listen(AuditEvent, "before_insert", _fail_insert)
    try:
        response = await client.post(
            f"/api/v1/jobs/{job['id']}/move", json={"to_stage": "discovery"}, headers=auth(user)
        )
    finally:
        event.remove(JobEvent, "before_insert", _fail_insert)
        event.remove(AuditEvent, "before_insert", _fail_insert)

    assert response.status_code == 200
    assert response.json()["data"]["changed"] is True

    response = await client.get(f"/api/v1/jobs/{job['id']}")
    assert response.json()["data"]["status_slug"] == "discovery"

    response = await client.get(f"/api/v1/jobs/{job['id']}/events")
    assert response.json()["data"]["total"] == 0


def _fail_update(mapper, connection, target):
    raise RuntimeError("update rejected")


@pytest.mark.asyncio
async def test_failed_stage_write_leaves_job_unchanged(app: FastAPI, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test"
    ) as client:
        event.listen(Job, "before_update", _fail_update)
        try:
            response = await client.post(
                f"/api/v1/jobs/{job['id']}/move", json={"to_stage": "triagem"}, headers=auth(user)
            )
        finally:
            event.remove(Job, "before_update", _fail_update)
        assert response.status_code == 500

        response = await client.get(f"/api/v1/jobs/{job['id']}")
        data = response.json()["data"]
        assert data["status_slug"] == "a-iniciar"
        assert data["status"] == "A iniciar"

        response = await client.get(f"/api/v1/jobs/{job['id']}/events")
        assert response.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_salary_accepts_currency_text(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job(salary_min="R$ 5.000", salary_max="R$ 7.500")
    assert job["salary_min"] == 5000
    assert job["salary_max"] == 7500

    response = await client.patch(
        f"/api/v1/jobs/{job['id']}", json={"salary_max": "R$ 4.000"}, headers=auth(user)
    )
    assert response.status_code == 400

    response = await client.patch(
        f"/api/v1/jobs/{job['id']}", json={"salary_max": "R$ 9.000"}, headers=auth(user)
    )
    assert response.json()["data"]["salary_range"] == "R$\u00a05.000 – R$\u00a09.000"
