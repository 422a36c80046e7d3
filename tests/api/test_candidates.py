"""
Candidates API tests
"""
import pytest
from httpx import AsyncClient

from tests.conftest import DataFactory, auth


@pytest.mark.asyncio
async def test_candidate_crud_flow(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job(title="QA Analyst")

    # 1. Create
    candidate = await factory.create_candidate(job_id=job["id"], email="Maria@Example.com")
    assert candidate["email"] == "maria@example.com"
    assert candidate["status_slug"] == "banco-talentos"
    assert candidate["status"] == "Banco de Talentos"
    assert candidate["job_title"] == "QA Analyst"

    # 2. Read
    response = await client.get(f"/api/v1/candidates/{candidate['id']}", headers=auth(user))
    assert response.status_code == 200

    # 3. List
    response = await client.get("/api/v1/candidates", params={"job_id": job["id"]})
    assert response.json()["data"]["total"] == 1
    response = await client.get("/api/v1/candidates", params={"search": "maria@"})
    assert response.json()["data"]["total"] == 1

    # 4. Update
    response = await client.patch(
        f"/api/v1/candidates/{candidate['id']}",
        json={"city": "Campinas"},
        headers=auth(user),
    )
    assert response.json()["data"]["city"] == "Campinas"

    # the job timeline saw the candidate arrive
    response = await client.get(f"/api/v1/jobs/{job['id']}/events")
    events = response.json()["data"]["items"]
    assert [e["event_type"] for e in events] == ["CANDIDATO_ADICIONADO"]


@pytest.mark.asyncio
async def test_candidate_view_is_audited(client: AsyncClient, factory: DataFactory):
    admin = await factory.create_admin()
    candidate = await factory.create_candidate()

    await client.get(f"/api/v1/candidates/{candidate['id']}", headers=auth(admin))
    await client.get(f"/api/v1/candidates/{candidate['id']}")

    response = await client.get(
        "/api/v1/audit/events", params={"action": "CANDIDATE_VIEW"}, headers=auth(admin)
    )
    items = response.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["actor_id"] == admin["id"]


@pytest.mark.asyncio
async def test_create_candidate_validation(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    base = {"full_name": "X", "email": "x@example.com"}

    response = await client.post(
        "/api/v1/candidates", json={**base, "status_slug": "reprovado-rhello"}, headers=auth(user)
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/v1/candidates", json={**base, "status_slug": "nope"}, headers=auth(user)
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/v1/candidates", json={**base, "job_id": "missing"}, headers=auth(user)
    )
    assert response.status_code == 404

    response = await client.post(
        "/api/v1/candidates", json={"full_name": "X", "email": "not-an-email"}, headers=auth(user)
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_move_candidate(client: AsyncClient, factory: DataFactory):
    job = await factory.create_job()
    candidate = await factory.create_candidate(job_id=job["id"])

    data = await factory.move_candidate(candidate["id"], "entrevista-rhello")
    assert data["changed"] is True
    assert data["candidate"]["status"] == "Entrevista rhello"
    assert data["candidate"]["status_order"] == 3

    data = await factory.move_candidate(candidate["id"], "entrevista-rhello")
    assert data["changed"] is False

    response = await client.get(f"/api/v1/jobs/{job['id']}/events")
    events = response.json()["data"]["items"]
    moved = [e for e in events if e["event_type"] == "CANDIDATO_MOVIDO"]
    assert len(moved) == 1
    assert moved[0]["payload"]["new_status_slug"] == "entrevista-rhello"


@pytest.mark.asyncio
async def test_reject_requires_feedback_flag(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    candidate = await factory.create_candidate()

    response = await client.post(
        f"/api/v1/candidates/{candidate['id']}/move",
        json={"to_status": "reprovado-rhello"},
        headers=auth(user),
    )
    assert response.status_code == 400

    data = await factory.move_candidate(candidate["id"], "reprovado-rhello", feedback_given=False)
    rejected = data["candidate"]
    assert rejected["status_slug"] == "reprovado-rhello"
    assert rejected["rejection_feedback_given"] is False
    assert rejected["rejected_at"] is not None

    # leaving the rejected status clears the stamps
    data = await factory.move_candidate(candidate["id"], "selecionado")
    assert data["candidate"]["rejection_feedback_given"] is None
    assert data["candidate"]["rejected_at"] is None


@pytest.mark.asyncio
async def test_change_candidate_job(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    old_job = await factory.create_job()
    new_job = await factory.create_job()
    candidate = await factory.create_candidate(job_id=old_job["id"])

    response = await client.patch(
        f"/api/v1/candidates/{candidate['id']}",
        json={"job_id": new_job["id"]},
        headers=auth(user),
    )
    assert response.json()["data"]["job_id"] == new_job["id"]

    response = await client.get(f"/api/v1/jobs/{old_job['id']}/events")
    assert "CANDIDATO_REMOVIDO" in [e["event_type"] for e in response.json()["data"]["items"]]
    response = await client.get(f"/api/v1/jobs/{new_job['id']}/events")
    assert "CANDIDATO_ADICIONADO" in [e["event_type"] for e in response.json()["data"]["items"]]

    # explicit null unlinks
    response = await client.patch(
        f"/api/v1/candidates/{candidate['id']}",
        json={"job_id": None},
        headers=auth(user),
    )
    assert response.json()["data"]["job_id"] is None


@pytest.mark.asyncio
async def test_candidate_board(client: AsyncClient, factory: DataFactory):
    job = await factory.create_job()
    pooled = await factory.create_candidate(job_id=job["id"])
    selected = await factory.create_candidate(job_id=job["id"])
    await factory.move_candidate(selected["id"], "selecionado")

    response = await client.get("/api/v1/candidates/board", params={"job_id": job["id"]})
    columns = response.json()["data"]["columns"]
    assert "banco-talentos" not in [c["slug"] for c in columns]
    by_slug = {c["slug"]: c for c in columns}
    assert [c["id"] for c in by_slug["selecionado"]["candidates"]] == [selected["id"]]
    assert pooled["id"] not in [c["id"] for col in columns for c in col["candidates"]]


@pytest.mark.asyncio
async def test_patch_clears_optional_fields(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    candidate = await factory.create_candidate(phone="11 99999-0000", salary_expectation=9000)

    response = await client.patch(
        f"/api/v1/candidates/{candidate['id']}",
        json={"phone": None, "salary_expectation": None},
        headers=auth(user),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["phone"] is None
    assert data["salary_expectation"] is None
    assert data["city"] == "São Paulo"

    response = await client.patch(
        f"/api/v1/candidates/{candidate['id']}", json={"email": None}, headers=auth(user)
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_salary_expectation_accepts_currency_text(client: AsyncClient, factory: DataFactory):
    candidate = await factory.create_candidate(salary_expectation="R$ 6.500")
    assert candidate["salary_expectation"] == 6500
