"""
Share link API tests: recruiter management and the public pages behind them
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.core.timeutils import utc_now
from tests.conftest import DataFactory, auth


async def create_link(client: AsyncClient, user: dict, job_id: str, **data) -> dict:
    response = await client.post(f"/api/v1/jobs/{job_id}/share-links", json=data, headers=auth(user))
    assert response.status_code == 200, response.text
    return response.json()["data"]


def application(**overrides) -> dict:
    return {"full_name": "Paula Souza", "email": "Paula@Example.com", "city": "Recife", "state": "PE", **overrides}


@pytest.mark.asyncio
async def test_application_link_flow(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job(title="Designer", company_name="Acme", recruiter="Ana")

    link = await create_link(client, user, job["id"])
    assert link["link_type"] == "application"
    assert link["has_password"] is False
    assert link["url"] == f"http://localhost:5173/share/{link['token']}"

    # 1. Public ad
    response = await client.get(f"/api/v1/public/share/{link['token']}")
    assert response.status_code == 200
    ad = response.json()["data"]
    assert ad["title"] == "Designer"
    assert ad["company_name"] == "Acme"
    assert "recruiter" not in ad

    # 2. Apply
    response = await client.post(f"/api/v1/public/share/{link['token']}/apply", json=application())
    assert response.status_code == 200
    candidate_id = response.json()["data"]["candidate_id"]

    response = await client.get(f"/api/v1/candidates/{candidate_id}")
    candidate = response.json()["data"]
    assert candidate["status_slug"] == "selecionado"
    assert candidate["origin"] == "share_link"
    assert candidate["email"] == "paula@example.com"
    assert candidate["job_id"] == job["id"]
    assert candidate["recruiter"] == "Ana"

    response = await client.get(f"/api/v1/jobs/{job['id']}/share-links", headers=auth(user))
    assert response.json()["data"][0]["submissions_count"] == 1

    response = await client.get(f"/api/v1/jobs/{job['id']}/events")
    assert [e["event_type"] for e in response.json()["data"]["items"]] == ["CANDIDATO_ADICIONADO"]


@pytest.mark.asyncio
async def test_password_protected_link(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    link = await create_link(client, user, job["id"], password="s3cret")
    assert link["has_password"] is True
    token = link["token"]

    response = await client.get(f"/api/v1/public/share/{token}")
    assert response.status_code == 401
    response = await client.get(f"/api/v1/public/share/{token}", headers={"X-Link-Password": "wrong"})
    assert response.status_code == 401
    response = await client.get(f"/api/v1/public/share/{token}", headers={"X-Link-Password": "s3cret"})
    assert response.status_code == 200

    response = await client.post(f"/api/v1/public/share/{token}/apply", json=application())
    assert response.status_code == 401
    response = await client.post(f"/api/v1/public/share/{token}/apply", json=application(password="s3cret"))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_submission_limit(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    link = await create_link(client, user, job["id"], max_submissions=1)

    response = await client.post(f"/api/v1/public/share/{link['token']}/apply", json=application())
    assert response.status_code == 200
    response = await client.post(
        f"/api/v1/public/share/{link['token']}/apply", json=application(email="other@example.com")
    )
    assert response.status_code == 410
    # the ad itself stays readable
    response = await client.get(f"/api/v1/public/share/{link['token']}")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_disabled_expired_and_regenerated_links(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()

    expired = await create_link(client, user, job["id"], expires_at=(utc_now() - timedelta(hours=1)).isoformat())
    response = await client.get(f"/api/v1/public/share/{expired['token']}")
    assert response.status_code == 410

    link = await create_link(client, user, job["id"])
    response = await client.post(f"/api/v1/share-links/{link['id']}/toggle", headers=auth(user))
    assert response.json()["data"]["active"] is False
    response = await client.get(f"/api/v1/public/share/{link['token']}")
    assert response.status_code == 410

    await client.post(f"/api/v1/share-links/{link['id']}/toggle", headers=auth(user))
    response = await client.post(f"/api/v1/share-links/{link['id']}/regenerate", headers=auth(user))
    new_token = response.json()["data"]["token"]
    assert new_token != link["token"]
    response = await client.get(f"/api/v1/public/share/{link['token']}")
    assert response.status_code == 404
    response = await client.get(f"/api/v1/public/share/{new_token}")
    assert response.status_code == 200

    response = await client.delete(f"/api/v1/share-links/{link['id']}", headers=auth(user))
    assert response.status_code == 200
    response = await client.get(f"/api/v1/public/share/{new_token}")
    assert response.status_code == 404
    response = await client.get(f"/api/v1/jobs/{job['id']}/share-links", headers=auth(user))
    assert [l["id"] for l in response.json()["data"]] == [expired["id"]]


@pytest.mark.asyncio
async def test_link_type_must_match_page(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    link = await create_link(client, user, job["id"], link_type="client_view")
    assert link["url"].endswith(f"/client-view/{link['token']}")

    response = await client.get(f"/api/v1/public/share/{link['token']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_client_view(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job(title="SRE")
    pooled = await factory.create_candidate(job_id=job["id"])
    chosen = await factory.create_candidate(job_id=job["id"], full_name="Caio")
    await factory.move_candidate(chosen["id"], "aprovado-rhello")
    template = await factory.create_template()
    await client.post(
        f"/api/v1/candidates/{chosen['id']}/scorecards",
        json={
            "template_id": template["id"],
            "recommendation": "strong_yes",
            "evaluations": [{"criteria_id": c["id"], "score": 5} for c in template["criteria"]],
        },
        headers=auth(user),
    )
    link = await create_link(client, user, job["id"], link_type="client_view")

    response = await client.get(f"/api/v1/public/client-view/{link['token']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["job"]["title"] == "SRE"
    assert data["total_candidates"] == 1

    columns = {c["slug"]: c for c in data["columns"]}
    assert "banco-talentos" not in columns
    cards = columns["aprovado-rhello"]["candidates"]
    assert [c["full_name"] for c in cards] == ["Caio"]
    assert cards[0]["match_percentage"] == 100
    assert "email" not in cards[0]
    assert pooled["id"] not in [c["id"] for col in data["columns"] for c in col["candidates"]]


@pytest.mark.asyncio
async def test_share_links_require_user(client: AsyncClient, factory: DataFactory):
    job = await factory.create_job()
    response = await client.post(f"/api/v1/jobs/{job['id']}/share-links", json={})
    assert response.status_code == 401
