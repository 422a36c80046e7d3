"""
Scorecards API tests
"""
import pytest
from httpx import AsyncClient

from tests.conftest import DataFactory, auth


async def submit(client: AsyncClient, user: dict, candidate_id: str, template: dict, scores: list, **extra):
    evaluations = [
        {"criteria_id": c["id"], "score": s}
        for c, s in zip(template["criteria"], scores)
    ]
    return await client.post(
        f"/api/v1/candidates/{candidate_id}/scorecards",
        json={"template_id": template["id"], "recommendation": "yes", "evaluations": evaluations, **extra},
        headers=auth(user),
    )


@pytest.mark.asyncio
async def test_template_crud_flow(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()

    # 1. Create
    template = await factory.create_template(name="Backend interview")
    assert [c["name"] for c in template["criteria"]] == ["Python", "Communication", "Culture"]
    assert [c["display_order"] for c in template["criteria"]] == [0, 1, 2]

    # 2. Read
    response = await client.get(f"/api/v1/scorecard-templates/{template['id']}")
    assert response.json()["data"]["name"] == "Backend interview"

    # 3. Update replaces the criteria
    response = await client.patch(
        f"/api/v1/scorecard-templates/{template['id']}",
        json={"criteria": [{"name": "Only one", "weight": 100}]},
        headers=auth(user),
    )
    assert response.status_code == 200
    assert [c["name"] for c in response.json()["data"]["criteria"]] == ["Only one"]

    # 4. List
    response = await client.get("/api/v1/scorecard-templates", params={"is_active": True})
    assert response.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_template_weights_must_total_100(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    response = await client.post(
        "/api/v1/scorecard-templates",
        json={"name": "Bad", "criteria": [{"name": "A", "weight": 50}, {"name": "B", "weight": 40}]},
        headers=auth(user),
    )
    assert response.status_code == 400
    assert "current total: 90" in response.json()["message"]

    response = await client.post(
        "/api/v1/scorecard-templates", json={"name": "Empty", "criteria": []}, headers=auth(user)
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_submit_scorecard(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    candidate = await factory.create_candidate(job_id=job["id"])
    template = await factory.create_template()

    response = await submit(client, user, candidate["id"], template, [5, 4, 3], comments="Solid")
    assert response.status_code == 200
    scorecard = response.json()["data"]
    assert scorecard["total_score"] == 86.0
    assert scorecard["match_percentage"] == 86
    assert scorecard["job_id"] == job["id"]
    assert scorecard["evaluator_id"] == user["id"]
    assert len(scorecard["evaluations"]) == 3

    response = await client.get(f"/api/v1/candidates/{candidate['id']}/scorecards")
    items = response.json()["data"]
    assert len(items) == 1
    assert {e["score"] for e in items[0]["evaluations"]} == {5, 4, 3}


@pytest.mark.asyncio
async def test_every_criterion_must_be_scored(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    candidate = await factory.create_candidate()
    template = await factory.create_template()

    response = await submit(client, user, candidate["id"], template, [5, 0, 3])
    assert response.status_code == 400
    assert response.json()["data"]["missing"] == ["Communication"]

    response = await submit(client, user, candidate["id"], template, [5, 4])
    assert response.status_code == 400
    assert response.json()["data"]["missing"] == ["Culture"]

    response = await submit(client, user, candidate["id"], template, [6, 4, 3])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_job_summary_ranks_candidates(client: AsyncClient, factory: DataFactory):
    first = await factory.create_user()
    second = await factory.create_user()
    job = await factory.create_job()
    ana = await factory.create_candidate(job_id=job["id"], full_name="Ana")
    bruno = await factory.create_candidate(job_id=job["id"], full_name="Bruno")
    template = await factory.create_template()

    response = await client.get(f"/api/v1/jobs/{job['id']}/scorecards/summary")
    assert response.status_code == 404

    await submit(client, first, ana["id"], template, [3, 3, 3])
    await submit(client, second, ana["id"], template, [4, 4, 4])
    await submit(client, first, bruno["id"], template, [5, 5, 5], comments="Excellent")

    response = await client.get(f"/api/v1/jobs/{job['id']}/scorecards/summary")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_candidates"] == 2

    top, second_place = data["candidates"]
    assert top["candidate_name"] == "Bruno"
    assert top["total_score"] == 100.0
    assert top["low_confidence"] is True
    assert top["comments"][0]["text"] == "Excellent"

    assert second_place["candidate_name"] == "Ana"
    assert second_place["evaluator_count"] == 2
    assert second_place["low_confidence"] is False
    assert second_place["total_score"] == 70.0
    assert second_place["criteria"][0]["average"] == 62.5
    assert len(second_place["top_criteria"]) == 3


@pytest.mark.asyncio
async def test_ten_point_scale_scores_up_to_full_match(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    candidate = await factory.create_candidate()
    template = await factory.create_template(
        criteria=[{"name": "System design", "weight": 100, "scale_type": "rating_1_10"}]
    )

    response = await submit(client, user, candidate["id"], template, [10])
    assert response.status_code == 200
    scorecard = response.json()["data"]
    assert scorecard["total_score"] == 100.0
    assert scorecard["match_percentage"] == 100

    response = await submit(client, user, candidate["id"], template, [11])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_editing_criteria_keeps_past_evaluations(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    job = await factory.create_job()
    candidate = await factory.create_candidate(job_id=job["id"])
    template = await factory.create_template()
    await submit(client, user, candidate["id"], template, [5, 4, 3])

    response = await client.patch(
        f"/api/v1/scorecard-templates/{template['id']}",
        json={"criteria": [{"name": "Architecture", "weight": 100}]},
        headers=auth(user),
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert [c["name"] for c in updated["criteria"]] == ["Architecture"]

    response = await client.get(f"/api/v1/candidates/{candidate['id']}/scorecards")
    items = response.json()["data"]
    assert len(items) == 1
    assert len(items[0]["evaluations"]) == 3

    response = await client.get(f"/api/v1/jobs/{job['id']}/scorecards/summary")
    breakdown = response.json()["data"]["candidates"][0]["criteria"]
    assert {c["criterion"] for c in breakdown} == {"Python", "Communication", "Culture"}

    # New scorecards are scored against the current criteria only
    response = await submit(client, user, candidate["id"], updated, [4])
    assert response.status_code == 200
    assert response.json()["data"]["match_percentage"] == 80

    response = await submit(client, user, candidate["id"], template, [5, 4, 3])
    assert response.status_code == 400
