"""
Client companies API tests
"""
import httpx
import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from app.services.cnpj import CNPJLookupClient, get_cnpj_client
from tests.conftest import DataFactory, VALID_CNPJ, auth


@pytest.mark.asyncio
async def test_company_crud_flow(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()

    # 1. Create with a formatted CNPJ
    company = await factory.create_company(cnpj="11.222.333/0001-81", name="Acme LTDA")
    assert company["cnpj"] == VALID_CNPJ
    assert company["cnpj_formatted"] == "11.222.333/0001-81"
    assert company["stage_slug"] == "novo_negocio"
    assert company["stage_name"] == "Novo negócio"

    # 2. Same CNPJ again
    response = await client.post(
        "/api/v1/companies",
        json={"name": "Other", "cnpj": VALID_CNPJ},
        headers=auth(user),
    )
    assert response.status_code == 409

    # 3. Read with job count
    await factory.create_job(company_id=company["id"], company_name="Acme")
    response = await client.get(f"/api/v1/companies/{company['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["job_count"] == 1

    # 4. Update
    response = await client.patch(
        f"/api/v1/companies/{company['id']}",
        json={"notes": "Key account"},
        headers=auth(user),
    )
    assert response.json()["data"]["notes"] == "Key account"

    # 5. List
    response = await client.get("/api/v1/companies", params={"stage_slug": "novo_negocio"})
    assert response.json()["data"]["total"] == 1


@pytest.mark.asyncio
async def test_invalid_cnpj_is_rejected(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    response = await client.post(
        "/api/v1/companies",
        json={"name": "Bad", "cnpj": "11222333000182"},
        headers=auth(user),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_move_company_through_funnel(client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()
    company = await factory.create_company()

    response = await client.post(
        f"/api/v1/companies/{company['id']}/move",
        json={"to_stage": "discovery"},
        headers=auth(user),
    )
    data = response.json()["data"]
    assert data["changed"] is True
    assert data["company"]["stage_slug"] == "discovery"

    response = await client.post(
        f"/api/v1/companies/{company['id']}/move",
        json={"to_stage": "discovery"},
        headers=auth(user),
    )
    assert response.json()["data"]["changed"] is False

    response = await client.post(
        f"/api/v1/companies/{company['id']}/move",
        json={"to_stage": "nowhere"},
        headers=auth(user),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cnpj_lookup_proxies_receitaws(app: FastAPI, client: AsyncClient, factory: DataFactory):
    user = await factory.recruiter()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "OK", "nome": "ACME LTDA", "cnpj": "11.222.333/0001-81"})

    app.dependency_overrides[get_cnpj_client] = lambda: CNPJLookupClient(
        base_url="https://cnpj.test", transport=httpx.MockTransport(handler)
    )

    response = await client.get(f"/api/v1/companies/cnpj/{VALID_CNPJ}", headers=auth(user))
    assert response.status_code == 200
    assert response.json()["data"]["nome"] == "ACME LTDA"

    app.dependency_overrides[get_cnpj_client] = lambda: CNPJLookupClient(
        base_url="https://cnpj.test", transport=httpx.MockTransport(lambda r: httpx.Response(429))
    )
    response = await client.get(f"/api/v1/companies/cnpj/{VALID_CNPJ}", headers=auth(user))
    assert response.status_code == 429


@pytest.mark.asyncio
async def test_legacy_status_sets_the_starting_stage(client: AsyncClient, factory: DataFactory):
    active = await factory.create_company(status="ativo")
    assert active["stage_slug"] == "processo_andamento"
    assert "status" not in active

    inactive = await factory.create_company(cnpj="11.444.777/0001-61", status="inativo")
    assert inactive["stage_slug"] == "processo_finalizado"
    assert inactive["stage_name"] == "Processo finalizado"
