"""
Test configuration

Fixtures for an in-memory database, the test client and a data factory
"""
from typing import AsyncGenerator, Generator, Optional
from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app import models  # noqa: F401
from app.core.database import configure_sqlite, get_db
from app.main import create_app
from app.models.user import User

# A CNPJ with valid check digits
VALID_CNPJ = "11222333000181"


def auth(user: dict) -> dict:
    """Headers that act as the given user"""
    return {"X-User-Id": user["id"]}


# ========== Data factory ==========

@dataclass
class DataFactory:
    """
    Creates test data through the API

    Users are inserted straight into the session since creating them over
    HTTP already needs an admin.
    """
    client: AsyncClient
    session: AsyncSession
    _counter: int = field(default=0, repr=False)
    _recruiter: Optional[dict] = field(default=None, repr=False)

    def _next_id(self) -> str:
        self._counter += 1
        return str(self._counter)

    async def create_user(self, role: str = "recrutador", **overrides) -> dict:
        suffix = self._next_id()
        user = User(
            email=overrides.pop("email", f"user{suffix}@example.com"),
            full_name=overrides.pop("full_name", f"User {suffix}"),
            role=role,
            **overrides
        )
        self.session.add(user)
        await self.session.commit()
        return {"id": user.id, "email": user.email, "role": user.role}

    async def create_admin(self, **overrides) -> dict:
        return await self.create_user(role="admin", **overrides)

    async def recruiter(self) -> dict:
        """Shared recruiter used when a test does not care who acts"""
        if self._recruiter is None:
            self._recruiter = await self.create_user()
        return self._recruiter

    async def _headers(self, as_user: Optional[dict]) -> dict:
        return auth(as_user or await self.recruiter())

    async def create_company(self, as_user: Optional[dict] = None, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "name": f"Company {suffix} LTDA",
            "trade_name": f"Company {suffix}",
            "cnpj": VALID_CNPJ,
            **overrides
        }
        resp = await self.client.post("/api/v1/companies", json=data, headers=await self._headers(as_user))
        assert resp.status_code == 200, f"Failed to create company: {resp.text}"
        return resp.json()["data"]

    async def create_job(self, as_user: Optional[dict] = None, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "title": f"Backend Developer {suffix}",
            "company_name": "Acme",
            "recruiter": "Ana",
            "work_model": "Remoto",
            "description": "Python and FastAPI",
            "salary_min": 8000,
            "salary_max": 12000,
            **overrides
        }
        resp = await self.client.post("/api/v1/jobs", json=data, headers=await self._headers(as_user))
        assert resp.status_code == 200, f"Failed to create job: {resp.text}"
        return resp.json()["data"]

    async def create_candidate(
        self,
        job_id: Optional[str] = None,
        as_user: Optional[dict] = None,
        **overrides
    ) -> dict:
        suffix = self._next_id()
        data = {
            "full_name": f"Candidate {suffix}",
            "email": f"candidate{suffix}@example.com",
            "city": "São Paulo",
            "state": "SP",
            "job_id": job_id,
            **overrides
        }
        resp = await self.client.post("/api/v1/candidates", json=data, headers=await self._headers(as_user))
        assert resp.status_code == 200, f"Failed to create candidate: {resp.text}"
        return resp.json()["data"]

    async def create_template(self, criteria: Optional[list] = None, as_user: Optional[dict] = None, **overrides) -> dict:
        data = {
            "name": f"Template {self._next_id()}",
            "criteria": criteria or [
                {"name": "Python", "category": "hard_skills", "weight": 50},
                {"name": "Communication", "category": "soft_skills", "weight": 30},
                {"name": "Culture", "category": "fit_cultural", "weight": 20},
            ],
            **overrides
        }
        resp = await self.client.post("/api/v1/scorecard-templates", json=data, headers=await self._headers(as_user))
        assert resp.status_code == 200, f"Failed to create template: {resp.text}"
        return resp.json()["data"]

    async def move_candidate(self, candidate_id: str, to_status: str, as_user: Optional[dict] = None, **extra) -> dict:
        resp = await self.client.post(
            f"/api/v1/candidates/{candidate_id}/move",
            json={"to_status": to_status, **extra},
            headers=await self._headers(as_user),
        )
        assert resp.status_code == 200, f"Failed to move candidate: {resp.text}"
        return resp.json()["data"]


@pytest_asyncio.fixture
async def factory(client: AsyncClient, db_session: AsyncSession) -> DataFactory:
    return DataFactory(client=client, session=db_session)


# ========== Database and client ==========

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One fresh in-memory database per test
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def app(db_session: AsyncSession) -> Generator[FastAPI, None, None]:
    """
    Application bound to the test database
    """
    app = create_app()

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the test application
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
