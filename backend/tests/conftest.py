from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leave_ledger.db import get_session
from leave_ledger.main import app
from leave_ledger.models import SQLModel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

# One shared in-memory SQLite connection; tables are rebuilt for every test.
engine = create_async_engine(
    "sqlite+aiosqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

ADMIN_ID = "ADM001"
ADMIN_HEADERS = {"X-User-Id": ADMIN_ID, "X-User-Name": "Priya Admin", "X-Role": "admin", "X-Client-Origin": "web"}


def employee_headers(employee_id: str, name: str | None = None, origin: str = "app") -> dict[str, str]:
    headers = {"X-User-Id": employee_id, "X-Role": "employee", "X-Client-Origin": origin}
    if name:
        headers["X-User-Name"] = name
    return headers


@pytest.fixture(autouse=True)
async def _setup_db() -> AsyncIterator[None]:
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    return TestSessionFactory


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """A session for direct service calls and assertions on stored rows."""
    async with TestSessionFactory() as session:
        yield session


@pytest.fixture
async def async_client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client; every request gets its own session, like production."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with TestSessionFactory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def create_employee(client: AsyncClient, employee_id: str = "EMP001", **overrides: Any) -> dict[str, Any]:
    """Onboard an employee through the API and return the response body."""
    body: dict[str, Any] = {
        "employee_id": employee_id,
        "full_name": f"Employee {employee_id}",
        "email": f"{employee_id.lower()}@example.com",
        "designation": "Engineer",
    }
    body.update(overrides)
    resp = await client.post("/employees", json=body, headers=ADMIN_HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def submit_leave(
    client: AsyncClient,
    employee_id: str = "EMP001",
    leave_type: str = "CL",
    start: str = "2030-01-10",
    end: str = "2030-01-12",
    **overrides: Any,
) -> dict[str, Any]:
    """Submit a leave request as its owner and return the response body."""
    body: dict[str, Any] = {
        "employee_id": employee_id,
        "type": leave_type,
        "start_date": start,
        "end_date": end,
        "reason": "Personal",
    }
    body.update(overrides)
    resp = await client.post("/leaves", json=body, headers=employee_headers(employee_id))
    assert resp.status_code == 201, resp.text
    return resp.json()


async def approve(client: AsyncClient, leave_id: int) -> dict[str, Any]:
    resp = await client.post(f"/leaves/{leave_id}/approve", headers=ADMIN_HEADERS)
    assert resp.status_code == 200, resp.text
    return resp.json()


async def get_balances(client: AsyncClient, employee_id: str = "EMP001") -> dict[str, int]:
    resp = await client.get(f"/employees/{employee_id}", headers=ADMIN_HEADERS)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    return {"CL": data["cl_balance"], "EL": data["el_balance"], "RH": data["rh_balance"]}
