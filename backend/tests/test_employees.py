"""Integration tests for the employee directory and manual balance maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from leave_ledger.services import employee as employee_service
from tests.conftest import (
    ADMIN_HEADERS,
    approve,
    create_employee,
    employee_headers,
    get_balances,
    submit_leave,
)

if TYPE_CHECKING:
    from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Create / get / list
# ---------------------------------------------------------------------------


async def test_create_employee_with_default_quotas(async_client: AsyncClient) -> None:
    data = await create_employee(async_client, full_name="Arjun Rao", joining_date="2022-07-11")

    assert data["employee_id"] == "EMP001"
    assert data["full_name"] == "Arjun Rao"
    assert data["status"] == "Active"
    assert data["role"] == "employee"
    assert data["joining_date"] == "2022-07-11"
    assert (data["cl_balance"], data["el_balance"], data["rh_balance"]) == (16, 18, 3)


async def test_create_employee_explicit_balances(async_client: AsyncClient) -> None:
    data = await create_employee(async_client, cl_balance=4, el_balance=0)
    assert (data["cl_balance"], data["el_balance"], data["rh_balance"]) == (4, 0, 3)


async def test_create_duplicate_id(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.post(
        "/employees",
        json={"employee_id": "EMP001", "full_name": "Other", "email": "other@example.com"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


async def test_create_duplicate_email(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.post(
        "/employees",
        json={"employee_id": "EMP002", "full_name": "Other", "email": "emp001@example.com"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 409


async def test_create_duplicate_email_caught_by_constraint(
    async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A concurrent onboarding that slips past the lookup still gets a 409 Conflict."""
    await create_employee(async_client)

    async def _lookup_misses(*_args: object, **_kwargs: object) -> None:
        return None

    monkeypatch.setattr(employee_service, "_ensure_email_free", _lookup_misses)
    resp = await async_client.post(
        "/employees",
        json={"employee_id": "EMP002", "full_name": "Other", "email": "emp001@example.com"},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"
    assert (await async_client.get("/employees/EMP002", headers=ADMIN_HEADERS)).status_code == 404


async def test_create_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/employees",
        json={"employee_id": "EMP001", "full_name": "A", "email": "a@example.com"},
        headers=employee_headers("EMP001"),
    )
    assert resp.status_code == 403


async def test_get_employee(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.get("/employees/EMP001", headers=employee_headers("EMP001"))
    assert resp.status_code == 200
    assert resp.json()["email"] == "emp001@example.com"


async def test_get_missing_employee(async_client: AsyncClient) -> None:
    resp = await async_client.get("/employees/NOPE", headers=ADMIN_HEADERS)
    assert resp.status_code == 404
    assert resp.json() == {"error": "NotFound", "detail": "Employee not found", "status_code": 404}


async def test_list_employees(async_client: AsyncClient) -> None:
    await create_employee(async_client, "EMP002")
    await create_employee(async_client, "EMP001")
    await create_employee(async_client, "EMP003", status="Inactive")

    everyone = await async_client.get("/employees", headers=ADMIN_HEADERS)
    assert [e["employee_id"] for e in everyone.json()["items"]] == ["EMP001", "EMP002", "EMP003"]

    inactive = await async_client.get("/employees", params={"status": "Inactive"}, headers=ADMIN_HEADERS)
    assert inactive.json()["total"] == 1


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


async def test_update_employee(async_client: AsyncClient) -> None:
    await create_employee(async_client)

    resp = await async_client.patch(
        "/employees/EMP001",
        json={"designation": "Senior Engineer", "current_posting": "Pune"},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["designation"] == "Senior Engineer"
    assert data["current_posting"] == "Pune"
    assert data["full_name"] == "Employee EMP001"
    assert data["cl_balance"] == 16


async def test_update_ignores_balance_fields(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.patch(
        "/employees/EMP001", json={"designation": "Lead", "cl_balance": 99}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["cl_balance"] == 16


async def test_empty_update_is_rejected(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.patch("/employees/EMP001", json={}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_update_email_conflict(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    await create_employee(async_client, "EMP002")
    resp = await async_client.patch(
        "/employees/EMP002", json={"email": "emp001@example.com"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 409


async def test_update_missing_employee(async_client: AsyncClient) -> None:
    resp = await async_client.patch("/employees/NOPE", json={"designation": "X"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Balances and journal
# ---------------------------------------------------------------------------


async def test_adjust_balances(async_client: AsyncClient) -> None:
    await create_employee(async_client)

    resp = await async_client.patch(
        "/employees/EMP001/leave-balances",
        json={"cl_balance": 10, "rh_balance": -1, "note": "Correction"},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 200
    assert await get_balances(async_client) == {"CL": 10, "EL": 18, "RH": -1}

    ledger = (await async_client.get("/employees/EMP001/ledger", headers=ADMIN_HEADERS)).json()
    assert ledger["total"] == 2
    by_type = {entry["leave_type"]: entry for entry in ledger["items"]}
    assert by_type["CL"]["amount_days"] == -6
    assert by_type["CL"]["balance_after"] == 10
    assert by_type["RH"]["amount_days"] == -4
    assert {entry["entry_type"] for entry in ledger["items"]} == {"ADJUSTMENT"}
    assert {entry["source_type"] for entry in ledger["items"]} == {"ADMIN"}
    assert {entry["note"] for entry in ledger["items"]} == {"Correction"}


async def test_adjust_balances_empty(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.patch("/employees/EMP001/leave-balances", json={}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422


async def test_adjust_balances_missing_employee(async_client: AsyncClient) -> None:
    resp = await async_client.patch(
        "/employees/NOPE/leave-balances", json={"cl_balance": 1}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 404


async def test_adjust_balances_requires_admin(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    resp = await async_client.patch(
        "/employees/EMP001/leave-balances", json={"cl_balance": 99}, headers=employee_headers("EMP001")
    )
    assert resp.status_code == 403
    assert (await get_balances(async_client))["CL"] == 16


async def test_reset_earned_balances(async_client: AsyncClient) -> None:
    await create_employee(async_client, "EMP001", el_balance=5)
    await create_employee(async_client, "EMP002")
    await create_employee(async_client, "EMP003", el_balance=30)

    resp = await async_client.post("/employees/leave-balances/reset-earned", headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json() == {"el_balance": 18, "updated_employee_ids": ["EMP001", "EMP003"], "total": 2}
    for employee_id in ("EMP001", "EMP002", "EMP003"):
        assert (await get_balances(async_client, employee_id))["EL"] == 18

    ledger = (await async_client.get("/employees/EMP003/ledger", headers=ADMIN_HEADERS)).json()
    assert [(e["entry_type"], e["amount_days"]) for e in ledger["items"]] == [("RESET", -12)]


async def test_ledger_filter_by_type(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    cl = await submit_leave(async_client, leave_type="CL")
    el = await submit_leave(async_client, leave_type="EL", start="2030-02-01", end="2030-02-01")
    await approve(async_client, cl["id"])
    await approve(async_client, el["id"])

    resp = await async_client.get("/employees/EMP001/ledger", params={"leave_type": "EL"}, headers=ADMIN_HEADERS)

    body = resp.json()
    assert body["total"] == 1
    assert body["items"][0]["source_id"] == str(el["id"])
    assert body["items"][0]["balance_after"] == 17


async def test_leave_stats(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    approved = await submit_leave(async_client, start="2030-01-10", end="2030-01-10")
    rejected = await submit_leave(async_client, start="2030-02-10", end="2030-02-10")
    cancelled = await submit_leave(async_client, start="2030-03-10", end="2030-03-10")
    await submit_leave(async_client, start="2030-04-10", end="2030-04-10")
    await approve(async_client, approved["id"])
    await async_client.post(f"/leaves/{rejected['id']}/reject", headers=ADMIN_HEADERS)
    await async_client.post(f"/leaves/{cancelled['id']}/cancel", headers=employee_headers("EMP001"))

    resp = await async_client.get("/employees/EMP001/leave-stats", headers=employee_headers("EMP001"))

    assert resp.json() == {
        "employee_id": "EMP001",
        "total": 4,
        "pending": 1,
        "approved": 1,
        "rejected": 1,
        "cancelled": 1,
    }
