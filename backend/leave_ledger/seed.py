"""Seed script for development data.

Run with:  python -m leave_ledger.seed
Talks to a running API, so every write goes through the same ledger rules as
real traffic. Re-running is safe: existing employees are skipped on 409.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
ADMIN_ID = "ADM001"

ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_ID,
    "X-User-Name": "Priya Admin",
    "X-Role": "admin",
    "X-Client-Origin": "web",
}

EMPLOYEES = [
    {
        "employee_id": ADMIN_ID,
        "full_name": "Priya Admin",
        "email": "priya.admin@example.com",
        "designation": "HR Manager",
        "role": "admin",
        "joining_date": "2019-04-01",
    },
    {
        "employee_id": "EMP001",
        "full_name": "Arjun Rao",
        "email": "arjun.rao@example.com",
        "designation": "Software Engineer",
        "joining_date": "2022-07-11",
        "current_posting": "Hyderabad",
    },
    {
        "employee_id": "EMP002",
        "full_name": "Meera Iyer",
        "email": "meera.iyer@example.com",
        "designation": "Accountant",
        "joining_date": "2021-01-04",
        "current_posting": "Chennai",
    },
    {
        "employee_id": "EMP003",
        "full_name": "Kiran Das",
        "email": "kiran.das@example.com",
        "designation": "Field Officer",
        "joining_date": "2023-09-18",
        "current_posting": "Vijayawada",
        "el_balance": 4,
    },
]


def _employee_headers(employee_id: str, name: str, origin: str = "app") -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-User-Id": employee_id,
        "X-User-Name": name,
        "X-Role": "employee",
        "X-Client-Origin": origin,
    }


async def _post(client: httpx.AsyncClient, url: str, headers: dict[str, str], json: dict | None, label: str) -> dict | None:
    """POST and report the outcome; 409 means the row already exists."""
    resp = await client.post(url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} ({resp.json().get('detail')})")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        await _post(client, f"{BASE_URL}/employees", ADMIN_HEADERS, emp, f"Employee: {emp['full_name']}")


async def seed_leaves(client: httpx.AsyncClient) -> None:
    """One request in each interesting state."""
    print("\n--- Seeding leave requests ---")
    soon = date.today() + timedelta(days=14)

    arjun = _employee_headers("EMP001", "Arjun Rao")
    await _post(
        client,
        f"{BASE_URL}/leaves",
        arjun,
        {
            "employee_id": "EMP001",
            "type": "CL",
            "start_date": soon.isoformat(),
            "end_date": (soon + timedelta(days=1)).isoformat(),
            "reason": "Family function",
            "location": "Guntur",
        },
        "Leave: Arjun 2-day CL (Pending)",
    )

    meera = _employee_headers("EMP002", "Meera Iyer", origin="web")
    approved = await _post(
        client,
        f"{BASE_URL}/leaves",
        meera,
        {
            "employee_id": "EMP002",
            "type": "Earned Leave",
            "start_date": (soon + timedelta(days=7)).isoformat(),
            "end_date": (soon + timedelta(days=11)).isoformat(),
            "reason": "Vacation",
        },
        "Leave: Meera 5-day EL",
    )
    if approved is not None:
        leave_id = approved["id"]
        await _post(client, f"{BASE_URL}/leaves/{leave_id}/approve", ADMIN_HEADERS, None, "  approved")
        await _post(
            client,
            f"{BASE_URL}/leaves/{leave_id}/cancellation-request",
            meera,
            {"employee_id": "EMP002", "reason": "Plans changed"},
            "  cancellation requested",
        )

    kiran = _employee_headers("EMP003", "Kiran Das")
    short = await _post(
        client,
        f"{BASE_URL}/leaves",
        kiran,
        {
            "employee_id": "EMP003",
            "type": "EL",
            "start_date": soon.isoformat(),
            "end_date": (soon + timedelta(days=5)).isoformat(),
            "reason": "Travel",
        },
        "Leave: Kiran 6-day EL (balance 4)",
    )
    if short is not None:
        resp = await client.post(f"{BASE_URL}/leaves/{short['id']}/approve", headers=ADMIN_HEADERS)
        print(f"  approve -> {resp.status_code} {resp.json().get('error')} (expected InsufficientBalance)")


async def main() -> None:
    print("=" * 60)
    print("  Leave Ledger: Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_employees(client)
        await seed_leaves(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
