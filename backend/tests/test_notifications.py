"""Notification feed: emission on transitions, origin tags, cap, read and clear."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from leave_ledger.config import get_settings
from leave_ledger.models.enums import ClientOrigin
from leave_ledger.services.notification import decorate_sender_name
from tests.conftest import (
    ADMIN_HEADERS,
    approve,
    create_employee,
    employee_headers,
    submit_leave,
)

if TYPE_CHECKING:
    from httpx import AsyncClient


async def _feed(client: AsyncClient, user_id: str | None = None) -> list[dict]:
    params = {"user_id": user_id} if user_id else {}
    resp = await client.get("/notifications", params=params, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    return resp.json()["items"]


def test_decorate_sender_name() -> None:
    assert decorate_sender_name("Priya", ClientOrigin.APP) == "Priya [App]"
    assert decorate_sender_name("Priya", ClientOrigin.WEB) == "Priya [Web]"


def test_decorate_sender_name_keeps_existing_tag() -> None:
    assert decorate_sender_name("Priya [App]", ClientOrigin.WEB) == "Priya [App]"
    assert decorate_sender_name("Priya [web] ", ClientOrigin.APP) == "Priya [web] "


async def test_submit_notifies_admins(async_client: AsyncClient) -> None:
    await create_employee(async_client, full_name="Arjun Rao")
    await submit_leave(async_client, start="2030-01-10", end="2030-01-12")

    feed = await _feed(async_client)

    assert len(feed) == 1
    item = feed[0]
    assert item["type"] == "New Leave Request"
    assert item["user_id"] is None
    assert item["sender_id"] == "EMP001"
    assert item["sender_name"] == "Arjun Rao"
    assert item["is_read"] is False
    assert "2030-01-10" in item["message"]


async def test_approve_notifies_employee_with_origin_tag(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    leave = await submit_leave(async_client)
    await approve(async_client, leave["id"])

    feed = await _feed(async_client, "EMP001")

    assert [item["type"] for item in feed] == ["Leave Approved"]
    assert feed[0]["sender_id"] == "ADM001"
    assert feed[0]["sender_name"] == "Priya Admin [Web]"


async def test_app_origin_tag(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    leave = await submit_leave(async_client)
    headers = {**ADMIN_HEADERS, "X-Client-Origin": "flutter"}
    await async_client.post(f"/leaves/{leave['id']}/reject", json={"remarks": "Busy week"}, headers=headers)

    feed = await _feed(async_client, "EMP001")

    assert feed[0]["type"] == "Leave Rejected"
    assert feed[0]["sender_name"] == "Priya Admin [App]"
    assert "Remarks: Busy week" in feed[0]["message"]


async def test_sender_name_from_directory(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    await create_employee(async_client, "ADM001", full_name="Priya Sharma", role="admin", avatar_url="https://a/p.png")
    leave = await submit_leave(async_client)
    await approve(async_client, leave["id"])

    feed = await _feed(async_client, "EMP001")

    assert feed[0]["sender_name"] == "Priya Sharma [Web]"
    assert feed[0]["sender_avatar"] == "https://a/p.png"


async def test_failed_transition_emits_nothing(async_client: AsyncClient) -> None:
    await create_employee(async_client, cl_balance=1)
    leave = await submit_leave(async_client)

    resp = await async_client.post(f"/leaves/{leave['id']}/approve", headers=ADMIN_HEADERS)

    assert resp.status_code == 400
    assert await _feed(async_client, "EMP001") == []


async def test_cancellation_flow_notifications(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    leave = await submit_leave(async_client)
    await approve(async_client, leave["id"])
    await async_client.post(
        f"/leaves/{leave['id']}/cancellation-request",
        json={"employee_id": "EMP001", "reason": "Plans changed"},
        headers=employee_headers("EMP001"),
    )
    await async_client.post(f"/leaves/{leave['id']}/cancellation-request/approve", headers=ADMIN_HEADERS)

    admin_types = [item["type"] for item in await _feed(async_client)]
    employee_types = [item["type"] for item in await _feed(async_client, "EMP001")]

    assert admin_types == ["Leave Cancellation Request", "New Leave Request"]
    assert employee_types == ["Leave Cancellation Approved", "Leave Approved"]


async def test_owner_cancel_goes_to_admins(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    leave = await submit_leave(async_client)
    await async_client.post(f"/leaves/{leave['id']}/cancel", headers=employee_headers("EMP001"))

    admin_feed = await _feed(async_client)
    assert admin_feed[0]["type"] == "Leave Cancelled"
    assert await _feed(async_client, "EMP001") == []


async def test_feed_is_capped_newest_first(async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(get_settings(), "notification_feed_limit", 3)
    await create_employee(async_client)
    for day in range(10, 15):
        await submit_leave(async_client, start=f"2030-01-{day}", end=f"2030-01-{day}")

    resp = await async_client.get("/notifications", headers=ADMIN_HEADERS)

    body = resp.json()
    assert body["total"] == 3
    assert "2030-01-14" in body["items"][0]["message"]
    ids = [item["id"] for item in body["items"]]
    assert ids == sorted(ids, reverse=True)


async def test_mark_read(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    await submit_leave(async_client)
    notification_id = (await _feed(async_client))[0]["id"]

    resp = await async_client.post(f"/notifications/{notification_id}/read", headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json()["is_read"] is True
    assert (await _feed(async_client))[0]["is_read"] is True


async def test_mark_read_missing(async_client: AsyncClient) -> None:
    resp = await async_client.post("/notifications/999/read", headers=ADMIN_HEADERS)
    assert resp.status_code == 404


async def test_clear_notifications(async_client: AsyncClient) -> None:
    await create_employee(async_client)
    first = await submit_leave(async_client, start="2030-01-10", end="2030-01-10")
    second = await submit_leave(async_client, start="2030-01-20", end="2030-01-20")
    await approve(async_client, first["id"])
    await async_client.post(f"/leaves/{second['id']}/reject", headers=ADMIN_HEADERS)

    resp = await async_client.delete("/notifications", params={"user_id": "EMP001"}, headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    assert resp.json() == {"user_id": "EMP001", "deleted": 2}
    assert await _feed(async_client, "EMP001") == []
    # The broadcast feed is untouched.
    assert len(await _feed(async_client)) == 2


async def test_clear_requires_user(async_client: AsyncClient) -> None:
    resp = await async_client.delete("/notifications", headers=ADMIN_HEADERS)
    assert resp.status_code == 422
