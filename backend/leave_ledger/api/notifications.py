# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.notification import (
    ClearNotificationsResponse,
    NotificationListResponse,
    NotificationResponse,
)
from leave_ledger.services import notification as notification_service

notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notifications_router.get("", response_model=NotificationListResponse)
async def list_notifications(
    session: SessionDep,
    auth: AuthDep,
    user_id: str | None = Query(default=None),
) -> NotificationListResponse:
    """Newest notifications for a user, or the admin broadcast feed."""
    return await notification_service.list_notifications(session, user_id)


@notifications_router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    session: SessionDep,
    auth: AuthDep,
) -> NotificationResponse:
    """Mark a notification as read."""
    return await notification_service.mark_notification_read(session, notification_id)


@notifications_router.delete("", response_model=ClearNotificationsResponse)
async def clear_notifications(
    session: SessionDep,
    auth: AuthDep,
    user_id: str = Query(min_length=1),
) -> ClearNotificationsResponse:
    """Delete every notification addressed to a user."""
    return await notification_service.clear_notifications(session, user_id)
