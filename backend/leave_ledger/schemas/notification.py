# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """Response schema for a feed notification."""

    id: int
    type: str
    message: str
    user_id: str | None
    sender_id: str | None
    sender_name: str | None
    sender_avatar: str | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int


class ClearNotificationsResponse(BaseModel):
    user_id: str
    deleted: int
