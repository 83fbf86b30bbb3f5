from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import NotFoundError
from leave_ledger.models.employee import Employee
from leave_ledger.models.notification import Notification
from leave_ledger.schemas.notification import (
    ClearNotificationsResponse,
    NotificationListResponse,
    NotificationResponse,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.enums import ClientOrigin, NotificationType
    from leave_ledger.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

_ORIGIN_TAG = re.compile(r"\[(App|Web)\]\s*$", re.IGNORECASE)


class Sender(BaseModel):
    """Identity stamped on a notification."""

    id: str
    name: str
    avatar: str | None = None


def decorate_sender_name(name: str, origin: ClientOrigin) -> str:
    """Append the origin tag unless the name already ends with one."""
    if _ORIGIN_TAG.search(name):
        return name
    return f"{name} {origin.tag}"


async def resolve_sender(session: AsyncSession, auth: AuthContext, *, tag_origin: bool = False) -> Sender:
    """Build the sender from the caller's employee record, falling back to the headers."""
    employee = await session.get(Employee, auth.user_id)
    if employee is not None:
        name, avatar = employee.full_name, employee.avatar_url
    else:
        name, avatar = auth.user_name or auth.user_id, None
    if tag_origin:
        name = decorate_sender_name(name, auth.origin)
    return Sender(id=auth.user_id, name=name, avatar=avatar)


def _build_notification_response(notification: Notification) -> NotificationResponse:
    """Map a notification model to its response schema."""
    return NotificationResponse(
        id=notification.id,  # type: ignore[arg-type]
        type=notification.type,
        message=notification.message,
        user_id=notification.user_id,
        sender_id=notification.sender_id,
        sender_name=notification.sender_name,
        sender_avatar=notification.sender_avatar,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


def emit_notification(
    session: AsyncSession,
    *,
    notification_type: NotificationType,
    message: str,
    user_id: str | None,
    sender: Sender | None = None,
) -> Notification:
    """Append a notification within the caller's transaction.

    ``user_id`` of None addresses the admin broadcast feed.
    """
    notification = Notification(
        type=notification_type.value,
        message=message,
        user_id=user_id,
        sender_id=sender.id if sender else None,
        sender_name=sender.name if sender else None,
        sender_avatar=sender.avatar if sender else None,
    )
    session.add(notification)
    logger.debug("Queued %r notification for %s", notification_type.value, user_id or "admins")
    return notification


async def list_notifications(
    session: AsyncSession,
    user_id: str | None = None,
) -> NotificationListResponse:
    """Newest-first feed for a user, or the admin broadcast feed when no user is given."""
    limit = get_settings().notification_feed_limit
    if user_id is None:
        recipient_filter = col(Notification.user_id).is_(None)
    else:
        recipient_filter = col(Notification.user_id) == user_id

    result = await session.execute(
        select(Notification)
        .where(recipient_filter)
        .order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
        .limit(limit)
    )
    notifications = list(result.scalars().all())
    return NotificationListResponse(
        items=[_build_notification_response(n) for n in notifications],
        total=len(notifications),
    )


async def mark_notification_read(session: AsyncSession, notification_id: int) -> NotificationResponse:
    """Set the read flag, the only mutable field of a notification."""
    notification = await session.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    await session.commit()
    await session.refresh(notification)
    return _build_notification_response(notification)


async def clear_notifications(session: AsyncSession, user_id: str) -> ClearNotificationsResponse:
    """Delete every notification addressed to ``user_id``."""
    result = await session.execute(delete(Notification).where(col(Notification.user_id) == user_id))
    await session.commit()
    deleted: int = result.rowcount  # ty: ignore[unresolved-attribute]
    logger.info("Cleared %d notification(s) for %s", deleted, user_id)
    return ClearNotificationsResponse(user_id=user_id, deleted=deleted)
