# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import now_utc


class Notification(SQLModel, table=True):
    """Feed item written alongside every ledger transition.

    ``user_id`` of None addresses the admin broadcast feed.
    """

    __tablename__ = "notification"
    __table_args__ = (sa.Index("ix_notification_user_created", "user_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    type: str = Field(max_length=100)
    message: str
    user_id: str | None = Field(default=None, max_length=50)
    sender_id: str | None = Field(default=None, max_length=50)
    sender_name: str | None = Field(default=None, max_length=255)
    sender_avatar: str | None = Field(default=None, max_length=1024)
    is_read: bool = Field(default=False, sa_column_kwargs={"server_default": sa.text("false")})
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
