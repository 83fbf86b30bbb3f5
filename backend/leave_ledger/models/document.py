# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import now_utc


class LeaveDocument(SQLModel, table=True):
    """Reference to a supporting document held by the external file store."""

    __tablename__ = "leave_document"

    id: int | None = Field(default=None, primary_key=True)
    leave_id: int = Field(
        sa_column=sa.Column(
            sa.Integer, sa.ForeignKey("leave_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    file_name: str = Field(max_length=255)
    file_url: str = Field(max_length=1024)
    file_size: int | None = None
    uploaded_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
