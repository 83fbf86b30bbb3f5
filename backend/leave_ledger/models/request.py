# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import CancelRequestStatus, LeaveStatus


class LeaveRequest(SQLModel, table=True):
    """A leave request and its approval/cancellation state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_status", "employee_id", "status"),
        sa.CheckConstraint("days >= 1", name="ck_leave_request_days_positive"),
    )

    id: int | None = Field(default=None, primary_key=True)
    employee_id: str = Field(
        sa_column=sa.Column(
            sa.String(50), sa.ForeignKey("employee.employee_id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    employee_name: str = Field(max_length=255)
    designation: str | None = Field(default=None, max_length=255)
    type: str = Field(max_length=20)
    start_date: date
    end_date: date
    days: int
    reason: str | None = None
    location: str | None = Field(default=None, max_length=255)
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "Pending"}
    )
    cancel_request_status: str = Field(
        default=CancelRequestStatus.NONE, max_length=20, sa_column_kwargs={"server_default": "None"}
    )
    cancel_reason: str | None = None
    remarks: str | None = None
    decided_by: str | None = Field(default=None, max_length=50)
    applied_on: datetime = Field(
        default_factory=now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    approved_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    rejected_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    cancelled_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
