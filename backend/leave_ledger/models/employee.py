# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import EmployeeStatus


class Employee(SQLModel, table=True):
    """An employee and the three balance counters the ledger debits and credits."""

    __tablename__ = "employee"

    employee_id: str = Field(primary_key=True, max_length=50)
    full_name: str = Field(max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    mobile_number: str | None = Field(default=None, max_length=50)
    designation: str | None = Field(default=None, max_length=255)
    role: str = Field(default="employee", max_length=50)
    joining_date: date | None = None
    current_posting: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1024)
    status: str = Field(
        default=EmployeeStatus.ACTIVE, max_length=20, index=True, sa_column_kwargs={"server_default": "Active"}
    )
    cl_balance: int = Field(default=16, sa_column_kwargs={"server_default": "16"})
    el_balance: int = Field(default=18, sa_column_kwargs={"server_default": "18"})
    rh_balance: int = Field(default=3, sa_column_kwargs={"server_default": "3"})
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
