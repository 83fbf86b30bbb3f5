# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import EmployeeStatus


class CreateEmployeeRequest(BaseModel):
    """Request body for onboarding an employee.

    Balances left unset fall back to the configured defaults.
    """

    employee_id: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    mobile_number: str | None = Field(default=None, max_length=50)
    designation: str | None = Field(default=None, max_length=255)
    role: str = Field(default="employee", pattern=r"^(employee|admin)$")
    joining_date: date | None = None
    current_posting: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1024)
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    cl_balance: int | None = Field(default=None, ge=0)
    el_balance: int | None = Field(default=None, ge=0)
    rh_balance: int | None = Field(default=None, ge=0)


class EmployeeUpdate(BaseModel):
    """Explicit partial update of an employee's profile.

    Only the fields named here can change; balances go through BalanceUpdate.
    """

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    mobile_number: str | None = Field(default=None, max_length=50)
    designation: str | None = Field(default=None, max_length=255)
    role: str | None = Field(default=None, pattern=r"^(employee|admin)$")
    joining_date: date | None = None
    current_posting: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1024)
    status: EmployeeStatus | None = None

    @model_validator(mode="after")
    def _require_a_field(self) -> Self:
        if not self.changes():
            msg = "No fields to update"
            raise ValueError(msg)
        return self

    def changes(self) -> dict[str, object]:
        """Fields the caller actually supplied with a non-null value."""
        return {name: getattr(self, name) for name in self.model_fields_set if getattr(self, name) is not None}


class BalanceUpdate(BaseModel):
    """Explicit partial update of the three balance columns.

    Manual adjustments may set any integer, including negative values.
    """

    cl_balance: int | None = None
    el_balance: int | None = None
    rh_balance: int | None = None
    note: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _require_a_balance(self) -> Self:
        if not self.changes():
            msg = "No leave balance fields to update"
            raise ValueError(msg)
        return self

    def changes(self) -> dict[str, int]:
        """Balance columns the caller supplied, keyed by column name."""
        values = {"cl_balance": self.cl_balance, "el_balance": self.el_balance, "rh_balance": self.rh_balance}
        return {name: value for name, value in values.items() if value is not None}


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    employee_id: str
    full_name: str
    email: str
    mobile_number: str | None
    designation: str | None
    role: str
    joining_date: date | None
    current_posting: str | None
    avatar_url: str | None
    status: EmployeeStatus
    cl_balance: int
    el_balance: int
    rh_balance: int
    created_at: datetime


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int


class BulkResetResponse(BaseModel):
    """Result of resetting every employee's earned-leave balance."""

    el_balance: int
    updated_employee_ids: list[str]
    total: int
