# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from leave_ledger.models.enums import CancelRequestStatus, LeaveStatus, LeaveType
from leave_ledger.schemas.document import DocumentResponse

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a leave request."""

    employee_id: str = Field(min_length=1, max_length=50)
    type: LeaveType
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=255)

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return LeaveType(value)
            except ValueError:
                msg = f"Unknown leave type: {value}"
                raise ValueError(msg) from None
        return value

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class RejectPayload(BaseModel):
    """Request body for rejecting a leave request."""

    remarks: str | None = Field(default=None, max_length=1000)


class CancelPayload(BaseModel):
    """Request body for a direct cancellation."""

    reason: str | None = Field(default=None, max_length=1000)


class CancelApprovedPayload(BaseModel):
    """Request body for the time-windowed cancellation of an approved request."""

    employee_id: str = Field(min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=1000)


class CancellationRequestPayload(BaseModel):
    """Request body for an employee asking an admin to cancel an approved request."""

    employee_id: str = Field(min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(BaseModel):
    """Response schema for a single leave request."""

    id: int
    employee_id: str
    employee_name: str
    designation: str
    type: str
    start_date: date
    end_date: date
    days: int
    reason: str | None
    location: str | None
    status: LeaveStatus
    cancel_request_status: CancelRequestStatus
    cancel_reason: str | None
    remarks: str | None
    decided_by: str | None
    applied_on: datetime
    approved_date: datetime | None
    rejected_date: datetime | None
    cancelled_date: datetime | None
    document_count: int = 0


class LeaveDetailResponse(LeaveResponse):
    """A leave request together with its attached document references."""

    documents: list[DocumentResponse]


class LeaveListResponse(BaseModel):
    """List of leave requests, newest first."""

    items: list[LeaveResponse]
    total: int


class CancellationAck(BaseModel):
    """Acknowledgement returned by the two-step cancellation operations."""

    success: bool = True
    message: str
    leave: LeaveResponse


class LeaveStatsResponse(BaseModel):
    """Per-status request counts for one employee."""

    employee_id: str
    total: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
