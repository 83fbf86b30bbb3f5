# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import LeaveType
from leave_ledger.schemas.employee import (
    BalanceUpdate,
    BulkResetResponse,
    CreateEmployeeRequest,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeUpdate,
)
from leave_ledger.schemas.leave import LeaveStatsResponse
from leave_ledger.schemas.ledger import LedgerListResponse
from leave_ledger.services import employee as employee_service
from leave_ledger.services import leave as leave_service
from leave_ledger.services import ledger as ledger_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: CreateEmployeeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Onboard an employee with default leave quotas (admin only)."""
    return await employee_service.create_employee(session, payload)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    session: SessionDep,
    auth: AuthDep,
    status_filter: str | None = Query(default=None, alias="status"),
) -> EmployeeListResponse:
    """List employees."""
    return await employee_service.list_employees(session, status_filter)


@employees_router.post("/leave-balances/reset-earned", response_model=BulkResetResponse)
async def reset_earned_balances(
    session: SessionDep,
    auth: AdminDep,
) -> BulkResetResponse:
    """Reset every employee's earned-leave balance to the default (admin only)."""
    return await employee_service.reset_earned_balances(session)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get an employee and current balances."""
    return await employee_service.get_employee(session, employee_id)


@employees_router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Update selected profile fields (admin only)."""
    return await employee_service.update_employee(session, employee_id, payload)


@employees_router.patch("/{employee_id}/leave-balances", response_model=EmployeeResponse)
async def adjust_balances(
    employee_id: str,
    payload: BalanceUpdate,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Manually set leave balances (admin only)."""
    return await employee_service.adjust_balances(session, employee_id, payload)


@employees_router.get("/{employee_id}/ledger", response_model=LedgerListResponse)
async def get_ledger(
    employee_id: str,
    session: SessionDep,
    auth: AuthDep,
    leave_type: LeaveType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
) -> LedgerListResponse:
    """Journal of balance changes for an employee."""
    return await ledger_service.get_ledger(session, employee_id, leave_type, offset, limit)


@employees_router.get("/{employee_id}/leave-stats", response_model=LeaveStatsResponse)
async def leave_stats(
    employee_id: str,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveStatsResponse:
    """Per-status request counts for an employee."""
    return await leave_service.leave_stats(session, employee_id)
