"""Employee directory: onboarding, lookup, explicit partial updates and
manual balance maintenance.

Balance changes made here bypass the request state machine. They may set
any value, including negative ones, and each changed column is journalled.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import ConflictError, NotFoundError
from leave_ledger.models.employee import Employee
from leave_ledger.models.enums import EmployeeStatus, LedgerEntryType, LedgerSourceType
from leave_ledger.schemas.employee import (
    BulkResetResponse,
    EmployeeListResponse,
    EmployeeResponse,
)
from leave_ledger.services import ledger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.employee import BalanceUpdate, CreateEmployeeRequest, EmployeeUpdate

logger = logging.getLogger(__name__)


def _build_employee_response(employee: Employee) -> EmployeeResponse:
    """Map an employee model to its response schema."""
    return EmployeeResponse(
        employee_id=employee.employee_id,
        full_name=employee.full_name,
        email=employee.email,
        mobile_number=employee.mobile_number,
        designation=employee.designation,
        role=employee.role,
        joining_date=employee.joining_date,
        current_posting=employee.current_posting,
        avatar_url=employee.avatar_url,
        status=EmployeeStatus(employee.status),
        cl_balance=employee.cl_balance,
        el_balance=employee.el_balance,
        rh_balance=employee.rh_balance,
        created_at=employee.created_at,
    )


async def _get_employee_or_404(session: AsyncSession, employee_id: str) -> Employee:
    employee = await session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def _ensure_email_free(session: AsyncSession, email: str, exclude_id: str | None = None) -> None:
    query = select(Employee).where(col(Employee.email) == email)
    if exclude_id is not None:
        query = query.where(col(Employee.employee_id) != exclude_id)
    result = await session.execute(query)
    if result.scalar_one_or_none() is not None:
        raise ConflictError("An employee with this email already exists")


async def create_employee(session: AsyncSession, payload: CreateEmployeeRequest) -> EmployeeResponse:
    """Onboard an employee with the configured default quotas."""
    settings = get_settings()
    if await session.get(Employee, payload.employee_id) is not None:
        raise ConflictError("An employee with this ID already exists")
    await _ensure_email_free(session, payload.email)

    employee = Employee(
        employee_id=payload.employee_id,
        full_name=payload.full_name,
        email=payload.email,
        mobile_number=payload.mobile_number,
        designation=payload.designation,
        role=payload.role,
        joining_date=payload.joining_date,
        current_posting=payload.current_posting,
        avatar_url=payload.avatar_url,
        status=payload.status.value,
        cl_balance=payload.cl_balance if payload.cl_balance is not None else settings.default_cl_balance,
        el_balance=payload.el_balance if payload.el_balance is not None else settings.default_el_balance,
        rh_balance=payload.rh_balance if payload.rh_balance is not None else settings.default_rh_balance,
    )
    async with ledger.ledger_transaction(session, "creating employee"):
        session.add(employee)
        try:
            await session.flush()
        except IntegrityError:
            # Lost a race with a concurrent onboarding of the same ID or email.
            raise ConflictError("An employee with this ID or email already exists") from None

    await session.refresh(employee)
    logger.info("Onboarded employee %s", employee.employee_id)
    return _build_employee_response(employee)


async def get_employee(session: AsyncSession, employee_id: str) -> EmployeeResponse:
    """Get a single employee."""
    return _build_employee_response(await _get_employee_or_404(session, employee_id))


async def list_employees(session: AsyncSession, status_filter: str | None = None) -> EmployeeListResponse:
    """List employees ordered by ID, optionally filtered by status."""
    query = select(Employee)
    if status_filter is not None:
        query = query.where(col(Employee.status) == status_filter)
    result = await session.execute(query.order_by(col(Employee.employee_id)))
    employees = list(result.scalars().all())
    return EmployeeListResponse(
        items=[_build_employee_response(e) for e in employees],
        total=len(employees),
    )


async def update_employee(
    session: AsyncSession,
    employee_id: str,
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Apply the fields present on ``payload`` and nothing else."""
    changes = payload.changes()
    employee = await _get_employee_or_404(session, employee_id)
    if "email" in changes:
        await _ensure_email_free(session, str(changes["email"]), exclude_id=employee_id)

    async with ledger.ledger_transaction(session, "updating employee"):
        for field, value in changes.items():
            setattr(employee, field, value.value if isinstance(value, EmployeeStatus) else value)

    await session.refresh(employee)
    logger.info("Updated employee %s: %s", employee_id, sorted(changes))
    return _build_employee_response(employee)


async def adjust_balances(
    session: AsyncSession,
    employee_id: str,
    payload: BalanceUpdate,
) -> EmployeeResponse:
    """Manually set one or more balance columns on a locked employee row."""
    async with ledger.ledger_transaction(session, "adjusting balances"):
        employee = await ledger.lock_employee(session, employee_id)
        for field, value in payload.changes().items():
            delta = ledger.set_balance(
                session,
                employee,
                field,
                value,
                entry_type=LedgerEntryType.ADJUSTMENT,
                source_type=LedgerSourceType.ADMIN,
                note=payload.note,
            )
            logger.info("Adjusted %s.%s by %+d to %d", employee_id, field, delta, value)

    await session.refresh(employee)
    return _build_employee_response(employee)


async def reset_earned_balances(session: AsyncSession) -> BulkResetResponse:
    """Reset every employee's earned-leave balance to the configured default."""
    target = get_settings().default_el_balance
    async with ledger.ledger_transaction(session, "resetting earned balances"):
        result = await session.execute(
            select(Employee)
            .where(col(Employee.el_balance) != target)
            .order_by(col(Employee.employee_id))
            .with_for_update()
        )
        employees = list(result.scalars().all())
        for employee in employees:
            ledger.set_balance(
                session,
                employee,
                "el_balance",
                target,
                entry_type=LedgerEntryType.RESET,
                source_type=LedgerSourceType.SYSTEM,
                note="Earned leave reset",
            )

    updated = [e.employee_id for e in employees]
    logger.info("Reset earned leave to %d for %d employee(s)", target, len(updated))
    return BulkResetResponse(el_balance=target, updated_employee_ids=updated, total=len(updated))
