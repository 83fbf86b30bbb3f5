"""Balance ledger: row locks, guarded debit/credit and the journal.

Every function here runs inside the caller's transaction; none of them
commit. ``ledger_transaction`` is the unit of work the leave and employee
services wrap their mutations in.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import (
    InsufficientBalanceError,
    InvalidLeaveTypeError,
    NotFoundError,
    StoreConflictError,
)
from leave_ledger.models.employee import Employee
from leave_ledger.models.enums import LeaveType, LedgerEntryType, LedgerSourceType
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.schemas.ledger import LedgerEntryResponse, LedgerListResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.request import LeaveRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------


@asynccontextmanager
async def ledger_transaction(session: AsyncSession, action: str) -> AsyncIterator[None]:
    """Commit the block as one unit; roll everything back on any failure.

    Database errors (lock timeouts, serialization failures, uniqueness
    violations on the journal) surface as StoreConflictError. They are never
    retried here.
    """
    try:
        yield
        await session.commit()
    except (DBAPIError, StaleDataError) as exc:
        await session.rollback()
        logger.warning("Store conflict while %s: %s", action, exc)
        msg = f"Concurrent update detected while {action}; nothing was changed"
        raise StoreConflictError(msg) from exc
    except Exception:
        await session.rollback()
        raise


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def resolve_leave_type(value: str) -> LeaveType:
    """Map a stored type to a LeaveType. Raises 422 for types the ledger cannot handle."""
    try:
        return LeaveType(value)
    except ValueError:
        msg = f"Invalid leave type: {value}"
        raise InvalidLeaveTypeError(msg) from None


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a journal entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        employee_id=entry.employee_id,
        leave_type=entry.leave_type,
        entry_type=LedgerEntryType(entry.entry_type),
        amount_days=entry.amount_days,
        balance_after=entry.balance_after,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        note=entry.note,
        created_at=entry.created_at,
    )


async def lock_employee(session: AsyncSession, employee_id: str) -> Employee:
    """Re-read the employee row with a FOR UPDATE lock. Raises 404 if absent."""
    result = await session.execute(
        select(Employee)
        .where(col(Employee.employee_id) == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


def write_journal_entry(
    session: AsyncSession,
    *,
    employee_id: str,
    leave_type: LeaveType,
    entry_type: LedgerEntryType,
    amount_days: int,
    balance_after: int,
    source_type: LedgerSourceType,
    source_id: str,
    note: str | None = None,
) -> LeaveLedgerEntry | None:
    """Append a journal entry within the caller's transaction, if the journal is enabled."""
    if not get_settings().ledger_journal_enabled:
        return None
    entry = LeaveLedgerEntry(
        employee_id=employee_id,
        leave_type=leave_type.value,
        entry_type=entry_type.value,
        amount_days=amount_days,
        balance_after=balance_after,
        source_type=source_type.value,
        source_id=source_id,
        note=note,
    )
    session.add(entry)
    return entry


# ---------------------------------------------------------------------------
# Write path: request-driven debit and credit
# ---------------------------------------------------------------------------


async def debit_for_request(
    session: AsyncSession,
    employee: Employee,
    leave: LeaveRequest,
    leave_type: LeaveType,
) -> int | None:
    """Debit ``leave.days`` from the employee's balance column for ``leave_type``.

    The UPDATE only matches while the balance still covers the request, so a
    racing approval can never drive it negative. Returns the new balance, or
    None for untracked types.
    """
    field = leave_type.balance_field
    if field is None:
        return None
    column = getattr(Employee, field)
    result = await session.execute(
        update(Employee)
        .where(col(Employee.employee_id) == employee.employee_id, column >= leave.days)
        .values({column: column - leave.days})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        msg = f"Insufficient leave balance. Current balance: {getattr(employee, field)}, Requested: {leave.days}"
        raise InsufficientBalanceError(msg)

    await session.refresh(employee, [field])
    balance_after: int = getattr(employee, field)
    write_journal_entry(
        session,
        employee_id=employee.employee_id,
        leave_type=leave_type,
        entry_type=LedgerEntryType.USAGE,
        amount_days=-leave.days,
        balance_after=balance_after,
        source_type=LedgerSourceType.REQUEST,
        source_id=str(leave.id),
    )
    logger.info("Debited %d %s day(s) from %s for leave %s", leave.days, leave_type, employee.employee_id, leave.id)
    return balance_after


async def credit_for_request(
    session: AsyncSession,
    employee: Employee,
    leave: LeaveRequest,
    leave_type: LeaveType,
) -> int | None:
    """Restore ``leave.days`` to the balance column debited at approval."""
    field = leave_type.balance_field
    if field is None:
        return None
    column = getattr(Employee, field)
    await session.execute(
        update(Employee)
        .where(col(Employee.employee_id) == employee.employee_id)
        .values({column: column + leave.days})
        .execution_options(synchronize_session=False)
    )

    await session.refresh(employee, [field])
    balance_after: int = getattr(employee, field)
    write_journal_entry(
        session,
        employee_id=employee.employee_id,
        leave_type=leave_type,
        entry_type=LedgerEntryType.RESTORE,
        amount_days=leave.days,
        balance_after=balance_after,
        source_type=LedgerSourceType.REQUEST,
        source_id=str(leave.id),
    )
    logger.info("Restored %d %s day(s) to %s for leave %s", leave.days, leave_type, employee.employee_id, leave.id)
    return balance_after


def set_balance(
    session: AsyncSession,
    employee: Employee,
    field: str,
    value: int,
    *,
    entry_type: LedgerEntryType,
    source_type: LedgerSourceType,
    note: str | None = None,
) -> int:
    """Overwrite one balance column on a locked employee and journal the delta.

    Used by manual adjustments and bulk resets, which are allowed to set any
    value. Returns the signed delta.
    """
    leave_type = next(t for t in LeaveType if t.balance_field == field)
    delta = value - getattr(employee, field)
    setattr(employee, field, value)
    write_journal_entry(
        session,
        employee_id=employee.employee_id,
        leave_type=leave_type,
        entry_type=entry_type,
        amount_days=delta,
        balance_after=value,
        source_type=source_type,
        source_id=str(uuid.uuid4()),
        note=note,
    )
    return delta


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_ledger(
    session: AsyncSession,
    employee_id: str,
    leave_type: LeaveType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Get paginated journal entries for an employee, newest first."""
    base_filter = [col(LeaveLedgerEntry.employee_id) == employee_id]
    if leave_type is not None:
        base_filter.append(col(LeaveLedgerEntry.leave_type) == leave_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(col(LeaveLedgerEntry.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )
