from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from leave_ledger.models import (
    ClientOrigin,
    Employee,
    LeaveLedgerEntry,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    Notification,
    SQLModel,
)
from leave_ledger.models.base import ensure_utc

EXPECTED_TABLES = {"employee", "leave_request", "leave_document", "notification", "leave_ledger_entry"}


def test_all_tables_registered() -> None:
    assert EXPECTED_TABLES.issubset(set(SQLModel.metadata.tables.keys()))


def test_employee_defaults() -> None:
    employee = Employee(employee_id="EMP001", full_name="Arjun Rao", email="arjun@example.com")
    assert employee.status == "Active"
    assert employee.role == "employee"
    assert (employee.cl_balance, employee.el_balance, employee.rh_balance) == (16, 18, 3)


def test_leave_request_defaults() -> None:
    leave = LeaveRequest(
        employee_id="EMP001",
        employee_name="Arjun Rao",
        type="CL",
        start_date=date(2030, 1, 10),
        end_date=date(2030, 1, 12),
        days=3,
    )
    assert leave.status == LeaveStatus.PENDING
    assert leave.cancel_request_status == "None"
    assert leave.version == 1
    assert leave.applied_on.tzinfo is not None


def test_notification_defaults_unread() -> None:
    notification = Notification(type="Leave Approved", message="ok", user_id="EMP001")
    assert notification.is_read is False


def test_ledger_entry_gets_uuid() -> None:
    entry = LeaveLedgerEntry(
        employee_id="EMP001",
        leave_type="CL",
        entry_type="USAGE",
        amount_days=-3,
        balance_after=13,
        source_type="REQUEST",
        source_id="1",
    )
    assert entry.id is not None
    assert entry.created_at is not None


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("CL", LeaveType.CASUAL),
        ("cl", LeaveType.CASUAL),
        ("Casual Leave", LeaveType.CASUAL),
        ("EL", LeaveType.EARNED),
        ("Earned Leave", LeaveType.EARNED),
        ("RH", LeaveType.RESTRICTED_HOLIDAY),
        ("Restricted Holiday", LeaveType.RESTRICTED_HOLIDAY),
        ("SL", LeaveType.SICK),
        ("sick-leave", LeaveType.SICK),
    ],
)
def test_leave_type_aliases(raw: str, expected: LeaveType) -> None:
    assert LeaveType(raw) is expected


def test_unknown_leave_type_raises() -> None:
    with pytest.raises(ValueError):
        LeaveType("Maternity")


def test_balance_fields() -> None:
    assert LeaveType.CASUAL.balance_field == "cl_balance"
    assert LeaveType.EARNED.balance_field == "el_balance"
    assert LeaveType.RESTRICTED_HOLIDAY.balance_field == "rh_balance"
    assert LeaveType.SICK.balance_field is None


@pytest.mark.parametrize("header", ["app", "App", "mobile", "flutter", " android "])
def test_client_origin_app(header: str) -> None:
    assert ClientOrigin.from_header(header) is ClientOrigin.APP


@pytest.mark.parametrize("header", [None, "", "web", "browser"])
def test_client_origin_defaults_to_web(header: str | None) -> None:
    assert ClientOrigin.from_header(header) is ClientOrigin.WEB


def test_client_origin_tag() -> None:
    assert ClientOrigin.APP.tag == "[App]"
    assert ClientOrigin.WEB.tag == "[Web]"


def test_ensure_utc() -> None:
    naive = datetime(2030, 1, 1, 9, 0)
    assert ensure_utc(naive).tzinfo is UTC
    aware = datetime(2030, 1, 1, 9, 0, tzinfo=UTC)
    assert ensure_utc(aware) is aware
