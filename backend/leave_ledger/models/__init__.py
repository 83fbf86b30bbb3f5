from sqlmodel import SQLModel

from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.document import LeaveDocument
from leave_ledger.models.employee import Employee
from leave_ledger.models.enums import (
    CancellationAction,
    CancelRequestStatus,
    ClientOrigin,
    EmployeeStatus,
    LeaveAction,
    LeaveStatus,
    LeaveType,
    LedgerEntryType,
    LedgerSourceType,
    NotificationType,
)
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.models.notification import Notification
from leave_ledger.models.request import LeaveRequest

__all__ = [
    "CancelRequestStatus",
    "CancellationAction",
    "ClientOrigin",
    "Employee",
    "EmployeeStatus",
    "LeaveAction",
    "LeaveDocument",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "LedgerEntryType",
    "LedgerSourceType",
    "Notification",
    "NotificationType",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
