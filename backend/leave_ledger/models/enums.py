from __future__ import annotations

import enum
import re


class LeaveType(enum.StrEnum):
    """Leave categories. CL, EL and RH draw on a balance column; SL is uncapped."""

    CASUAL = "CL"
    EARNED = "EL"
    RESTRICTED_HOLIDAY = "RH"
    SICK = "SL"

    @classmethod
    def _missing_(cls, value: object) -> LeaveType | None:
        if not isinstance(value, str):
            return None
        return _LEAVE_TYPE_ALIASES.get(re.sub(r"[^a-z]", "", value.lower()))

    @property
    def balance_field(self) -> str | None:
        """Employee column debited for this type, or None when untracked."""
        return _BALANCE_FIELDS.get(self)


_LEAVE_TYPE_ALIASES: dict[str, LeaveType] = {
    "cl": LeaveType.CASUAL,
    "casual": LeaveType.CASUAL,
    "casualleave": LeaveType.CASUAL,
    "el": LeaveType.EARNED,
    "earned": LeaveType.EARNED,
    "earnedleave": LeaveType.EARNED,
    "rh": LeaveType.RESTRICTED_HOLIDAY,
    "restricted": LeaveType.RESTRICTED_HOLIDAY,
    "restrictedholiday": LeaveType.RESTRICTED_HOLIDAY,
    "sl": LeaveType.SICK,
    "sick": LeaveType.SICK,
    "sickleave": LeaveType.SICK,
}

_BALANCE_FIELDS: dict[LeaveType, str] = {
    LeaveType.CASUAL: "cl_balance",
    LeaveType.EARNED: "el_balance",
    LeaveType.RESTRICTED_HOLIDAY: "rh_balance",
}


class LeaveStatus(enum.StrEnum):
    """Lifecycle of a leave request. Rejected and Cancelled are terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class CancelRequestStatus(enum.StrEnum):
    """Two-step cancellation sub-state of an approved request."""

    NONE = "None"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveAction(enum.StrEnum):
    """Actions that move a request's main status."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"


class CancellationAction(enum.StrEnum):
    """Actions on the two-step cancellation sub-state."""

    REQUEST = "REQUEST"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class EmployeeStatus(enum.StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ClientOrigin(enum.StrEnum):
    """Where an action came from; rendered as a tag on notification senders."""

    APP = "App"
    WEB = "Web"

    @classmethod
    def from_header(cls, value: str | None) -> ClientOrigin:
        """Map a request-origin header to an origin. Anything unrecognised is web."""
        if value and value.strip().lower() in {"app", "mobile", "flutter", "android", "ios"}:
            return cls.APP
        return cls.WEB

    @property
    def tag(self) -> str:
        return f"[{self.value}]"


class NotificationType(enum.StrEnum):
    """Tags written on notifications emitted by ledger transitions."""

    LEAVE_REQUESTED = "New Leave Request"
    LEAVE_APPROVED = "Leave Approved"
    LEAVE_REJECTED = "Leave Rejected"
    LEAVE_CANCELLED = "Leave Cancelled"
    CANCELLATION_REQUESTED = "Leave Cancellation Request"
    CANCELLATION_APPROVED = "Leave Cancellation Approved"
    CANCELLATION_REJECTED = "Leave Cancellation Rejected"


class LedgerEntryType(enum.StrEnum):
    """Type of journal entry affecting a balance."""

    USAGE = "USAGE"
    RESTORE = "RESTORE"
    ADJUSTMENT = "ADJUSTMENT"
    RESET = "RESET"


class LedgerSourceType(enum.StrEnum):
    """Origin of a journal entry."""

    REQUEST = "REQUEST"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"
