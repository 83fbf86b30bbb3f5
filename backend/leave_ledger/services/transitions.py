"""Transition tables for leave requests.

Two independent machines live on a request: the main ``status`` and the
two-step cancellation sub-state. Each table maps (current state, action) to
either the next state or a refusal carrying the error raised to the caller.
"""

from __future__ import annotations

from typing import NamedTuple

from leave_ledger.exceptions import (
    AlreadyApprovedError,
    AlreadyCancelledError,
    AppError,
    CancellationConflictError,
    InvalidTransitionError,
)
from leave_ledger.models.enums import CancellationAction, CancelRequestStatus, LeaveAction, LeaveStatus


class Refusal(NamedTuple):
    error: type[AppError]
    message: str


_TERMINAL = "Leave request is {state} and can no longer change"

STATUS_TRANSITIONS: dict[tuple[LeaveStatus, LeaveAction], LeaveStatus | Refusal] = {
    (LeaveStatus.PENDING, LeaveAction.APPROVE): LeaveStatus.APPROVED,
    (LeaveStatus.PENDING, LeaveAction.REJECT): LeaveStatus.REJECTED,
    (LeaveStatus.PENDING, LeaveAction.CANCEL): LeaveStatus.CANCELLED,
    (LeaveStatus.APPROVED, LeaveAction.APPROVE): Refusal(AlreadyApprovedError, "Leave request is already approved"),
    (LeaveStatus.APPROVED, LeaveAction.REJECT): Refusal(
        InvalidTransitionError, "Approved leave requests cannot be rejected; cancel them instead"
    ),
    (LeaveStatus.APPROVED, LeaveAction.CANCEL): LeaveStatus.CANCELLED,
    (LeaveStatus.REJECTED, LeaveAction.APPROVE): Refusal(InvalidTransitionError, _TERMINAL.format(state="rejected")),
    (LeaveStatus.REJECTED, LeaveAction.REJECT): Refusal(InvalidTransitionError, "Leave request is already rejected"),
    (LeaveStatus.REJECTED, LeaveAction.CANCEL): Refusal(InvalidTransitionError, _TERMINAL.format(state="rejected")),
    (LeaveStatus.CANCELLED, LeaveAction.APPROVE): Refusal(InvalidTransitionError, _TERMINAL.format(state="cancelled")),
    (LeaveStatus.CANCELLED, LeaveAction.REJECT): Refusal(InvalidTransitionError, _TERMINAL.format(state="cancelled")),
    (LeaveStatus.CANCELLED, LeaveAction.CANCEL): Refusal(AlreadyCancelledError, "Leave request is already cancelled"),
}

_NOT_PENDING = "No cancellation request is pending for this leave"

CANCELLATION_TRANSITIONS: dict[tuple[CancelRequestStatus, CancellationAction], CancelRequestStatus | Refusal] = {
    (CancelRequestStatus.NONE, CancellationAction.REQUEST): CancelRequestStatus.PENDING,
    (CancelRequestStatus.NONE, CancellationAction.APPROVE): Refusal(CancellationConflictError, _NOT_PENDING),
    (CancelRequestStatus.NONE, CancellationAction.REJECT): Refusal(CancellationConflictError, _NOT_PENDING),
    (CancelRequestStatus.PENDING, CancellationAction.REQUEST): Refusal(
        CancellationConflictError, "A cancellation request is already pending for this leave"
    ),
    (CancelRequestStatus.PENDING, CancellationAction.APPROVE): CancelRequestStatus.APPROVED,
    (CancelRequestStatus.PENDING, CancellationAction.REJECT): CancelRequestStatus.REJECTED,
    (CancelRequestStatus.REJECTED, CancellationAction.REQUEST): CancelRequestStatus.PENDING,
    (CancelRequestStatus.REJECTED, CancellationAction.APPROVE): Refusal(CancellationConflictError, _NOT_PENDING),
    (CancelRequestStatus.REJECTED, CancellationAction.REJECT): Refusal(CancellationConflictError, _NOT_PENDING),
    (CancelRequestStatus.APPROVED, CancellationAction.REQUEST): Refusal(
        CancellationConflictError, "Cancellation was already approved for this leave"
    ),
    (CancelRequestStatus.APPROVED, CancellationAction.APPROVE): Refusal(
        CancellationConflictError, "Cancellation was already approved for this leave"
    ),
    (CancelRequestStatus.APPROVED, CancellationAction.REJECT): Refusal(
        CancellationConflictError, "Cancellation was already approved for this leave"
    ),
}


def next_status(current: LeaveStatus, action: LeaveAction, *, permissive_reject: bool = False) -> LeaveStatus:
    """Return the status ``action`` moves a request to, or raise the table's refusal.

    ``permissive_reject`` restores the legacy behaviour where reject was
    accepted from approved and cancelled requests too, without touching
    balances. An already rejected request is still refused so that
    ``rejected_date`` is only ever set once.
    """
    if permissive_reject and action is LeaveAction.REJECT and current is not LeaveStatus.REJECTED:
        return LeaveStatus.REJECTED
    outcome = STATUS_TRANSITIONS[(current, action)]
    if isinstance(outcome, Refusal):
        raise outcome.error(outcome.message)
    return outcome


def next_cancellation_status(current: CancelRequestStatus, action: CancellationAction) -> CancelRequestStatus:
    """Return the cancellation sub-state ``action`` moves to, or raise the table's refusal."""
    outcome = CANCELLATION_TRANSITIONS[(current, action)]
    if isinstance(outcome, Refusal):
        raise outcome.error(outcome.message)
    return outcome
