from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import (
    AlreadyStartedError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidTransitionError,
    LedgerValidationError,
    NotFoundError,
    StoreConflictError,
    WindowExpiredError,
)
from leave_ledger.models.base import ensure_utc, now_utc
from leave_ledger.models.document import LeaveDocument
from leave_ledger.models.employee import Employee
from leave_ledger.models.enums import (
    CancellationAction,
    CancelRequestStatus,
    EmployeeStatus,
    LeaveAction,
    LeaveStatus,
    NotificationType,
)
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.leave import (
    CancellationAck,
    LeaveDetailResponse,
    LeaveListResponse,
    LeaveResponse,
    LeaveStatsResponse,
)
from leave_ledger.services import ledger
from leave_ledger.services.document import build_document_response
from leave_ledger.services.notification import emit_notification, resolve_sender
from leave_ledger.services.transitions import next_cancellation_status, next_status

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.leave import (
        CancelApprovedPayload,
        CancellationRequestPayload,
        SubmitLeavePayload,
    )

logger = logging.getLogger(__name__)

_UNSPECIFIED_DESIGNATION = "Not Specified"
_DEFAULT_CANCEL_REMARKS = "Cancelled by employee"
_DEFAULT_CANCEL_REJECTION = "Rejected by admin"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def compute_days(start_date: date, end_date: date) -> int:
    """Inclusive span in whole days. Raises 422 when the range is inverted."""
    days = (end_date - start_date).days + 1
    if days < 1:
        raise LedgerValidationError("end_date must not be before start_date")
    return days


def dedupe_latest(leaves: Iterable[LeaveRequest]) -> list[LeaveRequest]:
    """Keep one row per request id (latest applied_on wins), newest first."""
    latest: dict[int | None, LeaveRequest] = {}
    for leave in leaves:
        kept = latest.get(leave.id)
        if kept is None or ensure_utc(leave.applied_on) > ensure_utc(kept.applied_on):
            latest[leave.id] = leave
    return sorted(latest.values(), key=lambda leave: ensure_utc(leave.applied_on), reverse=True)


def _build_leave_response(
    leave: LeaveRequest,
    document_count: int = 0,
    current_designation: str | None = None,
) -> LeaveResponse:
    """Map a leave request model to its response schema."""
    return LeaveResponse(
        id=leave.id,  # type: ignore[arg-type]
        employee_id=leave.employee_id,
        employee_name=leave.employee_name,
        designation=leave.designation or current_designation or _UNSPECIFIED_DESIGNATION,
        type=leave.type,
        start_date=leave.start_date,
        end_date=leave.end_date,
        days=leave.days,
        reason=leave.reason,
        location=leave.location,
        status=LeaveStatus(leave.status),
        cancel_request_status=CancelRequestStatus(leave.cancel_request_status),
        cancel_reason=leave.cancel_reason,
        remarks=leave.remarks,
        decided_by=leave.decided_by,
        applied_on=leave.applied_on,
        approved_date=leave.approved_date,
        rejected_date=leave.rejected_date,
        cancelled_date=leave.cancelled_date,
        document_count=document_count,
    )


async def _document_counts(session: AsyncSession, leave_ids: list[int]) -> dict[int, int]:
    """Number of attached documents per request id."""
    if not leave_ids:
        return {}
    result = await session.execute(
        select(col(LeaveDocument.leave_id), func.count())
        .where(col(LeaveDocument.leave_id).in_(leave_ids))
        .group_by(col(LeaveDocument.leave_id))
    )
    return {leave_id: count for leave_id, count in result.all()}


async def _leave_response(session: AsyncSession, leave: LeaveRequest) -> LeaveResponse:
    counts = await _document_counts(session, [leave.id])  # type: ignore[list-item]
    return _build_leave_response(leave, counts.get(leave.id, 0))  # type: ignore[arg-type]


async def _lock_request(session: AsyncSession, request_id: int) -> LeaveRequest:
    """Re-read a leave request with a FOR UPDATE lock. Raises 404 if not found."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    leave = result.scalar_one_or_none()
    if leave is None:
        raise NotFoundError("Leave request not found")
    return leave


async def _apply_transition(session: AsyncSession, leave: LeaveRequest, **values: Any) -> None:
    """Write ``values`` only if the row still has the version and status we read.

    A lost race leaves the row untouched and raises StoreConflictError, so
    the enclosing transaction rolls back any balance change made alongside.
    """
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == leave.id,
            col(LeaveRequest.version) == leave.version,
            col(LeaveRequest.status) == leave.status,
        )
        .values(version=leave.version + 1, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        logger.warning("Leave %s changed concurrently (expected version %d)", leave.id, leave.version)
        raise StoreConflictError("Leave request was modified concurrently; nothing was changed")


def _settle_pending_cancellation(leave: LeaveRequest) -> dict[str, str]:
    """A direct cancel grants any cancellation request still waiting on an admin."""
    if leave.cancel_request_status != CancelRequestStatus.PENDING:
        return {}
    settled = next_cancellation_status(CancelRequestStatus.PENDING, CancellationAction.APPROVE)
    return {"cancel_request_status": settled.value}


def _require_owner_or_admin(auth: AuthContext, employee_id: str) -> None:
    if not auth.is_admin and auth.user_id != employee_id:
        raise ForbiddenError("Not authorized to act on this leave request")


def _describe(leave: LeaveRequest) -> str:
    return f"{leave.type} leave #{leave.id} from {leave.start_date} to {leave.end_date} ({leave.days} day(s))"


# ---------------------------------------------------------------------------
# Public API: transitions
# ---------------------------------------------------------------------------


async def submit_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
) -> LeaveResponse:
    """Create a Pending leave request and notify admins.

    The request row and the broadcast notification commit together. No
    balance is touched until approval.
    """
    async with ledger.ledger_transaction(session, "submitting leave"):
        employee = await session.get(Employee, payload.employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        if employee.status != EmployeeStatus.ACTIVE:
            raise LedgerValidationError("Inactive employees cannot submit leave requests")
        if not (employee.designation or "").strip():
            raise LedgerValidationError("Employee designation not found")

        days = compute_days(payload.start_date, payload.end_date)
        leave = LeaveRequest(
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            designation=employee.designation,
            type=payload.type.value,
            start_date=payload.start_date,
            end_date=payload.end_date,
            days=days,
            reason=payload.reason,
            location=payload.location,
            status=LeaveStatus.PENDING.value,
            cancel_request_status=CancelRequestStatus.NONE.value,
            applied_on=now_utc(),
        )
        session.add(leave)
        await session.flush()

        emit_notification(
            session,
            notification_type=NotificationType.LEAVE_REQUESTED,
            message=(
                f"New leave request from {employee.full_name} ({employee.employee_id}) "
                f"for {payload.type.value} from {payload.start_date} to {payload.end_date}."
            ),
            user_id=None,
            sender=await resolve_sender(session, auth),
        )

    await session.refresh(leave)
    logger.info("Leave %s submitted by %s for %d day(s)", leave.id, leave.employee_id, leave.days)
    return _build_leave_response(leave)


async def approve_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
) -> LeaveResponse:
    """Approve a leave request and debit the employee's balance.

    Flow, all in one transaction:
    1. Lock and re-read the request; refuse if already approved or terminal.
    2. Resolve the balance column for the leave type.
    3. Lock and re-read the employee; refuse if inactive or short of days.
    4. Compare-and-set the request to Approved.
    5. Debit the balance (guarded) and journal it.
    6. Notify the employee, sender tagged with the request origin.
    """
    async with ledger.ledger_transaction(session, "approving leave"):
        leave = await _lock_request(session, request_id)
        new_status = next_status(LeaveStatus(leave.status), LeaveAction.APPROVE)
        leave_type = ledger.resolve_leave_type(leave.type)

        employee = await ledger.lock_employee(session, leave.employee_id)
        if employee.status != EmployeeStatus.ACTIVE:
            raise LedgerValidationError("Leave requests of inactive employees cannot be approved")

        field = leave_type.balance_field
        if field is not None:
            current_balance: int = getattr(employee, field)
            if current_balance - leave.days < 0:
                logger.info(
                    "Approval of leave %s refused: balance %d < %d day(s)", leave.id, current_balance, leave.days
                )
                raise InsufficientBalanceError(
                    f"Insufficient leave balance. Current balance: {current_balance}, Requested: {leave.days}"
                )

        await _apply_transition(
            session,
            leave,
            status=new_status.value,
            approved_date=now_utc(),
            decided_by=auth.user_id,
        )
        await ledger.debit_for_request(session, employee, leave, leave_type)

        emit_notification(
            session,
            notification_type=NotificationType.LEAVE_APPROVED,
            message=f"Your {_describe(leave)} was approved.",
            user_id=leave.employee_id,
            sender=await resolve_sender(session, auth, tag_origin=True),
        )

    await session.refresh(leave)
    logger.info("Leave %s approved by %s", leave.id, auth.user_id)
    return await _leave_response(session, leave)


async def reject_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    remarks: str | None = None,
) -> LeaveResponse:
    """Reject a pending leave request. Balances are never touched."""
    settings = get_settings()
    async with ledger.ledger_transaction(session, "rejecting leave"):
        leave = await _lock_request(session, request_id)
        new_status = next_status(
            LeaveStatus(leave.status), LeaveAction.REJECT, permissive_reject=settings.permissive_reject
        )

        await _apply_transition(
            session,
            leave,
            status=new_status.value,
            rejected_date=now_utc(),
            remarks=remarks,
            decided_by=auth.user_id,
        )

        message = f"Your {_describe(leave)} was rejected."
        if remarks:
            message = f"{message} Remarks: {remarks}"
        emit_notification(
            session,
            notification_type=NotificationType.LEAVE_REJECTED,
            message=message,
            user_id=leave.employee_id,
            sender=await resolve_sender(session, auth, tag_origin=True),
        )

    await session.refresh(leave)
    logger.info("Leave %s rejected by %s", leave.id, auth.user_id)
    return await _leave_response(session, leave)


async def cancel_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    reason: str | None = None,
) -> LeaveResponse:
    """Cancel a pending or approved request in one step.

    Cancelling an approved request restores its days in the same
    transaction. The owner or an admin may cancel; the other party is
    notified.
    """
    async with ledger.ledger_transaction(session, "cancelling leave"):
        leave = await _lock_request(session, request_id)
        _require_owner_or_admin(auth, leave.employee_id)
        current = LeaveStatus(leave.status)
        new_status = next_status(current, LeaveAction.CANCEL)

        # Only an approved request holds a debit to give back.
        restore = current is LeaveStatus.APPROVED
        if restore:
            leave_type = ledger.resolve_leave_type(leave.type)
            employee = await ledger.lock_employee(session, leave.employee_id)

        await _apply_transition(
            session,
            leave,
            status=new_status.value,
            cancelled_date=now_utc(),
            remarks=reason or _DEFAULT_CANCEL_REMARKS,
            **_settle_pending_cancellation(leave),
        )
        if restore:
            await ledger.credit_for_request(session, employee, leave, leave_type)

        by_owner = auth.user_id == leave.employee_id
        emit_notification(
            session,
            notification_type=NotificationType.LEAVE_CANCELLED,
            message=(
                f"{leave.employee_name} ({leave.employee_id}) cancelled {_describe(leave)}."
                if by_owner
                else f"Your {_describe(leave)} was cancelled."
            ),
            user_id=None if by_owner else leave.employee_id,
            sender=await resolve_sender(session, auth, tag_origin=not by_owner),
        )

    await session.refresh(leave)
    logger.info("Leave %s cancelled by %s (was %s)", leave.id, auth.user_id, current)
    return await _leave_response(session, leave)


async def cancel_approved_leave(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: CancelApprovedPayload,
) -> LeaveResponse:
    """Employee self-service cancellation of an approved request.

    Only allowed within the cancellation window after approval and before
    the leave starts. Restores the debited days.
    """
    settings = get_settings()
    async with ledger.ledger_transaction(session, "cancelling approved leave"):
        leave = await _lock_request(session, request_id)
        if leave.employee_id != payload.employee_id or leave.status != LeaveStatus.APPROVED:
            raise NotFoundError("Leave not found or not approved. Only approved leaves can be cancelled.")
        _require_owner_or_admin(auth, leave.employee_id)
        if leave.approved_date is None:
            raise LedgerValidationError("Leave does not have an approved date")

        now = now_utc()
        window = timedelta(hours=settings.cancellation_window_hours)
        if now - ensure_utc(leave.approved_date) > window:
            raise WindowExpiredError(
                f"Cancellation window expired ({settings.cancellation_window_hours} hours passed)"
            )
        if leave.start_date <= now.date():
            raise AlreadyStartedError("Cannot cancel leave that has already started or passed")

        new_status = next_status(LeaveStatus.APPROVED, LeaveAction.CANCEL)
        leave_type = ledger.resolve_leave_type(leave.type)
        employee = await ledger.lock_employee(session, leave.employee_id)
        remarks = payload.reason or _DEFAULT_CANCEL_REMARKS
        await _apply_transition(
            session,
            leave,
            status=new_status.value,
            cancelled_date=now,
            remarks=remarks,
            cancel_reason=remarks,
            **_settle_pending_cancellation(leave),
        )
        await ledger.credit_for_request(session, employee, leave, leave_type)

        emit_notification(
            session,
            notification_type=NotificationType.LEAVE_CANCELLED,
            message=f"Leave request {leave.id} has been cancelled by employee {leave.employee_id}.",
            user_id=None,
            sender=await resolve_sender(session, auth),
        )

    await session.refresh(leave)
    logger.info("Approved leave %s cancelled within window by %s", leave.id, auth.user_id)
    return await _leave_response(session, leave)


async def request_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: CancellationRequestPayload,
) -> CancellationAck:
    """Employee asks an admin to cancel an approved request."""
    async with ledger.ledger_transaction(session, "requesting cancellation"):
        leave = await _lock_request(session, request_id)
        if leave.employee_id != payload.employee_id:
            raise NotFoundError("Leave request not found")
        _require_owner_or_admin(auth, leave.employee_id)
        if leave.status != LeaveStatus.APPROVED:
            raise InvalidTransitionError("Only approved leave requests can have a cancellation requested")
        new_sub_state = next_cancellation_status(
            CancelRequestStatus(leave.cancel_request_status), CancellationAction.REQUEST
        )

        await _apply_transition(
            session,
            leave,
            cancel_request_status=new_sub_state.value,
            cancel_reason=payload.reason,
        )
        emit_notification(
            session,
            notification_type=NotificationType.CANCELLATION_REQUESTED,
            message=f"{leave.employee_name} ({leave.employee_id}) requested cancellation of {_describe(leave)}.",
            user_id=None,
            sender=await resolve_sender(session, auth),
        )

    await session.refresh(leave)
    logger.info("Cancellation requested for leave %s", leave.id)
    return CancellationAck(message="Cancellation requested", leave=await _leave_response(session, leave))


async def approve_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
) -> CancellationAck:
    """Admin grants a pending cancellation request: cancel and restore the days."""
    async with ledger.ledger_transaction(session, "approving cancellation"):
        leave = await _lock_request(session, request_id)
        new_sub_state = next_cancellation_status(
            CancelRequestStatus(leave.cancel_request_status), CancellationAction.APPROVE
        )
        if leave.status != LeaveStatus.APPROVED:
            raise InvalidTransitionError("Leave request is no longer approved")
        new_status = next_status(LeaveStatus.APPROVED, LeaveAction.CANCEL)
        leave_type = ledger.resolve_leave_type(leave.type)
        employee = await ledger.lock_employee(session, leave.employee_id)

        await _apply_transition(
            session,
            leave,
            status=new_status.value,
            cancel_request_status=new_sub_state.value,
            cancelled_date=now_utc(),
            remarks=leave.cancel_reason or "Cancellation approved",
            decided_by=auth.user_id,
        )
        await ledger.credit_for_request(session, employee, leave, leave_type)

        emit_notification(
            session,
            notification_type=NotificationType.CANCELLATION_APPROVED,
            message=f"Your leave cancellation for ID {leave.id} was approved.",
            user_id=leave.employee_id,
            sender=await resolve_sender(session, auth, tag_origin=True),
        )

    await session.refresh(leave)
    logger.info("Cancellation of leave %s approved by %s", leave.id, auth.user_id)
    return CancellationAck(message="Cancellation approved", leave=await _leave_response(session, leave))


async def reject_cancellation(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    remarks: str | None = None,
) -> CancellationAck:
    """Admin refuses a pending cancellation request. The leave stays approved."""
    async with ledger.ledger_transaction(session, "rejecting cancellation"):
        leave = await _lock_request(session, request_id)
        if leave.status != LeaveStatus.APPROVED:
            raise InvalidTransitionError("Leave request is no longer approved")
        new_sub_state = next_cancellation_status(
            CancelRequestStatus(leave.cancel_request_status), CancellationAction.REJECT
        )

        await _apply_transition(
            session,
            leave,
            cancel_request_status=new_sub_state.value,
            cancel_reason=remarks or _DEFAULT_CANCEL_REJECTION,
        )
        emit_notification(
            session,
            notification_type=NotificationType.CANCELLATION_REJECTED,
            message=f"Your leave cancellation for ID {leave.id} was rejected.",
            user_id=leave.employee_id,
            sender=await resolve_sender(session, auth, tag_origin=True),
        )

    await session.refresh(leave)
    logger.info("Cancellation of leave %s rejected by %s", leave.id, auth.user_id)
    return CancellationAck(message="Cancellation rejected", leave=await _leave_response(session, leave))


# ---------------------------------------------------------------------------
# Public API: queries
# ---------------------------------------------------------------------------


def _parse_status_filter(value: str) -> LeaveStatus | None:
    for status in LeaveStatus:
        if status.value.lower() == value.strip().lower():
            return status
    return None


async def list_leaves(
    session: AsyncSession,
    employee_id: str | None = None,
    status_filter: str | None = None,
) -> LeaveListResponse:
    """List leave requests newest first, one entry per request id.

    An unrecognised status filter matches nothing rather than failing.
    """
    query = select(LeaveRequest)
    if employee_id is not None:
        query = query.where(col(LeaveRequest.employee_id) == employee_id)
    if status_filter is not None:
        status = _parse_status_filter(status_filter)
        if status is None:
            return LeaveListResponse(items=[], total=0)
        query = query.where(col(LeaveRequest.status) == status.value)

    result = await session.execute(query.order_by(col(LeaveRequest.applied_on).desc()))
    leaves = dedupe_latest(result.scalars().all())

    employee_ids = {leave.employee_id for leave in leaves}
    designations: dict[str, str | None] = {}
    if employee_ids:
        rows = await session.execute(
            select(col(Employee.employee_id), col(Employee.designation)).where(
                col(Employee.employee_id).in_(employee_ids)
            )
        )
        designations = dict(rows.tuples().all())

    counts = await _document_counts(session, [leave.id for leave in leaves if leave.id is not None])
    items = [
        _build_leave_response(leave, counts.get(leave.id, 0), designations.get(leave.employee_id))  # type: ignore[arg-type]
        for leave in leaves
    ]
    return LeaveListResponse(items=items, total=len(items))


async def get_leave(session: AsyncSession, request_id: int) -> LeaveDetailResponse:
    """Get a single leave request together with its documents."""
    leave = await session.get(LeaveRequest, request_id)
    if leave is None:
        raise NotFoundError("Leave request not found")

    docs_result = await session.execute(
        select(LeaveDocument)
        .where(col(LeaveDocument.leave_id) == request_id)
        .order_by(col(LeaveDocument.uploaded_at))
    )
    documents = [build_document_response(d) for d in docs_result.scalars().all()]
    employee = await session.get(Employee, leave.employee_id)

    base = _build_leave_response(leave, len(documents), employee.designation if employee else None)
    return LeaveDetailResponse(**base.model_dump(), documents=documents)


async def leave_stats(session: AsyncSession, employee_id: str) -> LeaveStatsResponse:
    """Count an employee's requests per status."""
    result = await session.execute(
        select(col(LeaveRequest.status), func.count())
        .where(col(LeaveRequest.employee_id) == employee_id)
        .group_by(col(LeaveRequest.status))
    )
    counts: dict[str, int] = dict(result.tuples().all())
    return LeaveStatsResponse(
        employee_id=employee_id,
        total=sum(counts.values()),
        pending=counts.get(LeaveStatus.PENDING.value, 0),
        approved=counts.get(LeaveStatus.APPROVED.value, 0),
        rejected=counts.get(LeaveStatus.REJECTED.value, 0),
        cancelled=counts.get(LeaveStatus.CANCELLED.value, 0),
    )
