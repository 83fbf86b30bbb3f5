# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.document import AttachDocumentPayload, DocumentListResponse, DocumentResponse
from leave_ledger.schemas.leave import (
    CancelApprovedPayload,
    CancellationAck,
    CancellationRequestPayload,
    CancelPayload,
    LeaveDetailResponse,
    LeaveListResponse,
    LeaveResponse,
    RejectPayload,
    SubmitLeavePayload,
)
from leave_ledger.services import document as document_service
from leave_ledger.services import leave as leave_service

leaves_router = APIRouter(prefix="/leaves", tags=["leaves"])


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Submit a new leave request."""
    return await leave_service.submit_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    employee_id: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
) -> LeaveListResponse:
    """List leave requests, newest first."""
    return await leave_service.list_leaves(session, employee_id, status_filter)


@leaves_router.get("/{request_id}", response_model=LeaveDetailResponse)
async def get_leave(
    request_id: int,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveDetailResponse:
    """Get a leave request with its documents."""
    return await leave_service.get_leave(session, request_id)


@leaves_router.post("/{request_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    request_id: int,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveResponse:
    """Approve a pending leave request and debit the balance (admin only)."""
    return await leave_service.approve_leave(session, auth, request_id)


@leaves_router.post("/{request_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    request_id: int,
    session: SessionDep,
    auth: AdminDep,
    payload: RejectPayload | None = None,
) -> LeaveResponse:
    """Reject a pending leave request (admin only)."""
    return await leave_service.reject_leave(session, auth, request_id, payload.remarks if payload else None)


@leaves_router.post("/{request_id}/cancel", response_model=LeaveResponse)
async def cancel_leave(
    request_id: int,
    session: SessionDep,
    auth: AuthDep,
    payload: CancelPayload | None = None,
) -> LeaveResponse:
    """Cancel a pending or approved leave request."""
    return await leave_service.cancel_leave(session, auth, request_id, payload.reason if payload else None)


@leaves_router.post("/{request_id}/cancel-approved", response_model=LeaveResponse)
async def cancel_approved_leave(
    request_id: int,
    payload: CancelApprovedPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Cancel an approved leave request within the cancellation window."""
    return await leave_service.cancel_approved_leave(session, auth, request_id, payload)


@leaves_router.post("/{request_id}/cancellation-request", response_model=CancellationAck)
async def request_cancellation(
    request_id: int,
    payload: CancellationRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CancellationAck:
    """Ask an admin to cancel an approved leave request."""
    return await leave_service.request_cancellation(session, auth, request_id, payload)


@leaves_router.post("/{request_id}/cancellation-request/approve", response_model=CancellationAck)
async def approve_cancellation(
    request_id: int,
    session: SessionDep,
    auth: AdminDep,
) -> CancellationAck:
    """Grant a pending cancellation request (admin only)."""
    return await leave_service.approve_cancellation(session, auth, request_id)


@leaves_router.post("/{request_id}/cancellation-request/reject", response_model=CancellationAck)
async def reject_cancellation(
    request_id: int,
    session: SessionDep,
    auth: AdminDep,
    payload: RejectPayload | None = None,
) -> CancellationAck:
    """Refuse a pending cancellation request (admin only)."""
    return await leave_service.reject_cancellation(session, auth, request_id, payload.remarks if payload else None)


@leaves_router.post(
    "/{request_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def attach_document(
    request_id: int,
    payload: AttachDocumentPayload,
    session: SessionDep,
    auth: AuthDep,
) -> DocumentResponse:
    """Attach a document reference to a leave request."""
    return await document_service.attach_document(session, request_id, payload)


@leaves_router.get("/{request_id}/documents", response_model=DocumentListResponse)
async def list_documents(
    request_id: int,
    session: SessionDep,
    auth: AuthDep,
) -> DocumentListResponse:
    """List document references for a leave request."""
    return await document_service.list_documents(session, request_id)
