from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import NotFoundError
from leave_ledger.models.document import LeaveDocument
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.document import DocumentListResponse, DocumentResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.document import AttachDocumentPayload

logger = logging.getLogger(__name__)


def build_document_response(document: LeaveDocument) -> DocumentResponse:
    """Map a document model to its response schema."""
    return DocumentResponse(
        id=document.id,  # type: ignore[arg-type]
        leave_id=document.leave_id,
        file_name=document.file_name,
        file_url=document.file_url,
        file_size=document.file_size,
        uploaded_at=document.uploaded_at,
    )


async def attach_document(
    session: AsyncSession,
    request_id: int,
    payload: AttachDocumentPayload,
) -> DocumentResponse:
    """Record a reference to a document the file store already holds."""
    if await session.get(LeaveRequest, request_id) is None:
        raise NotFoundError("Leave request not found")

    document = LeaveDocument(
        leave_id=request_id,
        file_name=payload.file_name,
        file_url=payload.file_url,
        file_size=payload.file_size,
    )
    session.add(document)
    await session.commit()
    await session.refresh(document)
    logger.info("Attached document %s to leave %s", document.id, request_id)
    return build_document_response(document)


async def list_documents(session: AsyncSession, request_id: int) -> DocumentListResponse:
    """List document references for a request, oldest first."""
    if await session.get(LeaveRequest, request_id) is None:
        raise NotFoundError("Leave request not found")

    result = await session.execute(
        select(LeaveDocument)
        .where(col(LeaveDocument.leave_id) == request_id)
        .order_by(col(LeaveDocument.uploaded_at))
    )
    documents = [build_document_response(d) for d in result.scalars().all()]
    return DocumentListResponse(items=documents, total=len(documents))
