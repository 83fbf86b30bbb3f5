# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AttachDocumentPayload(BaseModel):
    """Metadata for a document already stored by the file store."""

    file_name: str = Field(min_length=1, max_length=255)
    file_url: str = Field(min_length=1, max_length=1024)
    file_size: int | None = Field(default=None, ge=0)


class DocumentResponse(BaseModel):
    """Response schema for a document reference."""

    id: int
    leave_id: int
    file_name: str
    file_url: str
    file_size: int | None
    uploaded_at: datetime


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]
    total: int
