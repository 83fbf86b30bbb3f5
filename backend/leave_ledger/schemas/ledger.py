# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from leave_ledger.models.enums import LedgerEntryType, LedgerSourceType


class LedgerEntryResponse(BaseModel):
    """A single journal entry."""

    id: uuid.UUID
    employee_id: str
    leave_type: str
    entry_type: LedgerEntryType
    amount_days: int
    balance_after: int
    source_type: LedgerSourceType
    source_id: str
    note: str | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Journal entries, newest first."""

    items: list[LedgerEntryResponse]
    total: int
