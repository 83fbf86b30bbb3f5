from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveLedgerEntry(UUIDBase, TimestampMixin, table=True):
    """Append-only journal entry recording every balance mutation.

    The employee balance columns stay authoritative; the journal is the audit
    trail and, through its unique constraint, the guard against a request
    being debited or credited twice.
    """

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.Index("ix_ledger_employee_type", "employee_id", "leave_type"),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_ledger_idempotency"),
    )

    employee_id: str = Field(
        sa_column=sa.Column(
            sa.String(50), sa.ForeignKey("employee.employee_id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    leave_type: str = Field(max_length=20)
    entry_type: str = Field(max_length=50)
    amount_days: int
    balance_after: int
    source_type: str = Field(max_length=50)
    source_id: str = Field(max_length=255)
    note: str | None = None
