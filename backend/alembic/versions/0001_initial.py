"""Initial schema: employees, leave requests, documents, notifications, ledger journal.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "employee",
        sa.Column("employee_id", sa.String(length=50), primary_key=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("mobile_number", sa.String(length=50), nullable=True),
        sa.Column("designation", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("joining_date", sa.Date(), nullable=True),
        sa.Column("current_posting", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=1024), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="Active", nullable=False),
        sa.Column("cl_balance", sa.Integer(), server_default="16", nullable=False),
        sa.Column("el_balance", sa.Integer(), server_default="18", nullable=False),
        sa.Column("rh_balance", sa.Integer(), server_default="3", nullable=False),
        _created_at(),
    )
    op.create_index("ix_employee_email", "employee", ["email"], unique=True)
    op.create_index("ix_employee_status", "employee", ["status"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "employee_id",
            sa.String(length=50),
            sa.ForeignKey("employee.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("designation", sa.String(length=255), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="Pending", nullable=False),
        sa.Column("cancel_request_status", sa.String(length=20), server_default="None", nullable=False),
        sa.Column("cancel_reason", sa.String(), nullable=True),
        sa.Column("remarks", sa.String(), nullable=True),
        sa.Column("decided_by", sa.String(length=50), nullable=True),
        sa.Column("applied_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.CheckConstraint("days >= 1", name="ck_leave_request_days_positive"),
    )
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_applied_on", "leave_request", ["applied_on"])
    op.create_index("ix_leave_request_employee_status", "leave_request", ["employee_id", "status"])

    op.create_table(
        "leave_document",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "leave_id",
            sa.Integer(),
            sa.ForeignKey("leave_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.String(length=1024), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        _created_at("uploaded_at"),
    )
    op.create_index("ix_leave_document_leave_id", "leave_document", ["leave_id"])

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(length=50), nullable=True),
        sa.Column("sender_id", sa.String(length=50), nullable=True),
        sa.Column("sender_name", sa.String(length=255), nullable=True),
        sa.Column("sender_avatar", sa.String(length=1024), nullable=True),
        sa.Column("is_read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _created_at(),
    )
    op.create_index("ix_notification_user_created", "notification", ["user_id", "created_at"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.String(length=50),
            sa.ForeignKey("employee.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("entry_type", sa.String(length=50), nullable=False),
        sa.Column("amount_days", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("source_type", sa.String(length=50), nullable=False),
        sa.Column("source_id", sa.String(length=255), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_ledger_idempotency"),
    )
    op.create_index("ix_leave_ledger_entry_employee_id", "leave_ledger_entry", ["employee_id"])
    op.create_index("ix_ledger_employee_type", "leave_ledger_entry", ["employee_id", "leave_type"])


def downgrade() -> None:
    # Reverse dependency order
    for table in ("leave_ledger_entry", "notification", "leave_document", "leave_request", "employee"):
        op.drop_table(table)
