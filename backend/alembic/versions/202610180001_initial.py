"""initial schema

Revision ID: 202610180001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "202610180001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SUBMISSION_TABLES = ("depo", "vendor", "dealer", "stall", "reader", "ooh")


def _collection_columns(prefix: str) -> list:
    return [
        sa.Column("accompanied_by", sa.Text(), nullable=True),
        sa.Column("dues_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("collection_mode", sa.String(length=20), nullable=True),
        sa.Column("collection_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("competition_newspapers", sa.JSON(), nullable=False),
        sa.Column("discussion", sa.Text(), nullable=True),
        sa.Column("outcome", sa.Text(), nullable=True),
        sa.CheckConstraint("dues_amount >= 0", name=f"chk_{prefix}_dues_amount"),
        sa.CheckConstraint("collection_amount >= 0", name=f"chk_{prefix}_collection_amount"),
    ]


def _create_submission_table(kind: str, *columns) -> None:
    table = f"submissions_{kind}"
    op.create_table(
        table,
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("area", sa.Text(), nullable=False),
        *columns,
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{table}_id", table, ["id"])
    op.create_index(f"ix_{table}_user_id", table, ["user_id"])
    op.create_index(f"ix_{table}_submitted_at", table, ["submitted_at"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("force_password_reset", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("idx_users_created_by", "users", ["created_by"])

    _create_submission_table(
        "depo",
        sa.Column("accompanied_by", sa.Text(), nullable=True),
        sa.Column("person_met", sa.Text(), nullable=False),
        sa.Column("competition_activity", sa.Text(), nullable=False),
        sa.Column("discussion", sa.Text(), nullable=True),
        sa.Column("outcome", sa.Text(), nullable=True),
    )
    _create_submission_table(
        "vendor",
        sa.Column("accompanied_by", sa.Text(), nullable=True),
        sa.Column("vendor_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("outcome", sa.Text(), nullable=True),
    )
    _create_submission_table(
        "dealer",
        sa.Column("dealer_name", sa.Text(), nullable=False),
        *_collection_columns("dealer"),
    )
    _create_submission_table(
        "stall",
        sa.Column("stall_owner", sa.Text(), nullable=False),
        *_collection_columns("stall"),
    )
    _create_submission_table(
        "reader",
        sa.Column("reader_name", sa.Text(), nullable=False),
        sa.Column("contact_details", sa.Text(), nullable=False),
        sa.Column("present_reading", sa.JSON(), nullable=False),
        sa.Column("readers_feedback", sa.Text(), nullable=True),
    )
    _create_submission_table(
        "ooh",
        sa.Column("segment", sa.String(length=50), nullable=False),
        sa.Column("contact_person", sa.Text(), nullable=False),
        sa.Column("existing_newspaper", sa.JSON(), nullable=False),
        sa.Column("feedback_suggestion", sa.Text(), nullable=True),
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("family_id", sa.String(length=128), nullable=False),
        sa.Column("token_jti", sa.String(length=128), nullable=False),
        sa.Column("replaced_by_jti", sa.String(length=128), nullable=True),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_refresh_tokens_id", "refresh_tokens", ["id"])
    op.create_index("ix_refresh_tokens_family_id", "refresh_tokens", ["family_id"])
    op.create_index("ix_refresh_tokens_token_jti", "refresh_tokens", ["token_jti"], unique=True)
    op.create_index("idx_refresh_tokens_user_family", "refresh_tokens", ["user_id", "family_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("idx_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("refresh_tokens")
    for kind in reversed(SUBMISSION_TABLES):
        op.drop_table(f"submissions_{kind}")
    op.drop_table("users")
