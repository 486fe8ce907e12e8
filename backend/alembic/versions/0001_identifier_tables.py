"""Sequence counters, issued batches and serial mappings.

Revision ID: 0001
Revises:
Create Date: 2026-01-12
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "sequence_counters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("scope_kind", sa.String(10), nullable=False),
        sa.Column("scope_key", sa.String(32), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        sa.Column("ceiling", sa.Integer(), nullable=False),
        # Audit
        sa.Column("created_at", sa.DateTime()),
        sa.Column("last_issued_at", sa.DateTime()),
        sa.Column("last_issued_by", sa.String(100)),
        sa.UniqueConstraint("scope_kind", "scope_key", name="uq_sequence_counters_scope"),
        sa.CheckConstraint("last_value >= 0", name="ck_sequence_counters_non_negative"),
        sa.CheckConstraint("last_value <= ceiling", name="ck_sequence_counters_ceiling"),
    )

    op.create_table(
        "issued_batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("batch_number", sa.String(16), nullable=False),
        # Decoded fields
        sa.Column("site_id", sa.Integer(), nullable=False),
        sa.Column("batch_type", sa.Integer(), nullable=False),
        sa.Column("batch_date", sa.Date(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("requested_by", sa.String(100)),
        sa.Column("created_at", sa.DateTime()),
        sa.UniqueConstraint(
            "site_id", "batch_type", "batch_date", "sequence",
            name="uq_issued_batches_scope_sequence",
        ),
    )
    op.create_index(
        "ix_issued_batches_batch_number", "issued_batches", ["batch_number"], unique=True
    )
    op.create_index("ix_issued_batches_batch_date", "issued_batches", ["batch_date"])

    op.create_table(
        "serial_mappings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("full_serial", sa.String(30), nullable=False, unique=True),
        sa.Column("short_serial", sa.String(13), nullable=False, unique=True),
        sa.Column("batch_number", sa.String(16), nullable=False),
        # Decoded fields
        sa.Column("site_id", sa.Integer(), nullable=False),
        sa.Column("strain_code", sa.Integer(), nullable=False),
        sa.Column("batch_type", sa.Integer(), nullable=False),
        sa.Column("batch_date", sa.Date(), nullable=False),
        sa.Column("batch_sequence", sa.Integer(), nullable=False),
        sa.Column("unit_sequence", sa.Integer(), nullable=False),
        sa.Column("weight_tenths_gram", sa.Integer(), nullable=False),
        sa.Column("pack_size", sa.Integer(), nullable=False),
        sa.Column("requested_by", sa.String(100)),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_serial_mappings_batch_number", "serial_mappings", ["batch_number"])
    op.create_index("ix_serial_mappings_strain_code", "serial_mappings", ["strain_code"])
    op.create_index("ix_serial_mappings_batch_date", "serial_mappings", ["batch_date"])
    op.create_index("ix_serial_mappings_created_at", "serial_mappings", ["created_at"])


def downgrade() -> None:
    op.drop_table("serial_mappings")
    op.drop_table("issued_batches")
    op.drop_table("sequence_counters")
