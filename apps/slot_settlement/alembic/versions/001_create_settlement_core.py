"""Create participant directory, transfer log and settlement batch tables.

Revision ID: 001_create_settlement_core
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_create_settlement_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


transfer_status_enum = sa.Enum(
    "offered",
    "claimed",
    "retracted",
    "reassigned",
    "admin-reassigned",
    "expired",
    name="transfer_status",
)
batch_status_enum = sa.Enum("active", "settled", name="batch_status")
pairing_status_enum = sa.Enum("pending", "completed", name="pairing_status")


def upgrade() -> None:
    op.create_table(
        "participants",
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "opted_in",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "role",
            sa.String(length=32),
            nullable=False,
            server_default="player",
        ),
        sa.Column("color", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("name"),
        sa.UniqueConstraint("email", name="uq_participants_email"),
    )

    op.create_table(
        "slot_transfers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=32), nullable=False),
        sa.Column("time_range", sa.String(length=64), nullable=False),
        sa.Column("giving_participant", sa.String(length=120), nullable=False),
        sa.Column(
            "claiming_participant",
            sa.String(length=120),
            nullable=False,
            server_default="",
        ),
        sa.Column("status", transfer_status_enum, nullable=False),
        sa.Column(
            "swap_requested",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "settled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_slot_transfers_position",
        "slot_transfers",
        ["position"],
        unique=True,
    )

    op.create_table(
        "settlement_batches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", batch_status_enum, nullable=False),
        sa.Column("created_by", sa.String(length=120), nullable=True),
        sa.Column("pairings_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "period_end >= period_start",
            name="ck_settlement_batches_period_valid",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "settlement_pairings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("batch_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("creditor_participant", sa.String(length=120), nullable=False),
        sa.Column("debtor_participant", sa.String(length=120), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", pairing_status_enum, nullable=False),
        sa.Column("completed_by", sa.String(length=120), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_settlement_pairings_amount_positive"),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["settlement_batches.id"],
            name="fk_settlement_pairings_batch_id",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_settlement_pairings_batch_id",
        "settlement_pairings",
        ["batch_id"],
        unique=False,
    )

    op.create_table(
        "settlement_batch_transfers",
        sa.Column("batch_id", sa.Uuid(), nullable=False),
        sa.Column("transfer_id", sa.String(length=64), nullable=False),
        sa.Column("giving_participant", sa.String(length=120), nullable=False),
        sa.Column("claiming_participant", sa.String(length=120), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["settlement_batches.id"],
            name="fk_settlement_batch_transfers_batch_id",
        ),
        sa.PrimaryKeyConstraint("batch_id", "transfer_id"),
    )


def downgrade() -> None:
    op.drop_table("settlement_batch_transfers")
    op.drop_index(
        "ix_settlement_pairings_batch_id",
        table_name="settlement_pairings",
    )
    op.drop_table("settlement_pairings")
    op.drop_table("settlement_batches")
    op.drop_index("ix_slot_transfers_position", table_name="slot_transfers")
    op.drop_table("slot_transfers")
    op.drop_table("participants")
    pairing_status_enum.drop(op.get_bind(), checkfirst=True)
    batch_status_enum.drop(op.get_bind(), checkfirst=True)
    transfer_status_enum.drop(op.get_bind(), checkfirst=True)
