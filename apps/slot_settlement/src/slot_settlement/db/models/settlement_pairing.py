"""Settlement pairing ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from slot_settlement.db.base import Base


class PairingStatus(enum.StrEnum):
    """Pairing confirmation states."""

    PENDING = "pending"
    COMPLETED = "completed"


class SettlementPairing(Base):
    """One payment instruction persisted inside a batch."""

    __tablename__ = "settlement_pairings"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_settlement_pairings_amount_positive"),
        Index("ix_settlement_pairings_batch_id", "batch_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    batch_id: Mapped[UUID] = mapped_column(
        ForeignKey("settlement_batches.id"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    creditor_participant: Mapped[str] = mapped_column(String(120), nullable=False)
    debtor_participant: Mapped[str] = mapped_column(String(120), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[PairingStatus] = mapped_column(
        Enum(
            PairingStatus,
            name="pairing_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=PairingStatus.PENDING,
    )
    completed_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    batch: Mapped[Any] = relationship("SettlementBatch", back_populates="pairings")
