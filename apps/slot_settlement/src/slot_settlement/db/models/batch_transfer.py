"""Link between a batch and the log records underlying its pairings."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from slot_settlement.db.base import Base


class BatchTransfer(Base):
    """Slot transfer that contributed to a batch's ledger computation."""

    __tablename__ = "settlement_batch_transfers"

    batch_id: Mapped[UUID] = mapped_column(
        ForeignKey("settlement_batches.id"),
        primary_key=True,
    )
    transfer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    giving_participant: Mapped[str] = mapped_column(String(120), nullable=False)
    claiming_participant: Mapped[str] = mapped_column(String(120), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    batch: Mapped[Any] = relationship("SettlementBatch", back_populates="transfers")
