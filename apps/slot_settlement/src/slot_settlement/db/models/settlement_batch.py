"""Settlement batch ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, Enum, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from slot_settlement.db.base import Base


class BatchStatus(enum.StrEnum):
    """Batch lifecycle states; settled is terminal."""

    ACTIVE = "active"
    SETTLED = "settled"


class SettlementBatch(Base):
    """Operator-defined settlement period."""

    __tablename__ = "settlement_batches"
    __table_args__ = (
        CheckConstraint(
            "period_end >= period_start",
            name="ck_settlement_batches_period_valid",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[BatchStatus] = mapped_column(
        Enum(
            BatchStatus,
            name="batch_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=BatchStatus.ACTIVE,
    )
    created_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    pairings_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    settled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    pairings: Mapped[list[Any]] = relationship(
        "SettlementPairing",
        back_populates="batch",
        cascade="all, delete-orphan",
        order_by="SettlementPairing.position",
    )
    transfers: Mapped[list[Any]] = relationship(
        "BatchTransfer",
        back_populates="batch",
        cascade="all, delete-orphan",
    )
