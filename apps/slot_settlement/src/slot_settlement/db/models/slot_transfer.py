"""Slot transfer log ORM model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from slot_settlement.db.base import Base
from slot_settlement.domain.records import TransferStatus


class SlotTransfer(Base):
    """One row of the ordered slot transfer log."""

    __tablename__ = "slot_transfers"
    __table_args__ = (
        Index("ix_slot_transfers_position", "position", unique=True),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid4())
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    time_range: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    giving_participant: Mapped[str] = mapped_column(String(120), nullable=False)
    claiming_participant: Mapped[str] = mapped_column(
        String(120), nullable=False, default="", server_default=""
    )
    status: Mapped[TransferStatus] = mapped_column(
        Enum(
            TransferStatus,
            name="transfer_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    swap_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    settled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
