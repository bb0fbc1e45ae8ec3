"""Persistence operations for settlement batches and pairings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, cast
from uuid import UUID

from sqlalchemy import CursorResult, func, select, update
from sqlalchemy.orm import Session

from slot_settlement.db.models.batch_transfer import BatchTransfer
from slot_settlement.db.models.settlement_batch import BatchStatus, SettlementBatch
from slot_settlement.db.models.settlement_pairing import (
    PairingStatus,
    SettlementPairing,
)
from slot_settlement.domain.money import ZERO, quantize_money


@dataclass(slots=True, frozen=True)
class BatchTotals:
    """Aggregate size of the transactions underlying one batch."""

    total_slots: int
    total_amount: Decimal


@dataclass(slots=True, frozen=True)
class NewPairing:
    """Pairing values to persist for one payment instruction."""

    creditor_participant: str
    debtor_participant: str
    amount: Decimal


@dataclass(slots=True, frozen=True)
class NewBatchTransfer:
    """Transaction contributing to a batch, with the amount it carried."""

    transfer_id: str
    giving_participant: str
    claiming_participant: str
    amount: Decimal


class SettlementBatchRepository:
    """Repository for batches, their pairings and underlying transfers."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add_batch(
        self,
        *,
        name: str,
        period_start: date,
        period_end: date,
        created_by: str | None,
        created_at: datetime,
    ) -> SettlementBatch:
        batch = SettlementBatch(
            name=name,
            period_start=period_start,
            period_end=period_end,
            status=BatchStatus.ACTIVE,
            created_by=created_by,
            created_at=created_at,
        )
        self._session.add(batch)
        self._session.flush()
        return batch

    def get_batch(self, batch_id: UUID) -> SettlementBatch | None:
        return self._session.get(SettlementBatch, batch_id)

    def get_batch_for_update(self, batch_id: UUID) -> SettlementBatch | None:
        """Fetch and lock one batch row."""

        statement = (
            select(SettlementBatch)
            .where(SettlementBatch.id == batch_id)
            .with_for_update()
        )
        return self._session.scalar(statement)

    def list_batches(self) -> list[SettlementBatch]:
        statement = select(SettlementBatch).order_by(
            SettlementBatch.created_at.desc(),
            SettlementBatch.name.asc(),
        )
        return list(self._session.scalars(statement).all())

    def count_pairings(self, batch_id: UUID) -> int:
        statement = select(func.count(SettlementPairing.id)).where(
            SettlementPairing.batch_id == batch_id
        )
        return int(self._session.scalar(statement) or 0)

    def claim_pairing_generation(self, batch_id: UUID, now: datetime) -> bool:
        """Mark pairing generation as started; False when another run won."""

        statement = (
            update(SettlementBatch)
            .where(
                SettlementBatch.id == batch_id,
                SettlementBatch.status == BatchStatus.ACTIVE,
                SettlementBatch.pairings_generated_at.is_(None),
            )
            .values(pairings_generated_at=now)
        )
        return self._rowcount(self._session.execute(statement)) == 1

    def mark_settled(self, batch_id: UUID, now: datetime) -> bool:
        """Move an active batch to settled; False when it was not active."""

        statement = (
            update(SettlementBatch)
            .where(
                SettlementBatch.id == batch_id,
                SettlementBatch.status == BatchStatus.ACTIVE,
            )
            .values(status=BatchStatus.SETTLED, settled_at=now)
        )
        return self._rowcount(self._session.execute(statement)) == 1

    def add_pairings(
        self,
        *,
        batch_id: UUID,
        pairings: Sequence[NewPairing],
        created_at: datetime,
    ) -> list[SettlementPairing]:
        rows = [
            SettlementPairing(
                batch_id=batch_id,
                position=index,
                creditor_participant=item.creditor_participant,
                debtor_participant=item.debtor_participant,
                amount=item.amount,
                status=PairingStatus.PENDING,
                created_at=created_at,
            )
            for index, item in enumerate(pairings, start=1)
        ]
        self._session.add_all(rows)
        self._session.flush()
        return rows

    def add_batch_transfers(
        self,
        *,
        batch_id: UUID,
        transfers: Sequence[NewBatchTransfer],
    ) -> None:
        self._session.add_all(
            [
                BatchTransfer(
                    batch_id=batch_id,
                    transfer_id=item.transfer_id,
                    giving_participant=item.giving_participant,
                    claiming_participant=item.claiming_participant,
                    amount=item.amount,
                )
                for item in transfers
            ]
        )
        self._session.flush()

    def list_pairings(self, batch_id: UUID) -> list[SettlementPairing]:
        statement = (
            select(SettlementPairing)
            .where(SettlementPairing.batch_id == batch_id)
            .order_by(SettlementPairing.position.asc())
        )
        return list(self._session.scalars(statement).all())

    def get_pairing_for_update(self, pairing_id: UUID) -> SettlementPairing | None:
        statement = (
            select(SettlementPairing)
            .where(SettlementPairing.id == pairing_id)
            .with_for_update()
        )
        return self._session.scalar(statement)

    def list_transfer_ids(self, batch_id: UUID) -> list[str]:
        statement = (
            select(BatchTransfer.transfer_id)
            .where(BatchTransfer.batch_id == batch_id)
            .order_by(BatchTransfer.transfer_id.asc())
        )
        return list(self._session.scalars(statement).all())

    def list_transfer_ids_held_by_other_active_batches(
        self, batch_id: UUID
    ) -> set[str]:
        """Transfers already billed by another batch that is not settled yet."""

        statement = (
            select(BatchTransfer.transfer_id)
            .join(SettlementBatch, SettlementBatch.id == BatchTransfer.batch_id)
            .where(
                SettlementBatch.status == BatchStatus.ACTIVE,
                BatchTransfer.batch_id != batch_id,
            )
        )
        return set(self._session.scalars(statement).all())

    def get_totals_by_batch(self) -> dict[UUID, BatchTotals]:
        statement = select(
            BatchTransfer.batch_id,
            func.count(BatchTransfer.transfer_id),
            func.coalesce(func.sum(BatchTransfer.amount), ZERO),
        ).group_by(BatchTransfer.batch_id)
        return {
            batch_id: BatchTotals(
                total_slots=int(count),
                total_amount=quantize_money(Decimal(str(amount))),
            )
            for batch_id, count, amount in self._session.execute(statement).all()
        }

    @staticmethod
    def _rowcount(result: Any) -> int:
        return int(cast("CursorResult[Any]", result).rowcount)
