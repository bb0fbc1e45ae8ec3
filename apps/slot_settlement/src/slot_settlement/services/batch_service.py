"""Settlement batch lifecycle: creation, pairing, completion and closure."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from slot_settlement.core.settings import get_settings
from slot_settlement.db.models.settlement_batch import BatchStatus, SettlementBatch
from slot_settlement.db.models.settlement_pairing import (
    PairingStatus,
    SettlementPairing,
)
from slot_settlement.domain.errors import (
    BatchNotFoundError,
    InvalidBatchStateError,
    InvalidRequestError,
    PairingNotFoundError,
    PairingPartyMismatchError,
    PairingsAlreadyGeneratedError,
    TransactionNotFoundError,
    compose_error_message,
)
from slot_settlement.domain.money import ZERO
from slot_settlement.domain.records import ParticipantPreference, TransactionRecord
from slot_settlement.domain.slot_calendar import parse_day_month
from slot_settlement.repositories.batch_repository import (
    BatchTotals,
    NewBatchTransfer,
    NewPairing,
)
from slot_settlement.services.debt_simplifier import simplify
from slot_settlement.services.ledger_builder import (
    SlotPricing,
    build_balances,
    classify_records,
    default_pricing,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class TransactionLogProtocol(Protocol):
    """Transaction log collaborator."""

    def fetch_all_records(self) -> list[TransactionRecord]: ...

    def update_record_fields(
        self, record_id: str, fields: Mapping[str, object]
    ) -> None: ...


class ParticipantDirectoryProtocol(Protocol):
    """Participant directory collaborator."""

    def fetch_all(self) -> dict[str, ParticipantPreference]: ...


class BatchRepositoryProtocol(Protocol):
    """Batch repository contract consumed by service."""

    def add_batch(
        self,
        *,
        name: str,
        period_start: date,
        period_end: date,
        created_by: str | None,
        created_at: datetime,
    ) -> SettlementBatch: ...

    def get_batch(self, batch_id: UUID) -> SettlementBatch | None: ...

    def get_batch_for_update(self, batch_id: UUID) -> SettlementBatch | None: ...

    def list_batches(self) -> list[SettlementBatch]: ...

    def count_pairings(self, batch_id: UUID) -> int: ...

    def claim_pairing_generation(self, batch_id: UUID, now: datetime) -> bool: ...

    def mark_settled(self, batch_id: UUID, now: datetime) -> bool: ...

    def add_pairings(
        self,
        *,
        batch_id: UUID,
        pairings: Sequence[NewPairing],
        created_at: datetime,
    ) -> list[SettlementPairing]: ...

    def add_batch_transfers(
        self,
        *,
        batch_id: UUID,
        transfers: Sequence[NewBatchTransfer],
    ) -> None: ...

    def list_pairings(self, batch_id: UUID) -> list[SettlementPairing]: ...

    def get_pairing_for_update(
        self, pairing_id: UUID
    ) -> SettlementPairing | None: ...

    def list_transfer_ids(self, batch_id: UUID) -> list[str]: ...

    def list_transfer_ids_held_by_other_active_batches(
        self, batch_id: UUID
    ) -> set[str]: ...

    def get_totals_by_batch(self) -> dict[UUID, BatchTotals]: ...


@dataclass(slots=True, frozen=True)
class CreateBatchInput:
    """Input model for batch creation."""

    name: str
    period_start: date | None
    period_end: date | None
    created_by: str | None = None


@dataclass(slots=True, frozen=True)
class BatchSummary:
    """Batch together with the size of its underlying transactions."""

    batch: SettlementBatch
    totals: BatchTotals


def _default_now() -> datetime:
    return datetime.now(tz=ZoneInfo(get_settings().app_timezone))


class SettlementBatchService:
    """Coordinates the active -> settled batch state machine.

    Operator privilege is checked by the caller. The rule that only the two
    parties of a pairing may confirm it is enforced here.
    """

    def __init__(
        self,
        *,
        batch_repository: BatchRepositoryProtocol,
        transaction_log: TransactionLogProtocol,
        participant_directory: ParticipantDirectoryProtocol,
        session: SessionProtocol,
        pricing: SlotPricing | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._batch_repository = batch_repository
        self._transaction_log = transaction_log
        self._participant_directory = participant_directory
        self._session = session
        self._pricing = pricing or default_pricing()
        self._now_provider = now_provider or _default_now

    def create_batch(self, payload: CreateBatchInput) -> SettlementBatch:
        name = payload.name.strip() if payload.name else ""
        if not name:
            raise InvalidRequestError(
                message=compose_error_message(
                    cause="Batch name is required.",
                    action="Provide a non-empty batch name.",
                )
            )
        if payload.period_start is None or payload.period_end is None:
            raise InvalidRequestError(
                message=compose_error_message(
                    cause="Batch period start and end are required.",
                    action="Provide both dates of the settlement period.",
                )
            )
        if payload.period_start > payload.period_end:
            raise InvalidRequestError(
                message=compose_error_message(
                    cause="Batch period starts after it ends.",
                    action="Use a start date on or before the end date.",
                ),
                details={
                    "period_start": payload.period_start.isoformat(),
                    "period_end": payload.period_end.isoformat(),
                },
            )

        try:
            batch = self._batch_repository.add_batch(
                name=name,
                period_start=payload.period_start,
                period_end=payload.period_end,
                created_by=payload.created_by,
                created_at=self._now_provider(),
            )
            self._session.commit()
            self._session.refresh(batch)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "batch_created",
            extra={
                "batch_id": str(batch.id),
                "period_start": batch.period_start.isoformat(),
                "period_end": batch.period_end.isoformat(),
                "created_by": payload.created_by,
            },
        )
        return batch

    def get_batch(self, batch_id: UUID) -> SettlementBatch:
        batch = self._batch_repository.get_batch(batch_id)
        if batch is None:
            raise BatchNotFoundError(details={"batch_id": str(batch_id)})
        return batch

    def list_batches(self) -> list[BatchSummary]:
        totals = self._batch_repository.get_totals_by_batch()
        empty = BatchTotals(total_slots=0, total_amount=ZERO)
        return [
            BatchSummary(batch=batch, totals=totals.get(batch.id, empty))
            for batch in self._batch_repository.list_batches()
        ]

    def list_pairings(self, batch_id: UUID) -> list[SettlementPairing]:
        self.get_batch(batch_id)
        return self._batch_repository.list_pairings(batch_id)

    def generate_pairings(self, batch_id: UUID) -> list[SettlementPairing]:
        """Compute and persist pairings once for the batch period."""

        batch = self._batch_repository.get_batch_for_update(batch_id)
        if batch is None:
            raise BatchNotFoundError(details={"batch_id": str(batch_id)})
        if batch.status != BatchStatus.ACTIVE:
            logger.warning(
                "pairing_generation_rejected",
                extra={"batch_id": str(batch_id), "status": batch.status.value},
            )
            raise InvalidBatchStateError(
                details={"batch_id": str(batch_id), "status": batch.status.value}
            )
        if (
            batch.pairings_generated_at is not None
            or self._batch_repository.count_pairings(batch_id) > 0
        ):
            raise PairingsAlreadyGeneratedError(details={"batch_id": str(batch_id)})

        now = self._now_provider()
        try:
            if not self._batch_repository.claim_pairing_generation(batch_id, now):
                raise PairingsAlreadyGeneratedError(
                    details={"batch_id": str(batch_id)}
                )

            preferences = self._participant_directory.fetch_all()
            held_elsewhere = (
                self._batch_repository.list_transfer_ids_held_by_other_active_batches(
                    batch_id
                )
            )
            records: list[TransactionRecord] = []
            skipped_held = 0
            for record in self._transaction_log.fetch_all_records():
                if not _in_period(record, batch):
                    continue
                if record.id in held_elsewhere:
                    skipped_held += 1
                    continue
                records.append(record)
            classifications = classify_records(
                records, preferences, pricing=self._pricing
            )
            balances = build_balances(records, preferences, pricing=self._pricing)
            instructions = simplify(balances, preferences)

            pairings = self._batch_repository.add_pairings(
                batch_id=batch_id,
                pairings=[
                    NewPairing(
                        creditor_participant=item.to_participant,
                        debtor_participant=item.from_participant,
                        amount=item.amount,
                    )
                    for item in instructions
                ],
                created_at=now,
            )
            self._batch_repository.add_batch_transfers(
                batch_id=batch_id,
                transfers=[
                    NewBatchTransfer(
                        transfer_id=item.record.id,
                        giving_participant=item.record.giving_participant,
                        claiming_participant=item.record.claiming_participant,
                        amount=item.amount,
                    )
                    for item in classifications
                    if item.included
                ],
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "pairings_generated",
            extra={
                "batch_id": str(batch_id),
                "records_in_period": len(records),
                "records_held_by_other_batches": skipped_held,
                "pairings": len(pairings),
            },
        )
        return pairings

    def complete_pairing(
        self, pairing_id: UUID, completed_by: str
    ) -> SettlementPairing:
        """Record that one of the two parties confirmed the payment."""

        confirming_participant = completed_by.strip() if completed_by else ""
        if not confirming_participant:
            raise InvalidRequestError(
                message=compose_error_message(
                    cause="The confirming participant is required.",
                    action="Provide the name of the creditor or the debtor.",
                )
            )

        pairing = self._batch_repository.get_pairing_for_update(pairing_id)
        if pairing is None:
            raise PairingNotFoundError(details={"pairing_id": str(pairing_id)})
        if confirming_participant not in (
            pairing.creditor_participant,
            pairing.debtor_participant,
        ):
            logger.warning(
                "pairing_completion_rejected",
                extra={
                    "pairing_id": str(pairing_id),
                    "completed_by": confirming_participant,
                },
            )
            raise PairingPartyMismatchError(
                details={
                    "pairing_id": str(pairing_id),
                    "completed_by": confirming_participant,
                }
            )
        if pairing.status == PairingStatus.COMPLETED:
            logger.info(
                "pairing_completion_noop",
                extra={"pairing_id": str(pairing_id)},
            )
            return pairing

        try:
            pairing.status = PairingStatus.COMPLETED
            pairing.completed_by = confirming_participant
            pairing.completed_at = self._now_provider()
            self._session.commit()
            self._session.refresh(pairing)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "pairing_completed",
            extra={
                "pairing_id": str(pairing_id),
                "batch_id": str(pairing.batch_id),
                "completed_by": confirming_participant,
            },
        )
        return pairing

    def close_batch(self, batch_id: UUID) -> SettlementBatch:
        """Settle the batch and mark its underlying transactions settled.

        Pending pairings do not block closure.
        """

        batch = self._batch_repository.get_batch_for_update(batch_id)
        if batch is None:
            raise BatchNotFoundError(details={"batch_id": str(batch_id)})
        if batch.status != BatchStatus.ACTIVE:
            logger.warning(
                "batch_close_rejected",
                extra={"batch_id": str(batch_id), "status": batch.status.value},
            )
            raise InvalidBatchStateError(
                message=compose_error_message(
                    cause="Settlement batch is already settled.",
                    action="Closed batches cannot be closed again.",
                ),
                details={"batch_id": str(batch_id), "status": batch.status.value},
            )

        now = self._now_provider()
        pending_pairings = sum(
            1
            for pairing in self._batch_repository.list_pairings(batch_id)
            if pairing.status == PairingStatus.PENDING
        )
        try:
            if not self._batch_repository.mark_settled(batch_id, now):
                raise InvalidBatchStateError(details={"batch_id": str(batch_id)})
            transfer_ids = self._batch_repository.list_transfer_ids(batch_id)
            missing_ids: list[str] = []
            for transfer_id in transfer_ids:
                try:
                    self._transaction_log.update_record_fields(
                        transfer_id, {"settled": True}
                    )
                except TransactionNotFoundError:
                    missing_ids.append(transfer_id)
            if missing_ids:
                logger.warning(
                    "batch_transfers_missing_from_log",
                    extra={"batch_id": str(batch_id), "transfer_ids": missing_ids},
                )
            self._session.commit()
            self._session.refresh(batch)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "batch_settled",
            extra={
                "batch_id": str(batch_id),
                "settled_transfers": len(transfer_ids) - len(missing_ids),
                "pending_pairings": pending_pairings,
            },
        )
        return batch


def _in_period(record: TransactionRecord, batch: SettlementBatch) -> bool:
    # Records carry no year: date them by the batch period, never by the clock.
    years = sorted({batch.period_start.year, batch.period_end.year})
    record_dates = [parse_day_month(record.date, year=year) for year in years]
    if all(record_date is None for record_date in record_dates):
        logger.debug(
            "record_date_unparseable",
            extra={"record_id": record.id, "date": record.date},
        )
        return False
    return any(
        record_date is not None
        and batch.period_start <= record_date <= batch.period_end
        for record_date in record_dates
    )
