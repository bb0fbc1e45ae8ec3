"""Slot transfer log persistence operations."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from slot_settlement.db.models.slot_transfer import SlotTransfer
from slot_settlement.domain.errors import (
    InvalidRequestError,
    TransactionNotFoundError,
    compose_error_message,
)
from slot_settlement.domain.records import (
    MUTABLE_RECORD_FIELDS,
    TransactionRecord,
    parse_flag,
    parse_status,
)
from slot_settlement.domain.slot_calendar import normalize_day_month


def to_record(row: SlotTransfer) -> TransactionRecord:
    """Map one log row into the closed record type used by the ledger."""

    return TransactionRecord(
        id=row.id,
        date=row.date,
        time_range=row.time_range,
        giving_participant=row.giving_participant,
        claiming_participant=row.claiming_participant,
        status=row.status,
        swap_requested=row.swap_requested,
        settled=row.settled,
    )


def validate_field_updates(fields: Mapping[str, object]) -> dict[str, object]:
    """Normalize a partial update restricted to the mutable record fields."""

    unknown = sorted(set(fields) - MUTABLE_RECORD_FIELDS)
    if unknown:
        raise InvalidRequestError(
            message=compose_error_message(
                cause="Only status, settled and claiming_participant may change.",
                action="Remove the other fields from the update.",
            ),
            details={"fields": unknown},
        )
    normalized: dict[str, object] = {}
    if "status" in fields:
        normalized["status"] = parse_status(fields["status"])
    if "settled" in fields:
        normalized["settled"] = parse_flag(fields["settled"], field_name="settled")
    if "claiming_participant" in fields:
        normalized["claiming_participant"] = str(
            fields["claiming_participant"] or ""
        ).strip()
    return normalized


class SlotTransferRepository:
    """Transaction log backed by the ``slot_transfers`` table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def fetch_all_records(self) -> list[TransactionRecord]:
        """Full scan in log order."""

        statement = select(SlotTransfer).order_by(SlotTransfer.position.asc())
        return [to_record(row) for row in self._session.scalars(statement).all()]

    def update_record_fields(
        self, record_id: str, fields: Mapping[str, object]
    ) -> None:
        """Apply a partial update to one record in a single flush."""

        normalized = validate_field_updates(fields)
        row = self._session.get(SlotTransfer, record_id, with_for_update=True)
        if row is None:
            raise TransactionNotFoundError(details={"record_id": record_id})
        for field_name, value in normalized.items():
            setattr(row, field_name, value)
        self._session.flush()

    def append_record(self, record: TransactionRecord) -> TransactionRecord:
        """Append a record at the end of the log."""

        last_position = self._session.scalar(
            select(func.coalesce(func.max(SlotTransfer.position), 0))
        )
        row = SlotTransfer(
            id=record.id,
            position=int(last_position or 0) + 1,
            date=normalize_day_month(record.date),
            time_range=record.time_range,
            giving_participant=record.giving_participant,
            claiming_participant=record.claiming_participant,
            status=record.status,
            swap_requested=record.swap_requested,
            settled=record.settled,
        )
        self._session.add(row)
        self._session.flush()
        return to_record(row)
