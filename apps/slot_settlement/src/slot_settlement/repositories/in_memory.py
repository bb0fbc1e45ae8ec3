"""In-memory collaborators used by offline adapters and tests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from slot_settlement.domain.errors import TransactionNotFoundError
from slot_settlement.domain.records import ParticipantPreference, TransactionRecord
from slot_settlement.repositories.transfer_log_repository import (
    validate_field_updates,
)


class InMemoryTransactionLog:
    """Ordered transaction log kept in a Python list."""

    def __init__(self, records: Iterable[TransactionRecord] = ()) -> None:
        self.records: list[TransactionRecord] = list(records)

    def fetch_all_records(self) -> list[TransactionRecord]:
        return list(self.records)

    def update_record_fields(
        self, record_id: str, fields: Mapping[str, object]
    ) -> None:
        normalized = validate_field_updates(fields)
        for index, record in enumerate(self.records):
            if record.id == record_id:
                self.records[index] = replace(
                    record, **normalized  # type: ignore[arg-type]
                )
                return
        raise TransactionNotFoundError(details={"record_id": record_id})

    def append_record(self, record: TransactionRecord) -> TransactionRecord:
        self.records.append(record)
        return record


class StaticParticipantDirectory:
    """Participant directory supplied wholesale at construction."""

    def __init__(
        self, preferences: Mapping[str, ParticipantPreference] | None = None
    ) -> None:
        self._preferences = dict(preferences or {})

    def fetch_all(self) -> dict[str, ParticipantPreference]:
        return dict(self._preferences)
