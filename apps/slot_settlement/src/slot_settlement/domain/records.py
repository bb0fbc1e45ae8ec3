"""Typed records exchanged with the transaction log and participant directory."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass

from slot_settlement.domain.errors import InvalidRequestError, compose_error_message
from slot_settlement.domain.slot_calendar import normalize_day_month

TRUTHY_FLAGS = frozenset({"yes", "true", "1", "y"})
FALSY_FLAGS = frozenset({"", "no", "false", "0", "n"})


class TransferStatus(enum.StrEnum):
    """Lifecycle states of one slot transfer in the log."""

    OFFERED = "offered"
    CLAIMED = "claimed"
    RETRACTED = "retracted"
    REASSIGNED = "reassigned"
    ADMIN_REASSIGNED = "admin-reassigned"
    EXPIRED = "expired"


BILLABLE_STATUSES = frozenset(
    {
        TransferStatus.CLAIMED,
        TransferStatus.REASSIGNED,
        TransferStatus.ADMIN_REASSIGNED,
    }
)

MUTABLE_RECORD_FIELDS = frozenset({"status", "settled", "claiming_participant"})


def parse_flag(value: object, *, field_name: str) -> bool:
    """Coerce log flag values (bool or yes/no text) into a bool."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    normalized = str(value).strip().lower()
    if normalized in TRUTHY_FLAGS:
        return True
    if normalized in FALSY_FLAGS:
        return False
    raise InvalidRequestError(
        message=compose_error_message(
            cause=f"{field_name} has an unrecognised flag value.",
            action="Use yes/no or a boolean.",
        ),
        details={"field": field_name, "value": str(value)},
    )


def parse_status(value: object) -> TransferStatus:
    """Resolve a raw status value into TransferStatus."""

    try:
        return TransferStatus(str(value).strip().lower())
    except ValueError as exc:
        raise InvalidRequestError(
            message=compose_error_message(
                cause="Transaction status is not a known transfer status.",
                action="Use one of: "
                + ", ".join(member.value for member in TransferStatus)
                + ".",
            ),
            details={"status": str(value)},
        ) from exc


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """One slot transfer as read from the transaction log."""

    id: str
    date: str
    time_range: str
    giving_participant: str
    claiming_participant: str
    status: TransferStatus
    swap_requested: bool = False
    settled: bool = False

    @property
    def is_billable_status(self) -> bool:
        return self.status in BILLABLE_STATUSES

    @classmethod
    def from_fields(cls, fields: Mapping[str, object]) -> TransactionRecord:
        """Validate an open field mapping into a closed transaction record."""

        record_id = str(fields.get("id") or "").strip()
        if not record_id:
            raise InvalidRequestError(
                message=compose_error_message(
                    cause="Transaction record is missing its id.",
                    action="Provide a stable identifier for every record.",
                )
            )
        return cls(
            id=record_id,
            date=normalize_day_month(str(fields.get("date") or "")),
            time_range=str(fields.get("time_range") or "").strip(),
            giving_participant=str(fields.get("giving_participant") or "").strip(),
            claiming_participant=str(fields.get("claiming_participant") or "").strip(),
            status=parse_status(fields.get("status")),
            swap_requested=parse_flag(
                fields.get("swap_requested"), field_name="swap_requested"
            ),
            settled=parse_flag(fields.get("settled"), field_name="settled"),
        )


@dataclass(frozen=True, slots=True)
class ParticipantPreference:
    """Directory entry for one participant."""

    participant_name: str
    opted_in: bool = True
    contact: str | None = None
    role: str | None = None
    color: str | None = None


PreferenceMap = Mapping[str, ParticipantPreference]


def is_opted_in(participant_name: str, preferences: PreferenceMap) -> bool:
    """Return the opt-in flag, defaulting to True for unknown participants."""

    preference = preferences.get(participant_name)
    if preference is None:
        return True
    return preference.opted_in
