"""Schemas for settlement batch and pairing endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from slot_settlement.db.models.settlement_batch import SettlementBatch
from slot_settlement.db.models.settlement_pairing import SettlementPairing
from slot_settlement.domain.errors import InvalidRequestError, compose_error_message
from slot_settlement.domain.money import format_money
from slot_settlement.domain.slot_calendar import format_day_month, parse_day_month
from slot_settlement.repositories.batch_repository import BatchTotals

DAY_MONTH_FIELD_PATTERN = r"^[0-9]{1,2}\.[0-9]{1,2}$"
MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"

BatchStatusValue = Literal["active", "settled"]
PairingStatusValue = Literal["pending", "completed"]


def parse_period_date(value: str, *, year: int, field_name: str) -> date:
    """Parse a DD.MM request value into a calendar date of ``year``."""

    parsed = parse_day_month(value, year=year)
    if parsed is None:
        raise InvalidRequestError(
            message=compose_error_message(
                cause=f"{field_name} is not a valid DD.MM date.",
                action="Send an existing calendar day such as 01.03.",
            ),
            details={"field": field_name, "value": value},
        )
    return parsed


class CreateBatchRequest(BaseModel):
    """Payload for opening a settlement batch."""

    name: str = Field(min_length=1, max_length=120)
    period_start: str = Field(pattern=DAY_MONTH_FIELD_PATTERN)
    period_end: str = Field(pattern=DAY_MONTH_FIELD_PATTERN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Batch name cannot be blank.")
        return trimmed


class BatchResponse(BaseModel):
    """Serialized settlement batch."""

    id: UUID
    name: str
    period_start: str
    period_end: str
    status: BatchStatusValue
    created_by: str | None
    created_at: datetime
    pairings_generated_at: datetime | None
    settled_at: datetime | None

    @classmethod
    def from_model(cls, batch: SettlementBatch) -> BatchResponse:
        return cls(**_batch_fields(batch))


class BatchSummaryResponse(BatchResponse):
    """Batch with the size of its underlying transactions."""

    total_slots: int
    total_amount: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_values(
        cls, *, batch: SettlementBatch, totals: BatchTotals
    ) -> BatchSummaryResponse:
        return cls(
            **_batch_fields(batch),
            total_slots=totals.total_slots,
            total_amount=format_money(totals.total_amount),
        )


class BatchListResponse(BaseModel):
    batches: list[BatchSummaryResponse]


class PairingResponse(BaseModel):
    """Serialized pairing inside a batch."""

    id: UUID
    batch_id: UUID
    position: int
    creditor_participant: str
    debtor_participant: str
    amount: str = Field(pattern=MONEY_PATTERN)
    status: PairingStatusValue
    completed_by: str | None
    created_at: datetime
    completed_at: datetime | None

    @classmethod
    def from_model(cls, pairing: SettlementPairing) -> PairingResponse:
        return cls(
            id=pairing.id,
            batch_id=pairing.batch_id,
            position=pairing.position,
            creditor_participant=pairing.creditor_participant,
            debtor_participant=pairing.debtor_participant,
            amount=format_money(pairing.amount),
            status=pairing.status.value,
            completed_by=pairing.completed_by,
            created_at=pairing.created_at,
            completed_at=pairing.completed_at,
        )


class PairingListResponse(BaseModel):
    """Pairings of one batch in generation order."""

    batch_id: UUID
    pairings: list[PairingResponse]

    @classmethod
    def from_models(
        cls, *, batch_id: UUID, pairings: list[SettlementPairing]
    ) -> PairingListResponse:
        return cls(
            batch_id=batch_id,
            pairings=[PairingResponse.from_model(item) for item in pairings],
        )


def _batch_fields(batch: SettlementBatch) -> dict[str, object]:
    return {
        "id": batch.id,
        "name": batch.name,
        "period_start": format_day_month(batch.period_start),
        "period_end": format_day_month(batch.period_end),
        "status": batch.status.value,
        "created_by": batch.created_by,
        "created_at": batch.created_at,
        "pairings_generated_at": batch.pairings_generated_at,
        "settled_at": batch.settled_at,
    }
