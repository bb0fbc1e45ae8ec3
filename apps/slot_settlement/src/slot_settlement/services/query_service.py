"""Read-only settlement projections recomputed from the current log."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol
from zoneinfo import ZoneInfo

from slot_settlement.core.settings import get_settings
from slot_settlement.domain.money import ZERO, quantize_money
from slot_settlement.domain.records import ParticipantPreference, TransactionRecord
from slot_settlement.domain.slot_calendar import chronological_key
from slot_settlement.services.debt_simplifier import (
    PaymentInstruction,
    simplify,
    total_instructed,
)
from slot_settlement.services.ledger_builder import (
    CreditBreakdown,
    ParticipantBalance,
    RecordClassification,
    SlotPricing,
    classify_records,
    default_pricing,
    get_credit_breakdown,
)


class TransactionLogReader(Protocol):
    """Read side of the transaction log."""

    def fetch_all_records(self) -> list[TransactionRecord]: ...


class ParticipantDirectoryProtocol(Protocol):
    """Participant directory collaborator."""

    def fetch_all(self) -> dict[str, ParticipantPreference]: ...


@dataclass(frozen=True, slots=True)
class ParticipantSettlementSummary:
    """What one participant owes or is owed overall."""

    owes: Decimal
    owed: Decimal
    net_amount: Decimal


@dataclass(frozen=True, slots=True)
class SettlementOverview:
    """Full population view."""

    breakdown: CreditBreakdown
    instructions: list[PaymentInstruction]
    total_debt: Decimal
    number_of_participants: int
    calculated_at: datetime

    @property
    def balances(self) -> list[ParticipantBalance]:
        return self.breakdown.balances


@dataclass(frozen=True, slots=True)
class ParticipantSettlementView:
    """Single participant view."""

    participant_name: str
    balance: ParticipantBalance
    instructions: list[PaymentInstruction]
    summary: ParticipantSettlementSummary
    preference: ParticipantPreference


@dataclass(frozen=True, slots=True)
class SettlementDebugView:
    """Operator view exposing every classification decision."""

    classifications: list[RecordClassification]
    breakdown: CreditBreakdown
    instructions: list[PaymentInstruction]
    preferences: list[ParticipantPreference]
    calculated_at: datetime


def summarize_participant(
    participant_name: str, balances: Sequence[ParticipantBalance]
) -> ParticipantSettlementSummary:
    """Split a participant's net credits into owes/owed amounts."""

    balance = next(
        (item for item in balances if item.participant_name == participant_name),
        None,
    )
    if balance is None:
        return ParticipantSettlementSummary(owes=ZERO, owed=ZERO, net_amount=ZERO)
    if balance.credits > 0:
        return ParticipantSettlementSummary(
            owes=ZERO, owed=balance.credits, net_amount=balance.credits
        )
    return ParticipantSettlementSummary(
        owes=quantize_money(abs(balance.credits)),
        owed=ZERO,
        net_amount=balance.credits,
    )


class SettlementQueryService:
    """Composes ledger and simplifier for read-only views."""

    def __init__(
        self,
        *,
        transaction_log: TransactionLogReader,
        participant_directory: ParticipantDirectoryProtocol,
        pricing: SlotPricing | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._transaction_log = transaction_log
        self._participant_directory = participant_directory
        self._pricing = pricing or default_pricing()
        self._now_provider = now_provider or (
            lambda: datetime.now(tz=ZoneInfo(get_settings().app_timezone))
        )

    def get_overview(self) -> SettlementOverview:
        records = self._transaction_log.fetch_all_records()
        preferences = self._participant_directory.fetch_all()
        breakdown = get_credit_breakdown(records, preferences, pricing=self._pricing)
        instructions = simplify(breakdown.balances, preferences)
        participants = {item.from_participant for item in instructions} | {
            item.to_participant for item in instructions
        }
        return SettlementOverview(
            breakdown=breakdown,
            instructions=instructions,
            total_debt=total_instructed(instructions),
            number_of_participants=len(participants),
            calculated_at=self._now_provider(),
        )

    def get_participant_view(self, participant_name: str) -> ParticipantSettlementView:
        records = self._transaction_log.fetch_all_records()
        preferences = self._participant_directory.fetch_all()
        breakdown = get_credit_breakdown(records, preferences, pricing=self._pricing)
        instructions = simplify(breakdown.balances, preferences)

        balance = next(
            (
                item
                for item in breakdown.balances
                if item.participant_name == participant_name
            ),
            ParticipantBalance(participant_name=participant_name),
        )
        return ParticipantSettlementView(
            participant_name=participant_name,
            balance=balance,
            instructions=[
                item for item in instructions if item.involves(participant_name)
            ],
            summary=summarize_participant(participant_name, breakdown.balances),
            preference=preferences.get(
                participant_name,
                ParticipantPreference(participant_name=participant_name),
            ),
        )

    def get_debug_view(self) -> SettlementDebugView:
        now = self._now_provider()
        records = sorted(
            self._transaction_log.fetch_all_records(),
            key=lambda record: chronological_key(
                record.date, record.time_range, year=now.year
            ),
        )
        preferences = self._participant_directory.fetch_all()
        breakdown = get_credit_breakdown(records, preferences, pricing=self._pricing)
        return SettlementDebugView(
            classifications=classify_records(
                records, preferences, pricing=self._pricing
            ),
            breakdown=breakdown,
            instructions=simplify(breakdown.balances, preferences),
            preferences=list(preferences.values()),
            calculated_at=now,
        )
