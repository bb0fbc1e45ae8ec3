"""Schemas for settlement overview, participant and debug views."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from slot_settlement.domain.money import format_money

if TYPE_CHECKING:
    from slot_settlement.domain.records import ParticipantPreference
    from slot_settlement.services.debt_simplifier import PaymentInstruction
    from slot_settlement.services.ledger_builder import (
        CreditBreakdown,
        ParticipantBalance,
        RecordClassification,
    )
    from slot_settlement.services.query_service import (
        ParticipantSettlementView,
        SettlementDebugView,
        SettlementOverview,
    )

MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"


class ParticipantBalanceResponse(BaseModel):
    """Credit position and slot counters of one participant."""

    participant_name: str
    credits: str = Field(pattern=MONEY_PATTERN)
    slots_given_away: int
    slots_claimed: int
    slots_already_settled: int
    slots_given_away_1h: int
    slots_given_away_2h: int
    slots_claimed_1h: int
    slots_claimed_2h: int

    @classmethod
    def from_balance(cls, balance: ParticipantBalance) -> ParticipantBalanceResponse:
        return cls(
            participant_name=balance.participant_name,
            credits=format_money(balance.credits),
            slots_given_away=balance.slots_given_away,
            slots_claimed=balance.slots_claimed,
            slots_already_settled=balance.slots_already_settled,
            slots_given_away_1h=balance.slots_given_away_1h,
            slots_given_away_2h=balance.slots_given_away_2h,
            slots_claimed_1h=balance.slots_claimed_1h,
            slots_claimed_2h=balance.slots_claimed_2h,
        )


class PaymentInstructionResponse(BaseModel):
    """Debtor-to-creditor payment."""

    from_participant: str
    to_participant: str
    amount: str = Field(pattern=MONEY_PATTERN)
    description: str

    @classmethod
    def from_instruction(
        cls, instruction: PaymentInstruction
    ) -> PaymentInstructionResponse:
        return cls(
            from_participant=instruction.from_participant,
            to_participant=instruction.to_participant,
            amount=format_money(instruction.amount),
            description=instruction.description,
        )


class CreditBreakdownResponse(BaseModel):
    """Slot counts and credit totals of one ledger computation."""

    total_slots: int
    eligible_slots: int
    total_credits: str = Field(pattern=MONEY_PATTERN)
    total_debits: str = Field(pattern=MONEY_PATTERN)
    net_balance: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_breakdown(cls, breakdown: CreditBreakdown) -> CreditBreakdownResponse:
        return cls(
            total_slots=breakdown.total_slots,
            eligible_slots=breakdown.eligible_slots,
            total_credits=format_money(breakdown.total_credits),
            total_debits=format_money(breakdown.total_debits),
            net_balance=format_money(breakdown.net_balance),
        )


class OverviewSummaryResponse(BaseModel):
    """Headline figures of the overview."""

    total_debt: str = Field(pattern=MONEY_PATTERN)
    number_of_instructions: int
    number_of_participants: int
    breakdown: CreditBreakdownResponse
    calculated_at: datetime


class SettlementOverviewResponse(BaseModel):
    """Balances and payment instructions for the whole population."""

    balances: list[ParticipantBalanceResponse]
    instructions: list[PaymentInstructionResponse]
    summary: OverviewSummaryResponse

    @classmethod
    def from_overview(cls, overview: SettlementOverview) -> SettlementOverviewResponse:
        return cls(
            balances=[
                ParticipantBalanceResponse.from_balance(item)
                for item in overview.balances
            ],
            instructions=[
                PaymentInstructionResponse.from_instruction(item)
                for item in overview.instructions
            ],
            summary=OverviewSummaryResponse(
                total_debt=format_money(overview.total_debt),
                number_of_instructions=len(overview.instructions),
                number_of_participants=overview.number_of_participants,
                breakdown=CreditBreakdownResponse.from_breakdown(overview.breakdown),
                calculated_at=overview.calculated_at,
            ),
        )


class ParticipantSummaryResponse(BaseModel):
    """What one participant owes or is owed."""

    owes: str = Field(pattern=MONEY_PATTERN)
    owed: str = Field(pattern=MONEY_PATTERN)
    net_amount: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_values(
        cls, *, owes: Decimal, owed: Decimal, net_amount: Decimal
    ) -> ParticipantSummaryResponse:
        return cls(
            owes=format_money(owes),
            owed=format_money(owed),
            net_amount=format_money(net_amount),
        )


class ParticipantSettlementResponse(BaseModel):
    """Settlement view of one participant."""

    participant_name: str
    opted_in: bool
    balance: ParticipantBalanceResponse
    instructions: list[PaymentInstructionResponse]
    summary: ParticipantSummaryResponse

    @classmethod
    def from_view(
        cls, view: ParticipantSettlementView
    ) -> ParticipantSettlementResponse:
        return cls(
            participant_name=view.participant_name,
            opted_in=view.preference.opted_in,
            balance=ParticipantBalanceResponse.from_balance(view.balance),
            instructions=[
                PaymentInstructionResponse.from_instruction(item)
                for item in view.instructions
            ],
            summary=ParticipantSummaryResponse.from_values(
                owes=view.summary.owes,
                owed=view.summary.owed,
                net_amount=view.summary.net_amount,
            ),
        )


class RecordClassificationResponse(BaseModel):
    """One log record with the decision the ledger took on it."""

    id: str
    date: str
    time_range: str
    giving_participant: str
    claiming_participant: str
    status: str
    swap_requested: bool
    settled: bool
    decision: str
    two_hour: bool
    amount: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_classification(
        cls, item: RecordClassification
    ) -> RecordClassificationResponse:
        record = item.record
        return cls(
            id=record.id,
            date=record.date,
            time_range=record.time_range,
            giving_participant=record.giving_participant,
            claiming_participant=record.claiming_participant,
            status=record.status.value,
            swap_requested=record.swap_requested,
            settled=record.settled,
            decision=item.decision.value,
            two_hour=item.two_hour,
            amount=format_money(item.amount),
        )


class PreferenceResponse(BaseModel):
    participant_name: str
    opted_in: bool

    @classmethod
    def from_preference(cls, preference: ParticipantPreference) -> PreferenceResponse:
        return cls(
            participant_name=preference.participant_name,
            opted_in=preference.opted_in,
        )


class SettlementDebugResponse(BaseModel):
    """Operator diagnostics for the current ledger."""

    records: list[RecordClassificationResponse]
    preferences: list[PreferenceResponse]
    balances: list[ParticipantBalanceResponse]
    instructions: list[PaymentInstructionResponse]
    breakdown: CreditBreakdownResponse
    calculated_at: datetime

    @classmethod
    def from_view(cls, view: SettlementDebugView) -> SettlementDebugResponse:
        return cls(
            records=[
                RecordClassificationResponse.from_classification(item)
                for item in view.classifications
            ],
            preferences=[
                PreferenceResponse.from_preference(item) for item in view.preferences
            ],
            balances=[
                ParticipantBalanceResponse.from_balance(item)
                for item in view.breakdown.balances
            ],
            instructions=[
                PaymentInstructionResponse.from_instruction(item)
                for item in view.instructions
            ],
            breakdown=CreditBreakdownResponse.from_breakdown(view.breakdown),
            calculated_at=view.calculated_at,
        )
