"""Credit ledger computed from the slot transfer log.

Balances are always rebuilt from a full snapshot of records; nothing here is
persisted or cached between calls.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from slot_settlement.core.settings import Settings, get_settings
from slot_settlement.domain.money import ZERO, quantize_money
from slot_settlement.domain.records import (
    PreferenceMap,
    TransactionRecord,
    is_opted_in,
)
from slot_settlement.domain.slot_calendar import is_two_hour_slot, parse_time_range

logger = logging.getLogger(__name__)


class ClassificationDecision(enum.StrEnum):
    """Why a record does or does not move money in the active ledger."""

    INCLUDED = "included"
    SETTLED = "settled"
    SWAP = "swap"
    INELIGIBLE_STATUS = "ineligible_status"
    UNCLAIMED_SLOT = "unclaimed_slot"
    MISSING_PARTY = "missing_party"
    GIVER_OPTED_OUT = "giver_opted_out"


@dataclass(frozen=True, slots=True)
class SlotPricing:
    """Unit prices per slot length. The two prices are independent values."""

    price_1h: Decimal
    price_2h: Decimal
    unclaimed_sentinel: str = "free spot"

    @classmethod
    def from_settings(cls, settings: Settings) -> SlotPricing:
        return cls(
            price_1h=quantize_money(settings.slot_price_1h),
            price_2h=quantize_money(settings.slot_price_2h),
            unclaimed_sentinel=settings.unclaimed_slot_sentinel,
        )

    def price_for(self, *, two_hour: bool) -> Decimal:
        return self.price_2h if two_hour else self.price_1h


@dataclass(slots=True)
class ParticipantBalance:
    """Credit position and slot counters of one participant."""

    participant_name: str
    credits: Decimal = ZERO
    slots_given_away: int = 0
    slots_claimed: int = 0
    slots_already_settled: int = 0
    slots_given_away_1h: int = 0
    slots_given_away_2h: int = 0
    slots_claimed_1h: int = 0
    slots_claimed_2h: int = 0


@dataclass(frozen=True, slots=True)
class RecordClassification:
    """Ledger decision for one record, with the price it carries if included."""

    record: TransactionRecord
    decision: ClassificationDecision
    two_hour: bool
    amount: Decimal

    @property
    def included(self) -> bool:
        return self.decision == ClassificationDecision.INCLUDED


@dataclass(frozen=True, slots=True)
class CreditBreakdown:
    """Balances plus aggregate figures for one ledger computation."""

    balances: list[ParticipantBalance]
    total_slots: int
    eligible_slots: int
    total_credits: Decimal
    total_debits: Decimal
    net_balance: Decimal


def default_pricing() -> SlotPricing:
    """Pricing built from the process settings."""

    return SlotPricing.from_settings(get_settings())


def classify_record(
    record: TransactionRecord,
    preferences: PreferenceMap,
    *,
    pricing: SlotPricing,
) -> ClassificationDecision:
    """Decide whether one record contributes to the active balances."""

    if not record.is_billable_status:
        return ClassificationDecision.INELIGIBLE_STATUS
    if record.settled:
        return ClassificationDecision.SETTLED
    if record.swap_requested:
        return ClassificationDecision.SWAP
    if record.giving_participant == pricing.unclaimed_sentinel:
        return ClassificationDecision.UNCLAIMED_SLOT
    if not record.giving_participant or not record.claiming_participant:
        return ClassificationDecision.MISSING_PARTY
    # Only the giver's preference gates inclusion.
    if not is_opted_in(record.giving_participant, preferences):
        return ClassificationDecision.GIVER_OPTED_OUT
    return ClassificationDecision.INCLUDED


def classify_records(
    records: Iterable[TransactionRecord],
    preferences: PreferenceMap,
    *,
    pricing: SlotPricing | None = None,
) -> list[RecordClassification]:
    """Classify every record and price the included ones."""

    pricing = pricing or default_pricing()
    classifications: list[RecordClassification] = []
    for record in records:
        decision = classify_record(record, preferences, pricing=pricing)
        two_hour = _is_two_hour(record)
        amount = (
            pricing.price_for(two_hour=two_hour)
            if decision == ClassificationDecision.INCLUDED
            else ZERO
        )
        classifications.append(
            RecordClassification(
                record=record,
                decision=decision,
                two_hour=two_hour,
                amount=amount,
            )
        )
    return classifications


def build_balances(
    records: Sequence[TransactionRecord],
    preferences: PreferenceMap,
    *,
    pricing: SlotPricing | None = None,
) -> list[ParticipantBalance]:
    """Derive one balance per participant from the full record set."""

    pricing = pricing or default_pricing()
    classifications = classify_records(records, preferences, pricing=pricing)
    balances: dict[str, ParticipantBalance] = {}

    for item in classifications:
        giver = item.record.giving_participant
        if item.decision != ClassificationDecision.SETTLED:
            continue
        if not giver or giver == pricing.unclaimed_sentinel:
            continue
        # The claimant paid at transfer time; only the giver is counted.
        _balance_for(balances, giver).slots_already_settled += 1

    for item in classifications:
        if not item.included:
            continue
        giver_balance = _balance_for(balances, item.record.giving_participant)
        giver_balance.credits = quantize_money(giver_balance.credits + item.amount)
        giver_balance.slots_given_away += 1
        if item.two_hour:
            giver_balance.slots_given_away_2h += 1
        else:
            giver_balance.slots_given_away_1h += 1

        claimant_balance = _balance_for(balances, item.record.claiming_participant)
        claimant_balance.credits = quantize_money(
            claimant_balance.credits - item.amount
        )
        claimant_balance.slots_claimed += 1
        if item.two_hour:
            claimant_balance.slots_claimed_2h += 1
        else:
            claimant_balance.slots_claimed_1h += 1

    return list(balances.values())


def get_credit_breakdown(
    records: Sequence[TransactionRecord],
    preferences: PreferenceMap,
    *,
    pricing: SlotPricing | None = None,
) -> CreditBreakdown:
    """Return balances with slot counts and credit/debit totals."""

    balances = build_balances(records, preferences, pricing=pricing)
    eligible_slots = sum(
        1
        for record in records
        if not record.settled
        and not record.swap_requested
        and record.is_billable_status
    )
    total_credits = quantize_money(
        sum((item.credits for item in balances if item.credits > 0), ZERO)
    )
    total_debits = quantize_money(
        sum((abs(item.credits) for item in balances if item.credits < 0), ZERO)
    )
    return CreditBreakdown(
        balances=balances,
        total_slots=len(records),
        eligible_slots=eligible_slots,
        total_credits=total_credits,
        total_debits=total_debits,
        net_balance=quantize_money(total_credits - total_debits),
    )


def _balance_for(
    balances: dict[str, ParticipantBalance], participant_name: str
) -> ParticipantBalance:
    balance = balances.get(participant_name)
    if balance is None:
        balance = ParticipantBalance(participant_name=participant_name)
        balances[participant_name] = balance
    return balance


def _is_two_hour(record: TransactionRecord) -> bool:
    if record.time_range and parse_time_range(record.time_range) is None:
        logger.debug(
            "malformed_time_range",
            extra={"record_id": record.id, "time_range": record.time_range},
        )
    return is_two_hour_slot(record.time_range)
