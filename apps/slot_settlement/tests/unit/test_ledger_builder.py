from __future__ import annotations

from decimal import Decimal

import pytest

from slot_settlement.domain.money import ZERO
from slot_settlement.domain.records import (
    ParticipantPreference,
    TransactionRecord,
    TransferStatus,
)
from slot_settlement.services.ledger_builder import (
    ClassificationDecision,
    SlotPricing,
    build_balances,
    classify_record,
    classify_records,
    get_credit_breakdown,
)

PRICING = SlotPricing(price_1h=Decimal("3.80"), price_2h=Decimal("7.60"))


def _record(
    record_id: str,
    *,
    giver: str = "Ben",
    claimant: str = "Cara",
    time_range: str = "18:00-19:00",
    status: TransferStatus = TransferStatus.CLAIMED,
    swap_requested: bool = False,
    settled: bool = False,
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id,
        date="05.03",
        time_range=time_range,
        giving_participant=giver,
        claiming_participant=claimant,
        status=status,
        swap_requested=swap_requested,
        settled=settled,
    )


def _by_name(records: list[TransactionRecord], preferences=None) -> dict:
    balances = build_balances(records, preferences or {}, pricing=PRICING)
    return {item.participant_name: item for item in balances}


def test_one_hour_transfer_credits_giver_and_debits_claimant() -> None:
    balances = _by_name([_record("r1")])

    assert balances["Ben"].credits == Decimal("3.80")
    assert balances["Ben"].slots_given_away == 1
    assert balances["Ben"].slots_given_away_1h == 1
    assert balances["Cara"].credits == Decimal("-3.80")
    assert balances["Cara"].slots_claimed == 1
    assert balances["Cara"].slots_claimed_1h == 1


def test_two_hour_transfer_uses_two_hour_price() -> None:
    balances = _by_name([_record("r1", time_range="18:00 to 20:00")])

    assert balances["Ben"].credits == Decimal("7.60")
    assert balances["Ben"].slots_given_away_2h == 1
    assert balances["Cara"].slots_claimed_2h == 1


def test_two_hour_price_is_independent_of_one_hour_price() -> None:
    pricing = SlotPricing(price_1h=Decimal("4.00"), price_2h=Decimal("7.00"))

    balances = build_balances(
        [_record("r1", time_range="18:00-20:00")], {}, pricing=pricing
    )

    assert {item.participant_name: item.credits for item in balances} == {
        "Ben": Decimal("7.00"),
        "Cara": Decimal("-7.00"),
    }


def test_malformed_time_range_is_priced_as_one_hour() -> None:
    balances = _by_name([_record("r1", time_range="evening")])

    assert balances["Ben"].credits == Decimal("3.80")
    assert balances["Ben"].slots_given_away_1h == 1


def test_opted_out_giver_excludes_transaction_for_both_parties() -> None:
    preferences = {"Ben": ParticipantPreference(participant_name="Ben", opted_in=False)}

    balances = _by_name([_record("r1")], preferences)

    assert balances == {}


def test_opted_out_claimant_still_pays_opted_in_giver() -> None:
    preferences = {
        "Cara": ParticipantPreference(participant_name="Cara", opted_in=False)
    }

    balances = _by_name([_record("r1")], preferences)

    assert balances["Ben"].credits == Decimal("3.80")
    assert balances["Cara"].credits == Decimal("-3.80")


def test_settled_records_only_increment_giver_counter() -> None:
    balances = _by_name([_record("r1", settled=True), _record("r2", settled=True)])

    assert set(balances) == {"Ben"}
    assert balances["Ben"].slots_already_settled == 2
    assert balances["Ben"].credits == ZERO


def test_swaps_sentinel_missing_party_and_non_billable_are_excluded() -> None:
    records = [
        _record("r1", swap_requested=True),
        _record("r2", giver="free spot"),
        _record("r3", claimant=""),
        _record("r4", status=TransferStatus.OFFERED),
        _record("r5", status=TransferStatus.EXPIRED),
    ]

    assert _by_name(records) == {}


def test_balances_sum_to_zero() -> None:
    records = [
        _record("r1", giver="Ben", claimant="Cara"),
        _record("r2", giver="Cara", claimant="Dan", time_range="10:00-12:00"),
        _record("r3", giver="Dan", claimant="Ben", status=TransferStatus.REASSIGNED),
        _record("r4", giver="Anna", claimant="Cara"),
    ]

    balances = build_balances(records, {}, pricing=PRICING)

    assert sum((item.credits for item in balances), ZERO) == ZERO
    assert sum(item.slots_given_away for item in balances) == sum(
        item.slots_claimed for item in balances
    )


def test_swapping_roles_negates_balances() -> None:
    forward = _by_name([_record("r1", giver="Ben", claimant="Cara")])
    reverse = _by_name([_record("r1", giver="Cara", claimant="Ben")])

    assert forward["Ben"].credits == -reverse["Ben"].credits
    assert forward["Cara"].credits == -reverse["Cara"].credits


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        (_record("r1"), ClassificationDecision.INCLUDED),
        (_record("r2", settled=True), ClassificationDecision.SETTLED),
        (_record("r3", swap_requested=True), ClassificationDecision.SWAP),
        (
            _record("r4", status=TransferStatus.RETRACTED),
            ClassificationDecision.INELIGIBLE_STATUS,
        ),
        (_record("r5", giver="free spot"), ClassificationDecision.UNCLAIMED_SLOT),
        (_record("r6", claimant=""), ClassificationDecision.MISSING_PARTY),
        (_record("r7", giver="Dan"), ClassificationDecision.GIVER_OPTED_OUT),
    ],
)
def test_classify_record_assigns_one_decision(
    record: TransactionRecord, expected: ClassificationDecision
) -> None:
    preferences = {"Dan": ParticipantPreference(participant_name="Dan", opted_in=False)}

    assert classify_record(record, preferences, pricing=PRICING) == expected


def test_classify_records_prices_only_included_records() -> None:
    classifications = classify_records(
        [_record("r1", time_range="18:00-20:00"), _record("r2", swap_requested=True)],
        {},
        pricing=PRICING,
    )

    assert [item.amount for item in classifications] == [Decimal("7.60"), ZERO]
    assert [item.included for item in classifications] == [True, False]


def test_credit_breakdown_counts_eligible_slots_regardless_of_opt_in() -> None:
    preferences = {"Ben": ParticipantPreference(participant_name="Ben", opted_in=False)}
    records = [
        _record("r1"),
        _record("r2", giver="Cara", claimant="Dan"),
        _record("r3", settled=True),
        _record("r4", swap_requested=True),
        _record("r5", status=TransferStatus.OFFERED),
    ]

    breakdown = get_credit_breakdown(records, preferences, pricing=PRICING)

    assert breakdown.total_slots == 5
    assert breakdown.eligible_slots == 2
    assert breakdown.total_credits == Decimal("3.80")
    assert breakdown.total_debits == Decimal("3.80")
    assert breakdown.net_balance == ZERO
