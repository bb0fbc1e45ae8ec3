from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from slot_settlement.domain.money import ZERO
from slot_settlement.domain.records import (
    ParticipantPreference,
    TransactionRecord,
    TransferStatus,
)
from slot_settlement.repositories.in_memory import (
    InMemoryTransactionLog,
    StaticParticipantDirectory,
)
from slot_settlement.services.ledger_builder import ClassificationDecision, SlotPricing
from slot_settlement.services.query_service import (
    SettlementQueryService,
    summarize_participant,
)

NOW = datetime(2026, 3, 20, 18, 0, tzinfo=ZoneInfo("Europe/Berlin"))
PRICING = SlotPricing(price_1h=Decimal("3.80"), price_2h=Decimal("7.60"))


def _record(
    record_id: str,
    day_month: str,
    giver: str,
    claimant: str,
    time_range: str = "18:00-19:00",
    *,
    swap_requested: bool = False,
    settled: bool = False,
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id,
        date=day_month,
        time_range=time_range,
        giving_participant=giver,
        claiming_participant=claimant,
        status=TransferStatus.CLAIMED,
        swap_requested=swap_requested,
        settled=settled,
    )


def _service(
    records: list[TransactionRecord],
    preferences: dict[str, ParticipantPreference] | None = None,
) -> SettlementQueryService:
    return SettlementQueryService(
        transaction_log=InMemoryTransactionLog(records),
        participant_directory=StaticParticipantDirectory(preferences),
        pricing=PRICING,
        now_provider=lambda: NOW,
    )


def test_overview_reports_instructions_and_summary() -> None:
    service = _service(
        [
            _record("r1", "05.03", "A", "C", "18:00-20:00"),
            _record("r2", "06.03", "A", "C", "18:00-19:00"),
            _record("r3", "07.03", "B", "C", "18:00-19:00"),
        ]
    )

    overview = service.get_overview()

    assert [
        (item.from_participant, item.to_participant, item.amount)
        for item in overview.instructions
    ] == [
        ("C", "A", Decimal("11.40")),
        ("C", "B", Decimal("3.80")),
    ]
    assert overview.total_debt == Decimal("15.20")
    assert overview.number_of_participants == 3
    assert overview.breakdown.total_slots == 3
    assert overview.calculated_at == NOW


def test_participant_view_filters_instructions_and_summarizes() -> None:
    service = _service(
        [
            _record("r1", "05.03", "A", "C"),
            _record("r2", "06.03", "B", "D"),
            _record("r3", "07.03", "A", "D", settled=True),
        ]
    )

    view = service.get_participant_view("C")

    assert [item.to_participant for item in view.instructions] == ["A"]
    assert view.summary.owes == Decimal("3.80")
    assert view.summary.owed == ZERO
    assert view.summary.net_amount == Decimal("-3.80")
    assert view.preference.opted_in is True


def test_participant_view_for_unknown_name_is_all_zero() -> None:
    view = _service([_record("r1", "05.03", "A", "C")]).get_participant_view("Zed")

    assert view.balance.credits == ZERO
    assert view.balance.slots_given_away == 0
    assert view.instructions == []
    assert (view.summary.owes, view.summary.owed, view.summary.net_amount) == (
        ZERO,
        ZERO,
        ZERO,
    )


def test_participant_view_reports_already_settled_slots() -> None:
    view = _service(
        [_record("r1", "05.03", "A", "C", settled=True)]
    ).get_participant_view("A")

    assert view.balance.slots_already_settled == 1
    assert view.summary.net_amount == ZERO


def test_opted_out_participant_view_reflects_preference() -> None:
    preferences = {"A": ParticipantPreference(participant_name="A", opted_in=False)}

    service = _service([_record("r1", "05.03", "A", "C")], preferences)

    view = service.get_participant_view("A")

    assert view.preference.opted_in is False
    assert view.instructions == []


def test_debug_view_orders_records_chronologically_with_decisions() -> None:
    service = _service(
        [
            _record("late", "09.03", "A", "C"),
            _record("swap", "05.03", "A", "C", "20:00-21:00", swap_requested=True),
            _record("early", "05.03", "A", "C", "10:00-11:00"),
            _record("nodate", "soon", "free spot", "C"),
        ]
    )

    view = service.get_debug_view()

    assert [item.record.id for item in view.classifications] == [
        "early",
        "swap",
        "late",
        "nodate",
    ]
    assert [item.decision for item in view.classifications] == [
        ClassificationDecision.INCLUDED,
        ClassificationDecision.SWAP,
        ClassificationDecision.INCLUDED,
        ClassificationDecision.UNCLAIMED_SLOT,
    ]
    assert view.breakdown.total_credits == Decimal("7.60")


def test_summarize_participant_splits_positive_balance_into_owed() -> None:
    overview = _service([_record("r1", "05.03", "A", "C")]).get_overview()

    summary = summarize_participant("A", overview.balances)

    assert summary.owed == Decimal("3.80")
    assert summary.owes == ZERO
