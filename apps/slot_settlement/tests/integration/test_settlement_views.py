from __future__ import annotations

from decimal import Decimal

from conftest import FIXED_NOW, make_record, seed_participants, seed_records
from sqlalchemy.orm import Session, sessionmaker

from slot_settlement.domain.money import ZERO
from slot_settlement.domain.records import TransferStatus
from slot_settlement.repositories.participant_repository import ParticipantRepository
from slot_settlement.repositories.transfer_log_repository import (
    SlotTransferRepository,
)
from slot_settlement.services.ledger_builder import SlotPricing
from slot_settlement.services.participant_service import ParticipantService
from slot_settlement.services.query_service import SettlementQueryService

PRICING = SlotPricing(price_1h=Decimal("3.80"), price_2h=Decimal("7.60"))


def _query_service(session: Session) -> SettlementQueryService:
    return SettlementQueryService(
        transaction_log=SlotTransferRepository(session),
        participant_directory=ParticipantRepository(session),
        pricing=PRICING,
        now_provider=lambda: FIXED_NOW,
    )


def _seed(factory: sessionmaker[Session]) -> None:
    with factory() as session:
        seed_participants(session)
        seed_records(
            session,
            [
                make_record("r1", giver="Ben", claimant="Cara"),
                make_record(
                    "r2", giver="Ben", claimant="Dan", time_range="9:00-11:00"
                ),
                make_record(
                    "r3", giver="Cara", claimant="Ben", status=TransferStatus.OFFERED
                ),
            ],
        )


def test_overview_is_recomputed_from_the_persisted_log(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    _seed(sqlite_session_factory)

    with sqlite_session_factory() as session:
        overview = _query_service(session).get_overview()

    assert [item.description for item in overview.instructions] == [
        "Dan owes Ben €7.60",
        "Cara owes Ben €3.80",
    ]
    assert overview.breakdown.eligible_slots == 2
    assert overview.total_debt == Decimal("11.40")


def test_opting_out_giver_removes_their_transfers(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    _seed(sqlite_session_factory)

    with sqlite_session_factory() as session:
        ParticipantService(
            participant_repository=ParticipantRepository(session),
            session=session,
        ).update_preference("Ben", opted_in=False)

    with sqlite_session_factory() as session:
        overview = _query_service(session).get_overview()
        view = _query_service(session).get_participant_view("Ben")

    assert overview.instructions == []
    assert overview.balances == []
    assert view.preference.opted_in is False
    assert view.summary.net_amount == ZERO


def test_update_record_fields_changes_only_mutable_fields(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    _seed(sqlite_session_factory)

    with sqlite_session_factory() as session:
        SlotTransferRepository(session).update_record_fields(
            "r3", {"status": "claimed", "claiming_participant": "Dan"}
        )
        session.commit()

    with sqlite_session_factory() as session:
        record = next(
            item
            for item in SlotTransferRepository(session).fetch_all_records()
            if item.id == "r3"
        )

    assert record.status == TransferStatus.CLAIMED
    assert record.claiming_participant == "Dan"
    assert record.giving_participant == "Cara"


def test_append_record_stores_day_month_without_trailing_dot(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        stored = SlotTransferRepository(session).append_record(
            make_record("late", date="1.7.")
        )
        session.commit()

    assert stored.date == "01.07"
