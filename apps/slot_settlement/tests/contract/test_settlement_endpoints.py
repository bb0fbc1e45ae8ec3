from __future__ import annotations

from conftest import (
    BEN_EMAIL,
    OPERATOR_EMAIL,
    make_record,
    seed_participants,
    seed_records,
)
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker


def _seed(factory: sessionmaker[Session]) -> None:
    with factory() as session:
        seed_participants(session)
        seed_records(
            session,
            [
                make_record("r1", date="06.03", giver="Ben", claimant="Cara"),
                make_record(
                    "r2",
                    date="05.03",
                    giver="Anna",
                    claimant="Cara",
                    time_range="18:00-20:00",
                ),
                make_record(
                    "r3", date="07.03", giver="Dan", claimant="Ben", settled=True
                ),
            ],
        )


def test_overview_returns_balances_instructions_and_summary(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    response = client.get("/v1/settlement/overview")

    assert response.status_code == 200
    body = response.json()
    assert body["instructions"] == [
        {
            "from_participant": "Cara",
            "to_participant": "Anna",
            "amount": "7.60",
            "description": "Cara owes Anna €7.60",
        },
        {
            "from_participant": "Cara",
            "to_participant": "Ben",
            "amount": "3.80",
            "description": "Cara owes Ben €3.80",
        },
    ]
    summary = body["summary"]
    assert summary["total_debt"] == "11.40"
    assert summary["number_of_instructions"] == 2
    assert summary["number_of_participants"] == 3
    assert summary["breakdown"]["total_slots"] == 3
    assert summary["breakdown"]["eligible_slots"] == 2


def test_participant_view_returns_owes_and_filtered_instructions(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    response = client.get("/v1/settlement/participants/Cara")

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {"owes": "11.40", "owed": "0.00", "net_amount": "-11.40"}
    assert body["balance"]["slots_claimed"] == 2
    assert body["balance"]["slots_claimed_2h"] == 1
    assert len(body["instructions"]) == 2


def test_participant_view_counts_already_settled_slots(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    response = client.get("/v1/settlement/participants/Dan")

    assert response.status_code == 200
    body = response.json()
    assert body["balance"]["slots_already_settled"] == 1
    assert body["balance"]["credits"] == "0.00"
    assert body["instructions"] == []


def test_debug_view_requires_operator(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    anonymous = client.get("/v1/settlement/debug")
    player = client.get("/v1/settlement/debug", headers={"X-User-Email": BEN_EMAIL})
    unknown = client.get(
        "/v1/settlement/debug", headers={"X-User-Email": "nobody@example.com"}
    )

    assert anonymous.status_code == 401
    assert player.status_code == 403
    assert player.json()["code"] == "OPERATOR_REQUIRED"
    assert unknown.status_code == 401


def test_debug_view_lists_decisions_in_chronological_order(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    response = client.get(
        "/v1/settlement/debug", headers={"X-User-Email": OPERATOR_EMAIL}
    )

    assert response.status_code == 200
    records = response.json()["records"]
    assert [(item["id"], item["decision"]) for item in records] == [
        ("r2", "included"),
        ("r1", "included"),
        ("r3", "settled"),
    ]
    assert records[0]["two_hour"] is True
    assert records[0]["amount"] == "7.60"
