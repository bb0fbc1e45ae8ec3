from __future__ import annotations

from conftest import (
    BEN_EMAIL,
    CARA_EMAIL,
    DAN_EMAIL,
    OPERATOR_EMAIL,
    make_record,
    seed_participants,
    seed_records,
)
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from slot_settlement.repositories.transfer_log_repository import (
    SlotTransferRepository,
)

OPERATOR = {"X-User-Email": OPERATOR_EMAIL}
WHOLE_YEAR = {"name": "Season", "period_start": "01.01", "period_end": "31.12"}


def _seed(factory: sessionmaker[Session]) -> None:
    with factory() as session:
        seed_participants(session)
        seed_records(
            session,
            [
                make_record("r1", date="05.03", giver="Ben", claimant="Cara"),
                make_record(
                    "r2",
                    date="06.03",
                    giver="Ben",
                    claimant="Cara",
                    time_range="18:00-20:00",
                ),
            ],
        )


def _create_batch(client: TestClient) -> str:
    response = client.post("/v1/batches", json=WHOLE_YEAR, headers=OPERATOR)
    assert response.status_code == 201
    return response.json()["id"]


def test_create_batch_returns_active_batch(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    response = client.post("/v1/batches", json=WHOLE_YEAR, headers=OPERATOR)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "active"
    assert body["period_start"] == "01.01"
    assert body["period_end"] == "31.12"
    assert body["created_by"] == "Anna"
    assert body["pairings_generated_at"] is None


def test_create_batch_requires_operator(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    anonymous = client.post("/v1/batches", json=WHOLE_YEAR)
    player = client.post(
        "/v1/batches", json=WHOLE_YEAR, headers={"X-User-Email": BEN_EMAIL}
    )

    assert anonymous.status_code == 401
    assert player.status_code == 403


def test_create_batch_rejects_invalid_periods(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)

    malformed = client.post(
        "/v1/batches",
        json={"name": "Bad", "period_start": "2026-03-01", "period_end": "31.03"},
        headers=OPERATOR,
    )
    impossible = client.post(
        "/v1/batches",
        json={"name": "Bad", "period_start": "30.02", "period_end": "31.03"},
        headers=OPERATOR,
    )
    backwards = client.post(
        "/v1/batches",
        json={"name": "Bad", "period_start": "31.03", "period_end": "01.03"},
        headers=OPERATOR,
    )

    assert malformed.status_code == 400
    assert impossible.status_code == 400
    assert impossible.json()["details"]["field"] == "period_start"
    assert backwards.status_code == 400


def test_full_batch_flow_over_http(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)
    batch_id = _create_batch(client)

    generated = client.post(f"/v1/batches/{batch_id}/pairings", headers=OPERATOR)
    assert generated.status_code == 201
    pairings = generated.json()["pairings"]
    assert [
        (item["debtor_participant"], item["creditor_participant"], item["amount"])
        for item in pairings
    ] == [("Cara", "Ben", "11.40")]

    again = client.post(f"/v1/batches/{batch_id}/pairings", headers=OPERATOR)
    assert again.status_code == 409
    assert again.json()["code"] == "PAIRINGS_ALREADY_GENERATED"

    listing = client.get("/v1/batches")
    assert listing.json()["batches"][0]["total_slots"] == 2
    assert listing.json()["batches"][0]["total_amount"] == "11.40"

    pairing_id = pairings[0]["id"]
    outsider = client.post(
        f"/v1/pairings/{pairing_id}/complete", headers={"X-User-Email": DAN_EMAIL}
    )
    assert outsider.status_code == 403
    assert outsider.json()["code"] == "PAIRING_PARTY_MISMATCH"

    completed = client.post(
        f"/v1/pairings/{pairing_id}/complete", headers={"X-User-Email": CARA_EMAIL}
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"
    assert completed.json()["completed_by"] == "Cara"

    repeated = client.post(
        f"/v1/pairings/{pairing_id}/complete", headers={"X-User-Email": BEN_EMAIL}
    )
    assert repeated.status_code == 200
    assert repeated.json()["completed_by"] == "Cara"

    closed = client.post(f"/v1/batches/{batch_id}/close", headers=OPERATOR)
    assert closed.status_code == 200
    assert closed.json()["status"] == "settled"
    assert closed.json()["settled_at"] is not None

    closed_again = client.post(f"/v1/batches/{batch_id}/close", headers=OPERATOR)
    assert closed_again.status_code == 409
    assert closed_again.json()["code"] == "INVALID_BATCH_STATE"

    with sqlite_session_factory() as session:
        records = SlotTransferRepository(session).fetch_all_records()
    assert all(item.settled for item in records)

    overview = client.get("/v1/settlement/overview").json()
    assert overview["instructions"] == []
    assert overview["summary"]["total_debt"] == "0.00"


def test_pairing_operations_require_operator(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)
    batch_id = _create_batch(client)
    player = {"X-User-Email": BEN_EMAIL}

    generate = client.post(f"/v1/batches/{batch_id}/pairings", headers=player)
    close = client.post(f"/v1/batches/{batch_id}/close", headers=player)

    assert generate.status_code == 403
    assert close.status_code == 403


def test_unknown_batch_and_pairing_are_not_found(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)
    missing = "00000000-0000-0000-0000-000000000000"

    batch = client.get(f"/v1/batches/{missing}")
    pairing = client.post(
        f"/v1/pairings/{missing}/complete", headers={"X-User-Email": BEN_EMAIL}
    )

    assert batch.status_code == 404
    assert batch.json()["code"] == "BATCH_NOT_FOUND"
    assert pairing.status_code == 404
    assert pairing.json()["code"] == "PAIRING_NOT_FOUND"


def test_list_pairings_for_batch_without_generation_is_empty(
    client: TestClient, sqlite_session_factory: sessionmaker[Session]
) -> None:
    _seed(sqlite_session_factory)
    batch_id = _create_batch(client)

    response = client.get(f"/v1/batches/{batch_id}/pairings")

    assert response.status_code == 200
    assert response.json() == {"batch_id": batch_id, "pairings": []}
