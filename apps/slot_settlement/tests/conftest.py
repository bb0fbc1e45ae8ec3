from __future__ import annotations

from collections.abc import Generator
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from slot_settlement.api.app import create_app
from slot_settlement.db.base import Base, import_orm_models
from slot_settlement.db.models.participant import Participant
from slot_settlement.db.session import build_session_factory, get_db_session
from slot_settlement.domain.records import TransactionRecord, TransferStatus
from slot_settlement.repositories.transfer_log_repository import (
    SlotTransferRepository,
)

OPERATOR_EMAIL = "anna@example.com"
BEN_EMAIL = "ben@example.com"
CARA_EMAIL = "cara@example.com"
DAN_EMAIL = "dan@example.com"

FIXED_NOW = datetime(2026, 3, 20, 18, 0, tzinfo=ZoneInfo("Europe/Berlin"))


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = build_session_factory(engine)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)


def seed_participants(session: Session) -> None:
    session.add_all(
        [
            Participant(name="Anna", email=OPERATOR_EMAIL, role="admin"),
            Participant(name="Ben", email=BEN_EMAIL, role="player"),
            Participant(name="Cara", email=CARA_EMAIL, role="player"),
            Participant(name="Dan", email=DAN_EMAIL, role="player"),
        ]
    )
    session.commit()


def make_record(
    record_id: str,
    *,
    date: str = "05.03",
    time_range: str = "18:00-19:00",
    giver: str = "Ben",
    claimant: str = "Cara",
    status: TransferStatus = TransferStatus.CLAIMED,
    swap_requested: bool = False,
    settled: bool = False,
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id,
        date=date,
        time_range=time_range,
        giving_participant=giver,
        claiming_participant=claimant,
        status=status,
        swap_requested=swap_requested,
        settled=settled,
    )


def seed_records(session: Session, records: list[TransactionRecord]) -> None:
    repository = SlotTransferRepository(session)
    for record in records:
        repository.append_record(record)
    session.commit()


@pytest.fixture
def participants(sqlite_session_factory: sessionmaker[Session]) -> None:
    with sqlite_session_factory() as session:
        seed_participants(session)


@pytest.fixture
def client(
    sqlite_session_factory: sessionmaker[Session],
) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as test_client:
        yield test_client
