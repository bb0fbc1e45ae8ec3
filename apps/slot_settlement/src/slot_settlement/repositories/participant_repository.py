"""Participant directory persistence operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from slot_settlement.db.models.participant import Participant
from slot_settlement.domain.records import ParticipantPreference


def to_preference(participant: Participant) -> ParticipantPreference:
    """Map a directory row to the preference record used by the ledger."""

    return ParticipantPreference(
        participant_name=participant.name,
        opted_in=participant.opted_in,
        contact=participant.email,
        role=participant.role,
        color=participant.color,
    )


class ParticipantRepository:
    """Repository for the participant directory."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[Participant]:
        statement = select(Participant).order_by(Participant.name.asc())
        return list(self._session.scalars(statement).all())

    def fetch_all(self) -> dict[str, ParticipantPreference]:
        """Return the whole directory keyed by participant name."""

        return {
            participant.name: to_preference(participant)
            for participant in self.list_all()
        }

    def get(self, name: str) -> Participant | None:
        return self._session.get(Participant, name)

    def get_by_email(self, email: str) -> Participant | None:
        statement = select(Participant).where(Participant.email == email)
        return self._session.scalar(statement)

    def add(self, participant: Participant) -> Participant:
        self._session.add(participant)
        self._session.flush()
        return participant
