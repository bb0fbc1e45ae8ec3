"""Participant directory maintenance."""

from __future__ import annotations

import logging
from typing import Protocol

from slot_settlement.db.models.participant import Participant
from slot_settlement.domain.errors import ParticipantNotFoundError

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class ParticipantRepositoryProtocol(Protocol):
    """Participant repository contract consumed by service."""

    def list_all(self) -> list[Participant]: ...

    def get(self, name: str) -> Participant | None: ...


class ParticipantService:
    """Reads and updates directory entries."""

    def __init__(
        self,
        *,
        participant_repository: ParticipantRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._participant_repository = participant_repository
        self._session = session

    def list_participants(self) -> list[Participant]:
        return self._participant_repository.list_all()

    def update_preference(
        self, participant_name: str, *, opted_in: bool
    ) -> Participant:
        """Set whether the participant takes part in settlement."""

        participant = self._participant_repository.get(participant_name)
        if participant is None:
            raise ParticipantNotFoundError(
                details={"participant_name": participant_name}
            )

        previous = participant.opted_in
        try:
            participant.opted_in = opted_in
            self._session.commit()
            self._session.refresh(participant)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "participant_preference_updated",
            extra={
                "participant_name": participant_name,
                "opted_in": opted_in,
                "previous": previous,
            },
        )
        return participant
