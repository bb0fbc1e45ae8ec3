"""API dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from slot_settlement.core.settings import get_settings
from slot_settlement.db.models.participant import Participant
from slot_settlement.db.session import get_db_session
from slot_settlement.domain.errors import (
    AuthenticationRequiredError,
    OperatorRequiredError,
)
from slot_settlement.repositories.batch_repository import SettlementBatchRepository
from slot_settlement.repositories.participant_repository import ParticipantRepository
from slot_settlement.repositories.transfer_log_repository import (
    SlotTransferRepository,
)
from slot_settlement.services.batch_service import SettlementBatchService
from slot_settlement.services.ledger_builder import SlotPricing
from slot_settlement.services.participant_service import ParticipantService
from slot_settlement.services.query_service import SettlementQueryService


def get_participant_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> ParticipantService:
    """Build participant service with per-request session."""

    return ParticipantService(
        participant_repository=ParticipantRepository(session),
        session=session,
    )


def get_settlement_query_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> SettlementQueryService:
    """Build read-only settlement service over the persisted log."""

    return SettlementQueryService(
        transaction_log=SlotTransferRepository(session),
        participant_directory=ParticipantRepository(session),
        pricing=SlotPricing.from_settings(get_settings()),
    )


def get_settlement_batch_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> SettlementBatchService:
    """Build batch service; every repository shares the request session."""

    return SettlementBatchService(
        batch_repository=SettlementBatchRepository(session),
        transaction_log=SlotTransferRepository(session),
        participant_directory=ParticipantRepository(session),
        session=session,
        pricing=SlotPricing.from_settings(get_settings()),
    )


def get_current_participant(
    session: Annotated[Session, Depends(get_db_session)],
    x_user_email: Annotated[str | None, Header()] = None,
) -> Participant:
    """Resolve the calling participant from the X-User-Email header."""

    email = (x_user_email or "").strip()
    if not email:
        raise AuthenticationRequiredError()
    participant = ParticipantRepository(session).get_by_email(email)
    if participant is None:
        raise AuthenticationRequiredError(details={"email": email})
    return participant


def require_operator(
    participant: Annotated[Participant, Depends(get_current_participant)],
) -> Participant:
    """Allow only participants holding the configured operator role."""

    if participant.role != get_settings().operator_role:
        raise OperatorRequiredError(details={"participant_name": participant.name})
    return participant
