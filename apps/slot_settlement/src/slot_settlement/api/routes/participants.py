"""Participants routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from slot_settlement.api.dependencies import (
    get_current_participant,
    get_participant_service,
)
from slot_settlement.api.schemas.participants import (
    ParticipantResponse,
    ParticipantsListResponse,
    UpdatePreferenceRequest,
)
from slot_settlement.core.settings import get_settings
from slot_settlement.db.models.participant import Participant
from slot_settlement.domain.errors import OperatorRequiredError
from slot_settlement.services.participant_service import ParticipantService

router = APIRouter(prefix="/participants", tags=["Participants"])


@router.get("", response_model=ParticipantsListResponse)
def list_participants(
    service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ParticipantsListResponse:
    """List the participant directory."""

    return ParticipantsListResponse.from_models(service.list_participants())


@router.put(
    "/{participant_name}/preference",
    response_model=ParticipantResponse,
    responses={
        401: {"description": "Missing identity"},
        403: {"description": "Not allowed to change this participant"},
        404: {"description": "Participant not found"},
    },
)
def update_preference(
    participant_name: str,
    payload: UpdatePreferenceRequest,
    caller: Annotated[Participant, Depends(get_current_participant)],
    service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ParticipantResponse:
    """Change settlement participation; operators may change anyone."""

    if (
        caller.name != participant_name
        and caller.role != get_settings().operator_role
    ):
        raise OperatorRequiredError(details={"participant_name": caller.name})
    participant = service.update_preference(
        participant_name, opted_in=payload.opted_in
    )
    return ParticipantResponse.from_model(participant)
