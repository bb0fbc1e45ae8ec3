"""Pairing confirmation routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from slot_settlement.api.dependencies import (
    get_current_participant,
    get_settlement_batch_service,
)
from slot_settlement.api.schemas.batches import PairingResponse
from slot_settlement.db.models.participant import Participant
from slot_settlement.services.batch_service import SettlementBatchService

router = APIRouter(prefix="/pairings", tags=["Settlement Pairings"])


@router.post(
    "/{pairing_id}/complete",
    response_model=PairingResponse,
    responses={
        401: {"description": "Missing identity"},
        403: {"description": "Caller is not a party of the pairing"},
        404: {"description": "Pairing not found"},
    },
)
def complete_pairing(
    pairing_id: UUID,
    caller: Annotated[Participant, Depends(get_current_participant)],
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> PairingResponse:
    """Confirm a payment; repeating the call is a no-op."""

    return PairingResponse.from_model(
        service.complete_pairing(pairing_id, completed_by=caller.name)
    )
