"""Settlement read routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from slot_settlement.api.dependencies import (
    get_settlement_query_service,
    require_operator,
)
from slot_settlement.api.schemas.settlement import (
    ParticipantSettlementResponse,
    SettlementDebugResponse,
    SettlementOverviewResponse,
)
from slot_settlement.services.query_service import SettlementQueryService

router = APIRouter(prefix="/settlement", tags=["Settlement"])


@router.get("/overview", response_model=SettlementOverviewResponse)
def get_overview(
    service: Annotated[SettlementQueryService, Depends(get_settlement_query_service)],
) -> SettlementOverviewResponse:
    """Return balances and payment instructions for everyone."""

    return SettlementOverviewResponse.from_overview(service.get_overview())


@router.get(
    "/participants/{participant_name}",
    response_model=ParticipantSettlementResponse,
)
def get_participant_settlement(
    participant_name: str,
    service: Annotated[SettlementQueryService, Depends(get_settlement_query_service)],
) -> ParticipantSettlementResponse:
    """Return one participant's balance and the instructions involving them."""

    return ParticipantSettlementResponse.from_view(
        service.get_participant_view(participant_name)
    )


@router.get(
    "/debug",
    response_model=SettlementDebugResponse,
    dependencies=[Depends(require_operator)],
    responses={
        401: {"description": "Missing identity"},
        403: {"description": "Operator required"},
    },
)
def get_debug(
    service: Annotated[SettlementQueryService, Depends(get_settlement_query_service)],
) -> SettlementDebugResponse:
    """Expose every record with its ledger decision."""

    return SettlementDebugResponse.from_view(service.get_debug_view())
