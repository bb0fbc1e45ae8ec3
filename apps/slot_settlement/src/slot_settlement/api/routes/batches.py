"""Settlement batch routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from slot_settlement.api.dependencies import (
    get_settlement_batch_service,
    require_operator,
)
from slot_settlement.api.schemas.batches import (
    BatchListResponse,
    BatchResponse,
    BatchSummaryResponse,
    CreateBatchRequest,
    PairingListResponse,
    parse_period_date,
)
from slot_settlement.core.settings import get_settings
from slot_settlement.db.models.participant import Participant
from slot_settlement.domain.slot_calendar import current_year
from slot_settlement.services.batch_service import (
    CreateBatchInput,
    SettlementBatchService,
)

router = APIRouter(prefix="/batches", tags=["Settlement Batches"])


@router.get("", response_model=BatchListResponse)
def list_batches(
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> BatchListResponse:
    """List batches newest first with their slot totals."""

    return BatchListResponse(
        batches=[
            BatchSummaryResponse.from_values(batch=item.batch, totals=item.totals)
            for item in service.list_batches()
        ]
    )


@router.post(
    "",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        401: {"description": "Missing identity"},
        403: {"description": "Operator required"},
    },
)
def create_batch(
    payload: CreateBatchRequest,
    operator: Annotated[Participant, Depends(require_operator)],
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> BatchResponse:
    """Open an active batch over a DD.MM period of the current year."""

    year = current_year(get_settings().app_timezone)
    batch = service.create_batch(
        CreateBatchInput(
            name=payload.name,
            period_start=parse_period_date(
                payload.period_start, year=year, field_name="period_start"
            ),
            period_end=parse_period_date(
                payload.period_end, year=year, field_name="period_end"
            ),
            created_by=operator.name,
        )
    )
    return BatchResponse.from_model(batch)


@router.get(
    "/{batch_id}",
    response_model=BatchResponse,
    responses={404: {"description": "Batch not found"}},
)
def get_batch(
    batch_id: UUID,
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> BatchResponse:
    return BatchResponse.from_model(service.get_batch(batch_id))


@router.post(
    "/{batch_id}/pairings",
    response_model=PairingListResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_operator)],
    responses={
        404: {"description": "Batch not found"},
        409: {"description": "Batch settled or pairings already generated"},
    },
)
def generate_pairings(
    batch_id: UUID,
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> PairingListResponse:
    """Compute pairings once from the transactions inside the batch period."""

    pairings = service.generate_pairings(batch_id)
    return PairingListResponse.from_models(batch_id=batch_id, pairings=pairings)


@router.get(
    "/{batch_id}/pairings",
    response_model=PairingListResponse,
    responses={404: {"description": "Batch not found"}},
)
def list_pairings(
    batch_id: UUID,
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> PairingListResponse:
    return PairingListResponse.from_models(
        batch_id=batch_id, pairings=service.list_pairings(batch_id)
    )


@router.post(
    "/{batch_id}/close",
    response_model=BatchResponse,
    dependencies=[Depends(require_operator)],
    responses={
        404: {"description": "Batch not found"},
        409: {"description": "Batch already settled"},
    },
)
def close_batch(
    batch_id: UUID,
    service: Annotated[SettlementBatchService, Depends(get_settlement_batch_service)],
) -> BatchResponse:
    """Settle the batch and mark its transactions settled in the log."""

    return BatchResponse.from_model(service.close_batch(batch_id))
