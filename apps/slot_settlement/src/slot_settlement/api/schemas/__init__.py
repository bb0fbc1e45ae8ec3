"""API request and response schemas."""

from slot_settlement.api.schemas.batches import (
    BatchListResponse,
    BatchResponse,
    CreateBatchRequest,
    PairingListResponse,
    PairingResponse,
)
from slot_settlement.api.schemas.participants import (
    ParticipantsListResponse,
    UpdatePreferenceRequest,
)
from slot_settlement.api.schemas.settlement import (
    ParticipantSettlementResponse,
    SettlementDebugResponse,
    SettlementOverviewResponse,
)

__all__ = [
    "BatchListResponse",
    "BatchResponse",
    "CreateBatchRequest",
    "PairingListResponse",
    "PairingResponse",
    "ParticipantSettlementResponse",
    "ParticipantsListResponse",
    "SettlementDebugResponse",
    "SettlementOverviewResponse",
    "UpdatePreferenceRequest",
]
