"""ORM models for the slot_settlement domain."""

from slot_settlement.db.models.batch_transfer import BatchTransfer
from slot_settlement.db.models.participant import Participant
from slot_settlement.db.models.settlement_batch import BatchStatus, SettlementBatch
from slot_settlement.db.models.settlement_pairing import (
    PairingStatus,
    SettlementPairing,
)
from slot_settlement.db.models.slot_transfer import SlotTransfer

__all__ = [
    "BatchStatus",
    "BatchTransfer",
    "PairingStatus",
    "Participant",
    "SettlementBatch",
    "SettlementPairing",
    "SlotTransfer",
]
