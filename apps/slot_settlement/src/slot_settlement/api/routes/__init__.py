"""API v1 router registration."""

from fastapi import APIRouter

from slot_settlement.api.routes import batches, pairings, participants, settlement

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(participants.router)
v1_router.include_router(settlement.router)
v1_router.include_router(batches.router)
v1_router.include_router(pairings.router)
