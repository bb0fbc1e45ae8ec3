"""Pydantic schemas for participants endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from slot_settlement.db.models.participant import Participant


class ParticipantResponse(BaseModel):
    """Public participant representation."""

    name: str
    opted_in: bool
    role: str
    color: str | None

    @classmethod
    def from_model(cls, participant: Participant) -> ParticipantResponse:
        return cls(
            name=participant.name,
            opted_in=participant.opted_in,
            role=participant.role,
            color=participant.color,
        )


class ParticipantsListResponse(BaseModel):
    """Participants list payload."""

    participants: list[ParticipantResponse]

    @classmethod
    def from_models(cls, participants: list[Participant]) -> ParticipantsListResponse:
        return cls(
            participants=[ParticipantResponse.from_model(item) for item in participants]
        )


class UpdatePreferenceRequest(BaseModel):
    """Payload for switching settlement participation on or off."""

    opted_in: bool
