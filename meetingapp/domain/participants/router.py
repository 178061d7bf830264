"""Participant router - Attendance and speaking points"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Account
from ...shared.aggregation import PARTICIPANT_SORT_KEYS
from ...shared.results import raise_for_outcome
from .schemas import ParticipantCreate, ParticipantResponse, ParticipantStatusUpdate
from .service import ParticipantService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Participants"])

INACTIVE_MEETING_DETAIL = "Participants can only be changed while the meeting is active"


def get_participant_service(db: Session = Depends(get_db)) -> ParticipantService:
    """Dependency injection for ParticipantService"""
    return ParticipantService(db)


@router.post("/meetings/{meeting_id}/participants", response_model=ParticipantResponse, status_code=201)
async def add_participant(
    meeting_id: str,
    data: ParticipantCreate,
    current_user: Account = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service),
):
    outcome, participant = service.add_participant(current_user, meeting_id, data.name, data.email)
    raise_for_outcome(outcome, "Meeting", INACTIVE_MEETING_DETAIL)
    return ParticipantResponse.model_validate(participant)


@router.get("/meetings/{meeting_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(
    meeting_id: str,
    sort_by: Optional[str] = Query(None, description="name, points or join_time"),
    current_user: Account = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service),
):
    """Participants of a meeting, in join order unless a sort key is given"""
    if sort_by and sort_by not in PARTICIPANT_SORT_KEYS:
        raise HTTPException(status_code=422, detail=f"sort_by must be one of {', '.join(PARTICIPANT_SORT_KEYS)}")
    outcome, participants = service.list_participants(current_user, meeting_id, sort_by)
    raise_for_outcome(outcome, "Meeting")
    return [ParticipantResponse.model_validate(p) for p in participants]


@router.post("/participants/{participant_id}/award", response_model=ParticipantResponse)
async def award_speaking_point(
    participant_id: str,
    current_user: Account = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service),
):
    """Give a participant one speaking point"""
    outcome, participant = service.award_speaking_point(current_user, participant_id)
    raise_for_outcome(outcome, "Participant", INACTIVE_MEETING_DETAIL)
    return ParticipantResponse.model_validate(participant)


@router.patch("/participants/{participant_id}/status", response_model=ParticipantResponse)
async def update_participant_status(
    participant_id: str,
    data: ParticipantStatusUpdate,
    current_user: Account = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service),
):
    outcome, participant = service.update_status(current_user, participant_id, data.status)
    raise_for_outcome(outcome, "Participant", INACTIVE_MEETING_DETAIL)
    return ParticipantResponse.model_validate(participant)


@router.delete("/participants/{participant_id}")
async def remove_participant(
    participant_id: str,
    current_user: Account = Depends(get_current_user),
    service: ParticipantService = Depends(get_participant_service),
):
    outcome = service.remove_participant(current_user, participant_id)
    raise_for_outcome(outcome, "Participant", INACTIVE_MEETING_DETAIL)
    return {"message": "Participant removed"}
