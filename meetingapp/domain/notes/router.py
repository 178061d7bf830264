"""Note router - Meeting notes and action items"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Account
from ...shared.results import raise_for_outcome
from .schemas import NoteCreate, NoteResponse, NoteStatusUpdate, NoteUpdate
from .service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])


def get_note_service(db: Session = Depends(get_db)) -> NoteService:
    """Dependency injection for NoteService"""
    return NoteService(db)


@router.post("/meetings/{meeting_id}/notes", response_model=NoteResponse, status_code=201)
async def create_note(
    meeting_id: str,
    data: NoteCreate,
    current_user: Account = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    fields = data.model_dump(exclude={"content", "note_type"})
    outcome, note = service.create_note(current_user, meeting_id, data.content, data.note_type, **fields)
    raise_for_outcome(outcome, "Meeting")
    return NoteResponse.model_validate(note)


@router.get("/meetings/{meeting_id}/notes", response_model=list[NoteResponse])
async def list_notes(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    """Notes of a meeting in the order they were taken"""
    outcome, notes = service.list_notes(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting")
    return [NoteResponse.model_validate(n) for n in notes]


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    current_user: Account = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    outcome, note = service.update_note(current_user, note_id, **data.model_dump(exclude_unset=True))
    raise_for_outcome(outcome, "Note")
    return NoteResponse.model_validate(note)


@router.patch("/notes/{note_id}/status", response_model=NoteResponse)
async def update_note_status(
    note_id: str,
    data: NoteStatusUpdate,
    current_user: Account = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    outcome, note = service.update_note_status(current_user, note_id, data.status)
    raise_for_outcome(outcome, "Note")
    return NoteResponse.model_validate(note)


@router.delete("/notes/{note_id}")
async def delete_note(
    note_id: str,
    current_user: Account = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    outcome = service.delete_note(current_user, note_id)
    raise_for_outcome(outcome, "Note")
    return {"message": "Note deleted"}
