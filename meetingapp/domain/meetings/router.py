"""Meeting router - FastAPI endpoints for meetings, exports and minutes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Account
from ...shared.results import raise_for_outcome
from ...utils.spreadsheet_export import (
    SPREADSHEET_MEDIA_TYPE,
    attendance_rows,
    build_spreadsheet_html,
    participation_rows,
    spreadsheet_filename,
)
from ..participants.router import get_participant_service
from ..participants.service import ParticipantService
from .minutes_service import MinutesService
from .schemas import (
    MeetingAccessRequest,
    MeetingAccessResponse,
    MeetingCreate,
    MeetingResponse,
    MeetingSummaryResponse,
    MinutesDelivery,
    MinutesSendRequest,
    MinutesSendResponse,
)
from .service import MeetingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meetings", tags=["Meetings"])


def get_meeting_service(db: Session = Depends(get_db)) -> MeetingService:
    """Dependency injection for MeetingService"""
    return MeetingService(db)


def get_minutes_service(db: Session = Depends(get_db)) -> MinutesService:
    return MinutesService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post("", response_model=MeetingResponse, status_code=201)
async def create_meeting(
    data: MeetingCreate,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Start a password-protected meeting"""
    meeting = service.create_meeting(current_user, data.name, data.password, data.description)
    if not meeting:
        raise HTTPException(status_code=503, detail="Failed to create meeting")
    return MeetingResponse.model_validate(meeting)


@router.get("", response_model=list[MeetingResponse])
async def list_meetings(
    search: Optional[str] = Query(None, description="Case-insensitive name filter"),
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Meeting history of the current user, newest first"""
    if search:
        meetings = service.search_meetings_by_name(current_user, search)
    else:
        meetings = service.list_meetings(current_user)
    return [MeetingResponse.model_validate(m) for m in meetings]


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    outcome, meeting = service.get_meeting(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting")
    return MeetingResponse.model_validate(meeting)


@router.post("/{meeting_id}/access", response_model=MeetingAccessResponse)
async def verify_meeting_access(
    meeting_id: str,
    data: MeetingAccessRequest,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Check the meeting password before reopening a meeting"""
    if not service.verify_meeting_access(current_user, meeting_id, data.password):
        raise HTTPException(status_code=401, detail="Incorrect password")
    return MeetingAccessResponse(granted=True)


@router.post("/{meeting_id}/end", response_model=MeetingResponse)
async def end_meeting(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    outcome = service.end_meeting(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting", "Meeting has already ended")
    _, meeting = service.get_meeting(current_user, meeting_id)
    return MeetingResponse.model_validate(meeting)


@router.post("/{meeting_id}/pause", response_model=MeetingResponse)
async def pause_meeting(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    outcome = service.pause_meeting(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting", "Only an active meeting can be paused")
    _, meeting = service.get_meeting(current_user, meeting_id)
    return MeetingResponse.model_validate(meeting)


@router.post("/{meeting_id}/resume", response_model=MeetingResponse)
async def resume_meeting(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    outcome = service.resume_meeting(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting", "Only a paused meeting can be resumed")
    _, meeting = service.get_meeting(current_user, meeting_id)
    return MeetingResponse.model_validate(meeting)


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Delete a meeting with its participants and notes"""
    raise_for_outcome(service.delete_meeting(current_user, meeting_id), "Meeting")
    return {"message": "Meeting deleted"}


@router.get("/{meeting_id}/summary", response_model=MeetingSummaryResponse)
async def meeting_summary(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Participants, active speakers, speaking points and duration"""
    outcome, summary = service.meeting_summary(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting")
    return MeetingSummaryResponse(
        meeting=MeetingResponse.model_validate(summary["meeting"]),
        metrics=summary["metrics"],
    )


# ============================================================================
# EXPORTS
# ============================================================================


def _export(
    rows_builder,
    suffix: str,
    meeting_id: str,
    current_user: Account,
    service: MeetingService,
    participants: ParticipantService,
) -> Response:
    outcome, meeting = service.get_meeting(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting")

    rows = rows_builder(participants.participants_for_export(current_user, meeting), meeting, current_user)
    content = build_spreadsheet_html(rows)
    filename = spreadsheet_filename(f"{meeting.name}-{suffix}")
    logger.info(f"📊 Exported {len(rows)} {suffix} row(s) for meeting {meeting_id}")
    return Response(
        content=content,
        media_type=SPREADSHEET_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{meeting_id}/export/attendance")
async def export_attendance(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
    participants: ParticipantService = Depends(get_participant_service),
):
    """Attendance sheet as an .xls workbook"""
    return _export(attendance_rows, "attendance", meeting_id, current_user, service, participants)


@router.get("/{meeting_id}/export/participation")
async def export_participation(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
    participants: ParticipantService = Depends(get_participant_service),
):
    """Speaking points per participant as an .xls workbook"""
    return _export(participation_rows, "participation", meeting_id, current_user, service, participants)


# ============================================================================
# MINUTES OF MEETING
# ============================================================================


@router.post("/{meeting_id}/minutes/send", response_model=MinutesSendResponse)
async def send_minutes(
    meeting_id: str,
    data: MinutesSendRequest,
    current_user: Account = Depends(get_current_user),
    service: MinutesService = Depends(get_minutes_service),
):
    """Email the minutes; action items go separately to each assignee"""
    outcome, deliveries = await service.send_minutes(current_user, meeting_id, data.additional_emails)
    raise_for_outcome(outcome, "Meeting")
    sent = sum(1 for d in deliveries if d.email_status == "sent")
    return MinutesSendResponse(
        sent=sent,
        failed=len(deliveries) - sent,
        deliveries=[MinutesDelivery.model_validate(d) for d in deliveries],
    )


@router.get("/{meeting_id}/minutes/history", response_model=list[MinutesDelivery])
async def minutes_history(
    meeting_id: str,
    current_user: Account = Depends(get_current_user),
    service: MinutesService = Depends(get_minutes_service),
):
    outcome, entries = service.history(current_user, meeting_id)
    raise_for_outcome(outcome, "Meeting")
    return [MinutesDelivery.model_validate(e) for e in entries]
