"""Participant service - Business logic for meeting attendance and speaking points"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Account, Meeting, Participant, utcnow
from ...shared.aggregation import sort_participants
from ...shared.results import Outcome
from ...shared.validators import optional_text, require_text
from ..meetings.service import load_owned_meeting
from .repository import ParticipantRepository

logger = logging.getLogger(__name__)


class ParticipantService:
    """Service layer for participant business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ParticipantRepository()

    def _load_for_change(
        self, account: Account, participant_id: str
    ) -> tuple[Outcome, Optional[Participant]]:
        """
        Resolve a participant the caller may mutate.

        CONFLICT when the parent meeting is not active.
        """
        try:
            participant = self.repo.get_participant(self.db, participant_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching participant {participant_id}: {e}")
            return Outcome.FAILED, None

        if not participant:
            return Outcome.NOT_FOUND, None
        if participant.user_id != account.id:
            logger.warning(f"🚫 Access denied: account {account.id} tried to modify participant {participant_id}")
            return Outcome.FORBIDDEN, None

        outcome, meeting = load_owned_meeting(self.db, account, participant.meeting_id)
        if not outcome.ok:
            return outcome, None
        if meeting.status != "active":
            logger.info(f"ℹ️ Meeting {meeting.id} is {meeting.status}, participant {participant_id} is read-only")
            return Outcome.CONFLICT, None
        return Outcome.SUCCESS, participant

    def add_participant(
        self, account: Account, meeting_id: str, name: str, email: Optional[str] = None
    ) -> tuple[Outcome, Optional[Participant]]:
        """
        Add a present participant with zero speaking points.

        Raises:
            ValidationError: Empty name
        """
        name = require_text(name, "name")
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, None
        if meeting.status != "active":
            return Outcome.CONFLICT, None

        try:
            participant = self.repo.create_participant(
                self.db,
                meeting.id,
                account.id,
                name=name,
                email=optional_text(email),
                join_time=utcnow(),
                speaking_count=0,
                status="present",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error adding participant to meeting {meeting_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Participant {participant.id} joined meeting {meeting_id}")
        return Outcome.SUCCESS, participant

    def list_participants(
        self, account: Account, meeting_id: str, sort_by: Optional[str] = None
    ) -> tuple[Outcome, list[Participant]]:
        """Participants in join order, or in a display order when sort_by is given"""
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, []
        try:
            participants = self.repo.list_participants(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching participants for meeting {meeting_id}: {e}")
            return Outcome.FAILED, []

        if sort_by:
            participants = sort_participants(participants, sort_by)
        return Outcome.SUCCESS, participants

    def award_speaking_point(
        self, account: Account, participant_id: str
    ) -> tuple[Outcome, Optional[Participant]]:
        """Add one speaking point and stamp last_spoke"""
        outcome, participant = self._load_for_change(account, participant_id)
        if not outcome.ok:
            return outcome, None

        try:
            updated = self.repo.increment_speaking_count(self.db, participant.id, account.id, utcnow())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error awarding speaking point to {participant_id}: {e}")
            return Outcome.FAILED, None

        if not updated:
            # Removed, or the meeting stopped being active, since the lookup
            if self.repo.get_participant(self.db, participant.id):
                return Outcome.CONFLICT, None
            return Outcome.NOT_FOUND, None
        return Outcome.SUCCESS, updated

    def update_status(
        self, account: Account, participant_id: str, status: str
    ) -> tuple[Outcome, Optional[Participant]]:
        outcome, participant = self._load_for_change(account, participant_id)
        if not outcome.ok:
            return outcome, None

        try:
            participant = self.repo.update_participant(self.db, participant, status=status)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating participant {participant_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Participant {participant_id} marked {status}")
        return Outcome.SUCCESS, participant

    def remove_participant(self, account: Account, participant_id: str) -> Outcome:
        outcome, participant = self._load_for_change(account, participant_id)
        if not outcome.ok:
            return outcome

        try:
            self.repo.delete_participant(self.db, participant)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error removing participant {participant_id}: {e}")
            return Outcome.FAILED

        logger.info(f"🗑️ Participant {participant_id} removed")
        return Outcome.SUCCESS

    def participants_for_export(self, account: Account, meeting: Meeting) -> list[Participant]:
        """Participants of an already-authorized meeting; empty on storage failure"""
        try:
            return self.repo.list_participants(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching participants for export of meeting {meeting.id}: {e}")
            return []
