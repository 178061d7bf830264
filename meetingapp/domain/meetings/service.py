"""Meeting service - Business logic for meeting operations"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Account, Meeting, utcnow
from ...security_utils import hash_password, verify_password
from ...shared.aggregation import participation_metrics
from ...shared.results import Outcome
from ...shared.validators import optional_text, require_text
from ..participants.repository import ParticipantRepository
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


def load_owned_meeting(db: Session, account: Account, meeting_id: str) -> tuple[Outcome, Optional[Meeting]]:
    """
    Resolve a meeting for its owner.

    NOT_FOUND when no meeting has this id, FORBIDDEN when another account owns it.
    """
    try:
        meeting = MeetingRepository.get_meeting(db, meeting_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error fetching meeting {meeting_id}: {e}")
        return Outcome.FAILED, None

    if not meeting:
        return Outcome.NOT_FOUND, None
    if meeting.user_id != account.id:
        logger.warning(f"🚫 Access denied: account {account.id} tried to access meeting {meeting_id}")
        return Outcome.FORBIDDEN, None
    return Outcome.SUCCESS, meeting


class MeetingService:
    """Service layer for meeting business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MeetingRepository()

    def create_meeting(
        self, account: Account, name: str, password: str, description: Optional[str] = None
    ) -> Optional[Meeting]:
        """
        Create an active, password-protected meeting starting now.

        Raises:
            ValidationError: Empty name or password
            CredentialOperationError: Password hashing failed
        """
        name = require_text(name, "name")
        require_text(password, "password")
        password_hash = hash_password(password)

        now = utcnow()
        try:
            meeting = self.repo.create_meeting(
                self.db,
                account.id,
                name=name,
                description=optional_text(description),
                password_hash=password_hash,
                start_time=now,
                status="active",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creating meeting for account {account.id}: {e}")
            return None

        logger.info(f"✅ Meeting {meeting.id} created by account {account.id}")
        return meeting

    def verify_meeting_access(self, account: Account, meeting_id: str, password: str) -> bool:
        """
        True only when the caller owns the meeting and the password matches.
        A missing meeting and someone else's meeting look the same to the caller.
        """
        try:
            meeting = self.repo.get_owned_meeting(self.db, meeting_id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error verifying meeting access: {e}")
            return False

        if not meeting:
            return False
        return verify_password(password, meeting.password_hash)

    def get_meeting(
        self, account: Account, meeting_id: str, password: Optional[str] = None
    ) -> tuple[Outcome, Optional[Meeting]]:
        """Get an owned meeting; when a password is supplied it must match"""
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, None
        if password is not None and not verify_password(password, meeting.password_hash):
            return Outcome.FORBIDDEN, None
        return outcome, meeting

    def list_meetings(self, account: Account) -> list[Meeting]:
        """All meetings of the caller, newest start first"""
        try:
            return self.repo.list_meetings(self.db, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching meetings: {e}")
            return []

    def search_meetings_by_name(self, account: Account, term: str) -> list[Meeting]:
        """Case-insensitive substring search over meeting names"""
        if not term or not term.strip():
            return self.list_meetings(account)
        try:
            return self.repo.list_meetings(self.db, account.id, search=term.strip())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error searching meetings: {e}")
            return []

    def _transition(
        self, account: Account, meeting_id: str, allowed_from: tuple[str, ...], **updates
    ) -> Outcome:
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome
        if meeting.status not in allowed_from:
            logger.info(f"ℹ️ Meeting {meeting_id} is {meeting.status}, cannot become {updates['status']}")
            return Outcome.CONFLICT
        try:
            self.repo.update_meeting(self.db, meeting, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating meeting {meeting_id}: {e}")
            return Outcome.FAILED
        logger.info(f"✅ Meeting {meeting_id} is now {updates['status']}")
        return Outcome.SUCCESS

    def end_meeting(self, account: Account, meeting_id: str) -> Outcome:
        """End a meeting (one-way); CONFLICT if it already ended"""
        return self._transition(
            account, meeting_id, ("active", "paused"), status="ended", end_time=utcnow()
        )

    def pause_meeting(self, account: Account, meeting_id: str) -> Outcome:
        return self._transition(account, meeting_id, ("active",), status="paused")

    def resume_meeting(self, account: Account, meeting_id: str) -> Outcome:
        return self._transition(account, meeting_id, ("paused",), status="active")

    def delete_meeting(self, account: Account, meeting_id: str) -> Outcome:
        """Delete a meeting with its participants, notes and email log"""
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome
        try:
            self.repo.delete_meeting(self.db, meeting)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting meeting {meeting_id}: {e}")
            return Outcome.FAILED
        logger.info(f"🗑️ Meeting {meeting_id} deleted by account {account.id}")
        return Outcome.SUCCESS

    def meeting_summary(self, account: Account, meeting_id: str) -> tuple[Outcome, Optional[dict]]:
        """Dashboard metrics: participants, active speakers, points and duration"""
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, None
        try:
            participants = ParticipantRepository.list_participants(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching participants for meeting {meeting_id}: {e}")
            return Outcome.FAILED, None
        return Outcome.SUCCESS, {"meeting": meeting, "metrics": participation_metrics(participants, meeting)}
