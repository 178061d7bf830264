"""
Minutes of meeting delivery
Sends the full minutes to the owner and extra recipients, and each assignee
only their own action items. Every attempt is logged in mom_emails.
"""

import logging
from typing import Awaitable, Callable, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...email_service import send_email
from ...email_templates import minutes_email_content
from ...exceptions import EmailDeliveryError
from ...models import Account, MomEmail, utcnow
from ...security_utils import mask_email
from ...shared.results import Outcome
from ...shared.validators import normalize_email, normalize_email_list
from ..notes.repository import NoteRepository
from ..participants.repository import ParticipantRepository
from .repository import MeetingRepository
from .service import load_owned_meeting

logger = logging.getLogger(__name__)

EmailSender = Callable[..., Awaitable[str]]


def full_minutes_subject(meeting_name: str) -> str:
    return f"Minutes of Meeting: {meeting_name}"


def action_items_subject(meeting_name: str) -> str:
    return f"Action Items from Meeting: {meeting_name}"


class MinutesService:
    """Composes and sends the minutes of one meeting"""

    def __init__(self, db: Session, sender: Optional[EmailSender] = None):
        self.db = db
        self.sender = sender or send_email
        self.repo = MeetingRepository()

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        meeting_id: str,
        account: Account,
        email_type: str,
        to: str,
        subject: str,
        html: str,
        text: str,
        recipient_name: Optional[str] = None,
    ) -> MomEmail:
        """Send one email and record the attempt whatever the result"""
        record = {
            "meeting_id": meeting_id,
            "user_id": account.id,
            "recipient_email": to,
            "recipient_name": recipient_name,
            "email_type": email_type,
            "sent_at": utcnow(),
        }
        try:
            message_id = await self.sender(to, subject, html, text, client=client)
            record.update(email_status="sent", provider_message_id=message_id)
        except EmailDeliveryError as e:
            logger.warning(f"⚠️ Minutes email to {mask_email(to)} failed: {e}")
            record.update(email_status="failed", error=str(e))

        try:
            return self.repo.record_mom_email(self.db, **record)
        except SQLAlchemyError as e:
            # The email already left; keep going and report it unrecorded
            self.db.rollback()
            logger.error(f"❌ Error recording minutes email for meeting {meeting_id}: {e}")
            return MomEmail(**record)

    async def send_minutes(
        self, account: Account, meeting_id: str, additional_emails: Optional[list[str]] = None
    ) -> tuple[Outcome, list[MomEmail]]:
        """
        Send the full minutes to the owner plus `additional_emails`, then one
        action-items email per distinct assignee with only their notes.

        A failed send is recorded and the remaining recipients are still tried.
        """
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, []

        try:
            notes = NoteRepository.list_notes(self.db, meeting.id, account.id)
            participants = ParticipantRepository.list_participants(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error loading minutes content for meeting {meeting_id}: {e}")
            return Outcome.FAILED, []

        owner_email = normalize_email(account.email)
        full_recipients = [owner_email] + normalize_email_list(additional_emails, exclude=owner_email)

        assignees: dict[str, Optional[str]] = {}
        for note in notes:
            email = normalize_email(note.assigned_to_email)
            if note.note_type == "action" and email and email not in assignees:
                assignees[email] = note.assigned_to_name

        logger.info(
            f"📧 Sending minutes of meeting {meeting_id}: "
            f"{len(full_recipients)} full, {len(assignees)} action-item recipient(s)"
        )

        deliveries = []
        async with httpx.AsyncClient(timeout=30) as client:
            html, text = minutes_email_content(meeting, notes, participants)
            for to in full_recipients:
                deliveries.append(
                    await self._deliver(
                        client,
                        meeting.id,
                        account,
                        "full_mom",
                        to,
                        full_minutes_subject(meeting.name),
                        html,
                        text,
                        recipient_name=account.display_name if to == owner_email else None,
                    )
                )

            for to, name in assignees.items():
                html, text = minutes_email_content(
                    meeting, notes, participants, action_items_only=True, assignee_email=to
                )
                deliveries.append(
                    await self._deliver(
                        client,
                        meeting.id,
                        account,
                        "action_items",
                        to,
                        action_items_subject(meeting.name),
                        html,
                        text,
                        recipient_name=name,
                    )
                )

        sent = sum(1 for d in deliveries if d.email_status == "sent")
        logger.info(f"✅ Minutes of meeting {meeting_id}: {sent}/{len(deliveries)} email(s) sent")
        return Outcome.SUCCESS, deliveries

    def history(self, account: Account, meeting_id: str) -> tuple[Outcome, list[MomEmail]]:
        """Previous minutes emails of a meeting, newest first"""
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, []
        try:
            return Outcome.SUCCESS, self.repo.list_mom_emails(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching minutes history for meeting {meeting_id}: {e}")
            return Outcome.FAILED, []
