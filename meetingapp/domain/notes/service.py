"""Note service - Business logic for meeting notes and action items"""

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Account, MeetingNote
from ...shared.results import Outcome
from ...shared.validators import optional_text, require_text
from ..meetings.service import load_owned_meeting
from .repository import NoteRepository

logger = logging.getLogger(__name__)

ASSIGNMENT_FIELDS = ("assigned_to_name", "assigned_to_email", "due_date")
TEXT_FIELDS = ("title", "assigned_to_name", "assigned_to_email")
REQUIRED_FIELDS = ("note_type", "priority")  # null in an update means "leave unchanged"


def normalize_note_fields(fields: dict[str, Any], note_type: str) -> dict[str, Any]:
    """
    Apply the note invariants to a set of column values.

    Only action notes carry an assignee and a due date; action notes
    start out pending.
    """
    fields = dict(fields)
    for key in TEXT_FIELDS:
        if key in fields:
            fields[key] = optional_text(fields[key])

    if note_type == "action":
        if "status" in fields and fields["status"] is None:
            fields["status"] = "pending"
    else:
        for key in ASSIGNMENT_FIELDS:
            fields[key] = None
    return fields


class NoteService:
    """Service layer for meeting note business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NoteRepository()

    def _load_owned_note(self, account: Account, note_id: str) -> tuple[Outcome, Optional[MeetingNote]]:
        try:
            note = self.repo.get_note(self.db, note_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching note {note_id}: {e}")
            return Outcome.FAILED, None

        if not note:
            return Outcome.NOT_FOUND, None
        if note.user_id != account.id:
            logger.warning(f"🚫 Access denied: account {account.id} tried to modify note {note_id}")
            return Outcome.FORBIDDEN, None
        return Outcome.SUCCESS, note

    def create_note(
        self, account: Account, meeting_id: str, content: str, note_type: str = "general", **fields
    ) -> tuple[Outcome, Optional[MeetingNote]]:
        """
        Record a note on an owned meeting.

        Raises:
            ValidationError: Empty content
        """
        content = require_text(content, "content")
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, None

        fields.setdefault("status", None)
        values = normalize_note_fields(fields, note_type)
        try:
            note = self.repo.create_note(
                self.db, meeting.id, account.id, content=content, note_type=note_type, **values
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error adding note to meeting {meeting_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ {note_type.capitalize()} note {note.id} added to meeting {meeting_id}")
        return Outcome.SUCCESS, note

    def list_notes(self, account: Account, meeting_id: str) -> tuple[Outcome, list[MeetingNote]]:
        outcome, meeting = load_owned_meeting(self.db, account, meeting_id)
        if not outcome.ok:
            return outcome, []
        try:
            return Outcome.SUCCESS, self.repo.list_notes(self.db, meeting.id, account.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching notes for meeting {meeting_id}: {e}")
            return Outcome.FAILED, []

    def update_note(self, account: Account, note_id: str, **updates) -> tuple[Outcome, Optional[MeetingNote]]:
        """
        Edit a note. Changing the type away from action drops the assignment.

        Raises:
            ValidationError: Content set to blank
        """
        updates = {k: v for k, v in updates.items() if v is not None or k not in REQUIRED_FIELDS}
        if "content" in updates:
            updates["content"] = require_text(updates["content"], "content")

        outcome, note = self._load_owned_note(account, note_id)
        if not outcome.ok:
            return outcome, None

        note_type = updates.get("note_type") or note.note_type
        values = normalize_note_fields(updates, note_type)
        if note_type == "action" and note.status is None and "status" not in values:
            values["status"] = "pending"
        try:
            note = self.repo.update_note(self.db, note, **values)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating note {note_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Note {note_id} updated")
        return Outcome.SUCCESS, note

    def update_note_status(
        self, account: Account, note_id: str, status: str
    ) -> tuple[Outcome, Optional[MeetingNote]]:
        outcome, note = self._load_owned_note(account, note_id)
        if not outcome.ok:
            return outcome, None
        try:
            note = self.repo.update_note(self.db, note, status=status)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating note status {note_id}: {e}")
            return Outcome.FAILED, None
        return Outcome.SUCCESS, note

    def delete_note(self, account: Account, note_id: str) -> Outcome:
        outcome, note = self._load_owned_note(account, note_id)
        if not outcome.ok:
            return outcome
        try:
            self.repo.delete_note(self.db, note)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting note {note_id}: {e}")
            return Outcome.FAILED

        logger.info(f"🗑️ Note {note_id} deleted")
        return Outcome.SUCCESS
