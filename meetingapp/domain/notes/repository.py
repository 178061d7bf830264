"""Note repository - Database operations for meeting notes"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import MeetingNote


class NoteRepository:
    """Repository for meeting note database operations"""

    @staticmethod
    def list_notes(db: Session, meeting_id: str, user_id: str) -> list[MeetingNote]:
        """Notes of a meeting, oldest first"""
        return (
            db.query(MeetingNote)
            .filter(MeetingNote.meeting_id == meeting_id, MeetingNote.user_id == user_id)
            .order_by(MeetingNote.created_at.asc())
            .all()
        )

    @staticmethod
    def get_note(db: Session, note_id: str) -> Optional[MeetingNote]:
        return db.query(MeetingNote).filter(MeetingNote.id == note_id).first()

    @staticmethod
    def create_note(db: Session, meeting_id: str, user_id: str, **note_data) -> MeetingNote:
        note = MeetingNote(meeting_id=meeting_id, user_id=user_id, **note_data)
        db.add(note)
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def update_note(db: Session, note: MeetingNote, **updates) -> MeetingNote:
        for key, value in updates.items():
            if hasattr(note, key):
                setattr(note, key, value)

        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def delete_note(db: Session, note: MeetingNote) -> None:
        db.delete(note)
        db.commit()
