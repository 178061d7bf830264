"""Meeting repository - Database operations for meetings"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Meeting, MeetingNote, MomEmail, Participant


class MeetingRepository:
    """Repository for meeting database operations"""

    @staticmethod
    def get_meeting(db: Session, meeting_id: str) -> Optional[Meeting]:
        """Get a meeting by ID regardless of owner (callers check ownership)"""
        return db.query(Meeting).filter(Meeting.id == meeting_id).first()

    @staticmethod
    def get_owned_meeting(db: Session, meeting_id: str, user_id: str) -> Optional[Meeting]:
        return db.query(Meeting).filter(Meeting.id == meeting_id, Meeting.user_id == user_id).first()

    @staticmethod
    def list_meetings(db: Session, user_id: str, search: Optional[str] = None) -> list[Meeting]:
        """Meetings of an owner, newest start first, optionally filtered by name"""
        query = db.query(Meeting).filter(Meeting.user_id == user_id)

        if search:
            query = query.filter(func.lower(Meeting.name).contains(search.lower(), autoescape=True))

        return query.order_by(Meeting.start_time.desc()).all()

    @staticmethod
    def create_meeting(db: Session, user_id: str, **meeting_data) -> Meeting:
        meeting = Meeting(user_id=user_id, **meeting_data)
        db.add(meeting)
        db.commit()
        db.refresh(meeting)
        return meeting

    @staticmethod
    def update_meeting(db: Session, meeting: Meeting, **updates) -> Meeting:
        for key, value in updates.items():
            if hasattr(meeting, key):
                setattr(meeting, key, value)

        db.commit()
        db.refresh(meeting)
        return meeting

    @staticmethod
    def delete_meeting(db: Session, meeting: Meeting) -> None:
        """Delete a meeting together with its participants, notes and email log"""
        for model in (MomEmail, MeetingNote, Participant):
            db.query(model).filter(model.meeting_id == meeting.id).delete(synchronize_session=False)
        db.delete(meeting)
        db.commit()

    # Minutes email log
    @staticmethod
    def record_mom_email(db: Session, **email_data) -> MomEmail:
        entry = MomEmail(**email_data)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def list_mom_emails(db: Session, meeting_id: str, user_id: str) -> list[MomEmail]:
        return (
            db.query(MomEmail)
            .filter(MomEmail.meeting_id == meeting_id, MomEmail.user_id == user_id)
            .order_by(MomEmail.sent_at.desc())
            .all()
        )
