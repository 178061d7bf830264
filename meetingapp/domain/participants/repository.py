"""Participant repository - Database operations for meeting participants"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ...models import Meeting, Participant


class ParticipantRepository:
    """Repository for participant database operations"""

    @staticmethod
    def list_participants(db: Session, meeting_id: str, user_id: str) -> list[Participant]:
        """Participants of a meeting in join order"""
        return (
            db.query(Participant)
            .filter(Participant.meeting_id == meeting_id, Participant.user_id == user_id)
            .order_by(Participant.join_time.asc())
            .all()
        )

    @staticmethod
    def get_participant(db: Session, participant_id: str) -> Optional[Participant]:
        return db.query(Participant).filter(Participant.id == participant_id).first()

    @staticmethod
    def create_participant(db: Session, meeting_id: str, user_id: str, **participant_data) -> Participant:
        participant = Participant(meeting_id=meeting_id, user_id=user_id, **participant_data)
        db.add(participant)
        db.commit()
        db.refresh(participant)
        return participant

    @staticmethod
    def increment_speaking_count(
        db: Session, participant_id: str, user_id: str, spoke_at: datetime
    ) -> Optional[Participant]:
        """
        Add one speaking point in a single UPDATE statement, only while the
        meeting is active. Returns the refreshed participant, or None when no
        row matched.
        """
        result = db.execute(
            update(Participant)
            .where(
                Participant.id == participant_id,
                Participant.user_id == user_id,
                Participant.meeting_id.in_(select(Meeting.id).where(Meeting.status == "active")),
            )
            .values(
                speaking_count=Participant.speaking_count + 1,
                last_spoke=spoke_at,
                updated_at=spoke_at,
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount == 0:
            return None

        participant = db.query(Participant).filter(Participant.id == participant_id).first()
        db.refresh(participant)
        return participant

    @staticmethod
    def update_participant(db: Session, participant: Participant, **updates) -> Participant:
        for key, value in updates.items():
            if hasattr(participant, key):
                setattr(participant, key, value)

        db.commit()
        db.refresh(participant)
        return participant

    @staticmethod
    def delete_participant(db: Session, participant: Participant) -> None:
        db.delete(participant)
        db.commit()
