"""Registration repository - Database operations for training registrations"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import TrainingRegistration


class RegistrationRepository:
    """Repository for training registration database operations"""

    @staticmethod
    def get_registration(db: Session, registration_id: str) -> Optional[TrainingRegistration]:
        return db.query(TrainingRegistration).filter(TrainingRegistration.id == registration_id).first()

    @staticmethod
    def email_registered(db: Session, training_id: str, email: str) -> bool:
        return (
            db.query(TrainingRegistration.id)
            .filter(
                TrainingRegistration.training_id == training_id,
                func.lower(TrainingRegistration.email) == email.lower(),
            )
            .first()
            is not None
        )

    @staticmethod
    def list_by_training(db: Session, training_id: str, search: Optional[str] = None) -> list[TrainingRegistration]:
        """Registrations of a training, most recent first"""
        query = db.query(TrainingRegistration).filter(TrainingRegistration.training_id == training_id)

        if search:
            term = search.lower()
            query = query.filter(
                or_(
                    func.lower(TrainingRegistration.first_name).contains(term, autoescape=True),
                    func.lower(TrainingRegistration.last_name).contains(term, autoescape=True),
                    func.lower(TrainingRegistration.email).contains(term, autoescape=True),
                )
            )

        return query.order_by(TrainingRegistration.registration_date.desc()).all()

    @staticmethod
    def create_registration(db: Session, training_id: str, **registration_data) -> TrainingRegistration:
        registration = TrainingRegistration(training_id=training_id, **registration_data)
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration

    @staticmethod
    def update_registration(db: Session, registration: TrainingRegistration, **updates) -> TrainingRegistration:
        for key, value in updates.items():
            if hasattr(registration, key):
                setattr(registration, key, value)

        db.commit()
        db.refresh(registration)
        return registration

    @staticmethod
    def delete_registration(db: Session, registration: TrainingRegistration) -> None:
        db.delete(registration)
        db.commit()
