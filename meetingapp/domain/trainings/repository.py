"""Training repository - Database operations for trainings and their collaborators"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Account, Training, TrainingCollaborator, TrainingRegistration


class TrainingRepository:
    """Repository for training database operations"""

    @staticmethod
    def get_training(db: Session, training_id: str) -> Optional[Training]:
        return db.query(Training).filter(Training.id == training_id).first()

    @staticmethod
    def list_visible_trainings(
        db: Session, user_id: str, email: str, search: Optional[str] = None, status: Optional[str] = None
    ) -> list[Training]:
        """
        Trainings owned by `user_id` or shared with `email`, newest first.
        A training that is both owned and shared is returned once.
        """
        shared_ids = db.query(TrainingCollaborator.training_id).filter(
            TrainingCollaborator.collaborator_email == email.lower()
        )
        query = db.query(Training).filter(or_(Training.user_id == user_id, Training.id.in_(shared_ids)))

        if status:
            query = query.filter(Training.status == status)

        if search:
            term = search.lower()
            query = query.filter(
                or_(
                    func.lower(Training.title).contains(term, autoescape=True),
                    func.lower(Training.description).contains(term, autoescape=True),
                    func.lower(Training.location).contains(term, autoescape=True),
                )
            )

        return query.order_by(Training.created_at.desc()).all()

    @staticmethod
    def create_training(
        db: Session, user_id: str, collaborator_emails: list[str], **training_data
    ) -> Training:
        """Insert a training and its collaborator rows in one transaction"""
        training = Training(user_id=user_id, **training_data)
        db.add(training)
        db.flush()

        for email in collaborator_emails:
            db.add(TrainingCollaborator(training_id=training.id, collaborator_email=email, added_by=user_id))

        db.commit()
        db.refresh(training)
        return training

    @staticmethod
    def update_training(db: Session, training: Training, **updates) -> Training:
        for key, value in updates.items():
            if hasattr(training, key):
                setattr(training, key, value)

        db.commit()
        db.refresh(training)
        return training

    @staticmethod
    def delete_training(db: Session, training: Training) -> None:
        """Delete a training together with its collaborators and registrations"""
        for model in (TrainingCollaborator, TrainingRegistration):
            db.query(model).filter(model.training_id == training.id).delete(synchronize_session=False)
        db.delete(training)
        db.commit()

    @staticmethod
    def registration_counts(db: Session, training_ids: list[str]) -> dict[str, int]:
        if not training_ids:
            return {}
        rows = (
            db.query(TrainingRegistration.training_id, func.count(TrainingRegistration.id))
            .filter(TrainingRegistration.training_id.in_(training_ids))
            .group_by(TrainingRegistration.training_id)
            .all()
        )
        return {training_id: count for training_id, count in rows}

    # Collaborators
    @staticmethod
    def is_collaborator(db: Session, training_id: str, email: str) -> bool:
        return (
            db.query(TrainingCollaborator.id)
            .filter(
                TrainingCollaborator.training_id == training_id,
                TrainingCollaborator.collaborator_email == email.lower(),
            )
            .first()
            is not None
        )

    @staticmethod
    def list_collaborators(db: Session, training_id: str) -> list[tuple[TrainingCollaborator, Optional[Account]]]:
        """Collaborator rows with the account each email currently resolves to"""
        return (
            db.query(TrainingCollaborator, Account)
            .outerjoin(Account, func.lower(Account.email) == TrainingCollaborator.collaborator_email)
            .filter(TrainingCollaborator.training_id == training_id)
            .order_by(TrainingCollaborator.added_at.asc())
            .all()
        )

    @staticmethod
    def collaborator_emails(db: Session, training_id: str) -> set[str]:
        rows = (
            db.query(TrainingCollaborator.collaborator_email)
            .filter(TrainingCollaborator.training_id == training_id)
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def add_collaborators(db: Session, training_id: str, emails: list[str], added_by: str) -> None:
        for email in emails:
            db.add(TrainingCollaborator(training_id=training_id, collaborator_email=email, added_by=added_by))
        db.commit()

    @staticmethod
    def delete_collaborator(db: Session, training_id: str, email: str) -> int:
        """Returns the number of rows removed"""
        deleted = (
            db.query(TrainingCollaborator)
            .filter(
                TrainingCollaborator.training_id == training_id,
                TrainingCollaborator.collaborator_email == email.lower(),
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
