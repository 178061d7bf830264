"""Training service - Trainings, shared management and collaborator lists"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Account, Training
from ...shared.aggregation import training_overview
from ...shared.results import Outcome
from ...shared.validators import normalize_email, normalize_email_list, optional_text, require_text
from ..accounts.repository import AccountRepository
from ..accounts.service import AccountService
from .repository import TrainingRepository

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("description", "objectives", "duration", "location")


class TrainingService:
    """Service layer for training business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TrainingRepository()

    def _registered_collaborators(self, emails: Optional[list[str]], owner_email: str) -> list[str]:
        """
        Normalize requested collaborator emails, dropping the owner, duplicates
        and any email without an account.
        """
        candidates = normalize_email_list(emails, exclude=owner_email)
        if not candidates:
            return []
        registered = AccountService(self.db).existing_emails(candidates)
        skipped = [email for email in candidates if email not in registered]
        if skipped:
            logger.info(f"ℹ️ Skipping {len(skipped)} collaborator email(s) without an account")
        return [email for email in candidates if email in registered]

    def _load_manageable(self, account: Account, training_id: str) -> tuple[Outcome, Optional[Training]]:
        """NOT_FOUND when the training does not exist, FORBIDDEN when the caller may not manage it"""
        try:
            training = self.repo.get_training(self.db, training_id)
            if not training:
                return Outcome.NOT_FOUND, None
            if training.user_id == account.id or self.repo.is_collaborator(self.db, training.id, account.email):
                return Outcome.SUCCESS, training
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching training {training_id}: {e}")
            return Outcome.FAILED, None

        logger.warning(f"🚫 Access denied: account {account.id} cannot manage training {training_id}")
        return Outcome.FORBIDDEN, None

    def create_training(
        self, account: Account, title: str, collaborator_emails: Optional[list[str]] = None, **fields
    ) -> Optional[Training]:
        """
        Create an active training owned by the caller.

        Collaborator emails that do not belong to a registered account are
        skipped silently, as is the owner's own email.

        Raises:
            ValidationError: Empty title
        """
        title = require_text(title, "title")
        for key in TEXT_FIELDS:
            if key in fields:
                fields[key] = optional_text(fields[key])

        try:
            collaborators = self._registered_collaborators(collaborator_emails, account.email)
            training = self.repo.create_training(
                self.db, account.id, collaborators, title=title, status="active", **fields
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creating training for account {account.id}: {e}")
            return None

        logger.info(f"✅ Training {training.id} created with {len(collaborators)} collaborator(s)")
        return training

    def list_trainings(
        self, account: Account, search: Optional[str] = None, status: Optional[str] = None
    ) -> list[Training]:
        """Owned and shared trainings, each once, newest first"""
        try:
            return self.repo.list_visible_trainings(
                self.db, account.id, account.email, search=optional_text(search), status=status
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching trainings for account {account.id}: {e}")
            return []

    def can_manage(self, account: Account, training_id: str) -> bool:
        outcome, _ = self._load_manageable(account, training_id)
        return outcome.ok

    def get_training(self, account: Account, training_id: str) -> tuple[Outcome, Optional[Training]]:
        return self._load_manageable(account, training_id)

    def update_training(self, account: Account, training_id: str, **updates) -> tuple[Outcome, Optional[Training]]:
        """
        Edit the descriptive fields of a training.

        Raises:
            ValidationError: Title set to blank
        """
        if "title" in updates:
            updates["title"] = require_text(updates["title"], "title")
        for key in TEXT_FIELDS:
            if key in updates:
                updates[key] = optional_text(updates[key])
        updates.pop("status", None)

        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome, None
        try:
            training = self.repo.update_training(self.db, training, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating training {training_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Training {training_id} updated")
        return Outcome.SUCCESS, training

    def update_status(self, account: Account, training_id: str, status: str) -> tuple[Outcome, Optional[Training]]:
        """Change the lifecycle status; a completed training stays completed"""
        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome, None
        if training.status == status:
            return Outcome.SUCCESS, training
        if training.status == "completed":
            logger.info(f"ℹ️ Training {training_id} is completed, refusing change to {status}")
            return Outcome.CONFLICT, None

        try:
            training = self.repo.update_training(self.db, training, status=status)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating training status {training_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Training {training_id} is now {status}")
        return Outcome.SUCCESS, training

    def delete_training(self, account: Account, training_id: str) -> Outcome:
        """Delete a training with its collaborators and registrations"""
        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome
        try:
            self.repo.delete_training(self.db, training)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting training {training_id}: {e}")
            return Outcome.FAILED

        logger.info(f"🗑️ Training {training_id} deleted by account {account.id}")
        return Outcome.SUCCESS

    def overview(self, account: Account) -> dict:
        """Counts shown above the trainings list"""
        trainings = self.list_trainings(account)
        try:
            counts = self.repo.registration_counts(self.db, [t.id for t in trainings])
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error counting registrations: {e}")
            counts = {}
        return training_overview(trainings, counts)

    # ========================================================================
    # COLLABORATORS
    # ========================================================================

    def add_collaborators(
        self, account: Account, training_id: str, emails: list[str]
    ) -> tuple[Outcome, list[str]]:
        """
        Share a training with registered accounts.

        CONFLICT when no email is left after dropping unknown accounts,
        the owner and existing collaborators.
        """
        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome, []

        try:
            owner = AccountRepository.get_by_id(self.db, training.user_id)
            candidates = self._registered_collaborators(emails, owner.email if owner else account.email)
            existing = self.repo.collaborator_emails(self.db, training.id)
            new_emails = [email for email in candidates if email not in existing]
            if not new_emails:
                return Outcome.CONFLICT, []
            self.repo.add_collaborators(self.db, training.id, new_emails, account.id)
        except IntegrityError as e:
            # Same email added concurrently
            self.db.rollback()
            logger.warning(f"⚠️ Collaborator already present on training {training_id}: {e}")
            return Outcome.CONFLICT, []
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error adding collaborators to training {training_id}: {e}")
            return Outcome.FAILED, []

        logger.info(f"✅ Added {len(new_emails)} collaborator(s) to training {training_id}")
        return Outcome.SUCCESS, new_emails

    def list_collaborators(self, account: Account, training_id: str) -> tuple[Outcome, list[dict]]:
        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome, []
        try:
            rows = self.repo.list_collaborators(self.db, training.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching collaborators of training {training_id}: {e}")
            return Outcome.FAILED, []

        return Outcome.SUCCESS, [
            {
                "collaborator_email": collaborator.collaborator_email,
                "display_name": resolved.display_name if resolved else None,
                "added_by": collaborator.added_by,
                "added_at": collaborator.added_at,
            }
            for collaborator, resolved in rows
        ]

    def remove_collaborator(self, account: Account, training_id: str, email: str) -> Outcome:
        outcome, training = self._load_manageable(account, training_id)
        if not outcome.ok:
            return outcome
        try:
            removed = self.repo.delete_collaborator(self.db, training.id, normalize_email(email))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error removing collaborator from training {training_id}: {e}")
            return Outcome.FAILED

        if not removed:
            return Outcome.NOT_FOUND
        logger.info(f"🗑️ Collaborator removed from training {training_id}")
        return Outcome.SUCCESS
