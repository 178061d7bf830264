"""Registration service - Public sign-up and registration management"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import REGISTRATION_UNIQUE_EMAIL
from ...exceptions import DuplicateRegistrationError, ValidationError
from ...models import TrainingRegistration, utcnow
from ...security_utils import mask_email
from ...shared.aggregation import present_registrations
from ...shared.results import Outcome
from ...shared.validators import optional_text, require_text, validate_email
from ..trainings.repository import TrainingRepository
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    """
    Service layer for training registrations.

    Registration itself needs no account. Status changes and deletion act on
    any registration id; callers decide who may reach them.
    """

    def __init__(self, db: Session, unique_email: Optional[bool] = None):
        self.db = db
        self.repo = RegistrationRepository()
        self.unique_email = REGISTRATION_UNIQUE_EMAIL if unique_email is None else unique_email

    def register(
        self,
        training_id: str,
        first_name: str,
        last_name: str,
        email: str,
        education_specialty: str,
        education_level: int,
        member_type: str,
        **optional_fields,
    ) -> tuple[Outcome, Optional[TrainingRegistration]]:
        """
        Register a person for an active training.

        Raises:
            ValidationError: A required form field is empty
            DuplicateRegistrationError: Email already registered (when enforced)
        """
        first_name = require_text(first_name, "first_name")
        last_name = require_text(last_name, "last_name")
        email = require_text(email, "email")
        try:
            email = validate_email(email)
        except ValueError as e:
            raise ValidationError(str(e), field="email") from e
        education_specialty = require_text(education_specialty, "education_specialty")
        member_type = require_text(member_type, "member_type")
        if not education_level:
            raise ValidationError("Education level is required", field="education_level")

        try:
            training = TrainingRepository.get_training(self.db, training_id)
            if not training:
                return Outcome.NOT_FOUND, None
            if training.status != "active":
                logger.info(f"ℹ️ Training {training_id} is {training.status}, registration closed")
                return Outcome.CONFLICT, None
            if self.unique_email and self.repo.email_registered(self.db, training.id, email):
                raise DuplicateRegistrationError(f"{email} is already registered for this training")

            registration = self.repo.create_registration(
                self.db,
                training.id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=optional_text(optional_fields.get("phone")),
                education_specialty=education_specialty,
                education_level=int(education_level),
                member_type=member_type,
                training_level=optional_fields.get("training_level") or None,
                notes=optional_text(optional_fields.get("notes")),
                registration_date=utcnow(),
                status="registered",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error registering {mask_email(email)} for training {training_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Registration {registration.id} for training {training_id}")
        return Outcome.SUCCESS, registration

    def list_by_training(self, training_id: str, search: Optional[str] = None) -> list[TrainingRegistration]:
        try:
            return self.repo.list_by_training(self.db, training_id, search=optional_text(search))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching registrations for training {training_id}: {e}")
            return []

    def grouped_by_training(self, training_id: str, search: Optional[str] = None) -> tuple[Outcome, Optional[dict]]:
        """Registrations grouped by level for a completed training, flat otherwise"""
        try:
            training = TrainingRepository.get_training(self.db, training_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error fetching training {training_id}: {e}")
            return Outcome.FAILED, None
        if not training:
            return Outcome.NOT_FOUND, None
        return Outcome.SUCCESS, present_registrations(training, self.list_by_training(training.id, search))

    def update_status(self, registration_id: str, status: str) -> tuple[Outcome, Optional[TrainingRegistration]]:
        """
        Raises:
            ValidationError: Empty status
        """
        status = require_text(status, "status")
        try:
            registration = self.repo.get_registration(self.db, registration_id)
            if not registration:
                return Outcome.NOT_FOUND, None
            registration = self.repo.update_registration(self.db, registration, status=status)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating registration {registration_id}: {e}")
            return Outcome.FAILED, None

        logger.info(f"✅ Registration {registration_id} is now {status}")
        return Outcome.SUCCESS, registration

    def delete_registration(self, registration_id: str) -> Outcome:
        try:
            registration = self.repo.get_registration(self.db, registration_id)
            if not registration:
                return Outcome.NOT_FOUND
            self.repo.delete_registration(self.db, registration)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting registration {registration_id}: {e}")
            return Outcome.FAILED

        logger.info(f"🗑️ Registration {registration_id} deleted")
        return Outcome.SUCCESS
