"""
Tests for public training registrations.
"""
from datetime import timedelta

import pytest

from meetingapp.domain.registrations.service import RegistrationService
from meetingapp.domain.trainings.service import TrainingService
from meetingapp.exceptions import DuplicateRegistrationError, ValidationError
from meetingapp.shared.results import Outcome

FORM = {
    "first_name": "Lina",
    "last_name": "Ben Ali",
    "email": "Lina@Example.com",
    "education_specialty": "licence_tic",
    "education_level": 1,
    "member_type": "adherent",
}


@pytest.fixture
def training(db_session, account):
    return TrainingService(db_session).create_training(account, "Python 101")


@pytest.mark.unit
class TestRegister:
    """Test RegistrationService.register."""

    def test_register_without_account(self, db_session, training):
        outcome, registration = RegistrationService(db_session).register(
            training.id, **FORM, phone="  ", training_level="intermediate"
        )
        assert outcome is Outcome.SUCCESS
        assert registration.email == "lina@example.com"
        assert registration.status == "registered"
        assert registration.phone is None
        assert registration.training_level == "intermediate"

    def test_unknown_training(self, db_session):
        assert RegistrationService(db_session).register("missing-id", **FORM) == (Outcome.NOT_FOUND, None)

    def test_closed_training(self, db_session, account, training):
        TrainingService(db_session).update_status(account, training.id, "cancelled")
        assert RegistrationService(db_session).register(training.id, **FORM)[0] is Outcome.CONFLICT

    def test_required_fields(self, db_session, training):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationService(db_session).register(training.id, **{**FORM, "last_name": " "})
        assert exc_info.value.field == "last_name"

    def test_duplicates_allowed_by_default(self, db_session, training):
        service = RegistrationService(db_session, unique_email=False)
        service.register(training.id, **FORM)
        assert service.register(training.id, **FORM)[0] is Outcome.SUCCESS

    def test_duplicate_guard_when_enabled(self, db_session, training):
        service = RegistrationService(db_session, unique_email=True)
        service.register(training.id, **FORM)
        with pytest.raises(DuplicateRegistrationError):
            service.register(training.id, **{**FORM, "email": "LINA@example.com"})


@pytest.mark.unit
class TestListAndManage:
    """Test listing, grouping, status and deletion."""

    def test_list_newest_first_with_search(self, db_session, training):
        service = RegistrationService(db_session)
        _, first = service.register(training.id, **FORM)
        _, second = service.register(training.id, **{**FORM, "first_name": "Omar", "email": "omar@example.com"})
        first.registration_date = second.registration_date - timedelta(minutes=5)
        db_session.commit()

        assert [r.first_name for r in service.list_by_training(training.id)] == ["Omar", "Lina"]
        assert [r.first_name for r in service.list_by_training(training.id, search="OMAR")] == ["Omar"]

    def test_grouped_only_when_completed(self, db_session, account, training):
        service = RegistrationService(db_session)
        service.register(training.id, **FORM, training_level="advanced")
        service.register(training.id, **{**FORM, "email": "b@example.com"})

        _, presented = service.grouped_by_training(training.id)
        assert presented["grouped"] is False
        assert len(presented["registrations"]) == 2

        TrainingService(db_session).update_status(account, training.id, "completed")
        _, presented = service.grouped_by_training(training.id)
        assert presented["grouped"] is True
        assert len(presented["groups"]["advanced"]) == 1
        assert len(presented["groups"]["beginner"]) == 1
        assert presented["groups"]["intermediate"] == []

    def test_update_status_and_delete(self, db_session, training):
        service = RegistrationService(db_session)
        _, registration = service.register(training.id, **FORM)

        outcome, updated = service.update_status(registration.id, "attended")
        assert outcome is Outcome.SUCCESS
        assert updated.status == "attended"
        assert service.delete_registration(registration.id) is Outcome.SUCCESS
        assert service.delete_registration(registration.id) is Outcome.NOT_FOUND
        assert service.update_status("missing-id", "attended") == (Outcome.NOT_FOUND, None)
