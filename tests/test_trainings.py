"""
Tests for trainings, shared management and collaborators.
"""
from datetime import timedelta
from unittest.mock import patch

import pytest

from meetingapp.domain.registrations.service import RegistrationService
from meetingapp.domain.trainings.service import TrainingService
from meetingapp.exceptions import ValidationError
from meetingapp.models import TrainingCollaborator, TrainingRegistration
from meetingapp.shared.results import Outcome

REGISTRATION = {
    "first_name": "Lina",
    "last_name": "Ben Ali",
    "email": "lina@example.com",
    "education_specialty": "ing_info",
    "education_level": 2,
    "member_type": "actif",
}


@pytest.fixture
def service(db_session):
    return TrainingService(db_session)


@pytest.mark.unit
class TestCreateTraining:
    """Test TrainingService.create_training."""

    def test_collaborators_are_filtered_to_registered_accounts(self, service, account, other_account):
        training = service.create_training(
            account,
            "Python 101",
            [" Yasmine@Example.com", "yasmine@example.com", "ghost@example.com", "XAVIER@example.com"],
            location="Lab 2",
        )
        assert training.status == "active"
        assert training.location == "Lab 2"
        assert [c.collaborator_email for c in training.collaborators] == ["yasmine@example.com"]

    def test_title_is_required(self, service, account):
        with pytest.raises(ValidationError):
            service.create_training(account, "  ")

    def test_collaborators_are_resolved_through_the_account_service(self, service, account, other_account):
        with patch(
            "meetingapp.domain.trainings.service.AccountService.existing_emails", return_value=set()
        ) as existing:
            training = service.create_training(account, "Python 101", ["yasmine@example.com"])

        existing.assert_called_once_with(["yasmine@example.com"])
        assert training.collaborators == []


@pytest.mark.unit
class TestListTrainings:
    """Owned and shared trainings, each exactly once."""

    def test_union_of_owned_and_shared_without_duplicates(
        self, db_session, service, make_account, account, other_account
    ):
        third = make_account("zoe")
        owned = service.create_training(other_account, "Owned by Y")
        shared = service.create_training(account, "Shared with Y", ["yasmine@example.com"])
        service.create_training(third, "Not visible")
        # Also listed as a collaborator on a training Y owns
        db_session.add(
            TrainingCollaborator(
                training_id=owned.id, collaborator_email="yasmine@example.com", added_by=other_account.id
            )
        )
        db_session.commit()

        visible = service.list_trainings(other_account)
        assert sorted(t.id for t in visible) == sorted([owned.id, shared.id])

    def test_newest_first(self, db_session, service, account):
        older = service.create_training(account, "Older")
        newer = service.create_training(account, "Newer")
        older.created_at = newer.created_at - timedelta(days=1)
        db_session.commit()
        assert [t.title for t in service.list_trainings(account)] == ["Newer", "Older"]

    def test_search_and_status_filter(self, service, account):
        service.create_training(account, "Python 101", description="Basics")
        done = service.create_training(account, "Rust", location="Python lab")
        service.update_status(account, done.id, "completed")

        assert {t.title for t in service.list_trainings(account, search="python")} == {"Python 101", "Rust"}
        assert [t.title for t in service.list_trainings(account, status="completed")] == ["Rust"]

    def test_removing_collaborator_revokes_visibility(self, service, account, other_account):
        training = service.create_training(account, "Shared", ["yasmine@example.com"])
        assert [t.id for t in service.list_trainings(other_account)] == [training.id]

        assert service.remove_collaborator(account, training.id, "yasmine@example.com") is Outcome.SUCCESS
        assert service.list_trainings(other_account) == []


@pytest.mark.unit
class TestManagement:
    """Owner and collaborators can manage; others cannot."""

    def test_can_manage(self, service, make_account, account, other_account):
        outsider = make_account("omar")
        training = service.create_training(account, "Shared", ["yasmine@example.com"])
        assert service.can_manage(account, training.id) is True
        assert service.can_manage(other_account, training.id) is True
        assert service.can_manage(outsider, training.id) is False
        assert service.get_training(outsider, "missing-id") == (Outcome.NOT_FOUND, None)

    def test_update_fields(self, service, account):
        training = service.create_training(account, "Draft")
        outcome, updated = service.update_training(account, training.id, title="Final", max_participants=20)
        assert outcome is Outcome.SUCCESS
        assert updated.title == "Final"
        assert updated.max_participants == 20

    def test_outsider_cannot_update(self, service, make_account, account):
        training = service.create_training(account, "Draft")
        assert service.update_training(make_account("omar"), training.id, title="X")[0] is Outcome.FORBIDDEN

    def test_completed_is_final(self, service, account):
        training = service.create_training(account, "Course")
        assert service.update_status(account, training.id, "completed")[0] is Outcome.SUCCESS
        assert service.update_status(account, training.id, "active")[0] is Outcome.CONFLICT
        assert service.update_status(account, training.id, "completed")[0] is Outcome.SUCCESS

    def test_delete_cascades(self, db_session, service, account, other_account):
        training = service.create_training(account, "Course", ["yasmine@example.com"])
        RegistrationService(db_session).register(training.id, **REGISTRATION)

        assert service.delete_training(account, training.id) is Outcome.SUCCESS
        assert db_session.query(TrainingRegistration).count() == 0
        assert db_session.query(TrainingCollaborator).count() == 0

    def test_overview_counts(self, db_session, service, account):
        first = service.create_training(account, "First")
        second = service.create_training(account, "Second")
        registrations = RegistrationService(db_session)
        registrations.register(first.id, **REGISTRATION)
        registrations.register(first.id, **{**REGISTRATION, "email": "other@example.com"})
        service.update_status(account, second.id, "completed")

        overview = service.overview(account)
        assert overview["total_trainings"] == 2
        assert overview["active_count"] == 1
        assert overview["completed_count"] == 1
        assert overview["total_participants"] == 2
        assert overview["participant_counts"][second.id] == 0


@pytest.mark.unit
class TestCollaborators:
    """Test adding, listing and removing collaborators."""

    def test_add_skips_unknown_owner_and_existing(self, service, make_account, account, other_account):
        make_account("zoe")
        training = service.create_training(account, "Course", ["yasmine@example.com"])

        outcome, added = service.add_collaborators(
            account, training.id, ["zoe@example.com", "yasmine@example.com", "xavier@example.com", "nobody@x.io"]
        )
        assert outcome is Outcome.SUCCESS
        assert added == ["zoe@example.com"]

    def test_add_with_nothing_new_conflicts(self, service, account, other_account):
        training = service.create_training(account, "Course", ["yasmine@example.com"])
        assert service.add_collaborators(account, training.id, ["yasmine@example.com"]) == (Outcome.CONFLICT, [])
        assert service.add_collaborators(account, training.id, ["nobody@x.io"]) == (Outcome.CONFLICT, [])

    def test_collaborator_cannot_add_the_owner(self, service, account, other_account):
        training = service.create_training(account, "Course", ["yasmine@example.com"])
        assert service.add_collaborators(other_account, training.id, ["xavier@example.com"])[0] is Outcome.CONFLICT

    def test_list_resolves_display_names(self, service, account, other_account):
        training = service.create_training(account, "Course", ["yasmine@example.com"])
        outcome, collaborators = service.list_collaborators(account, training.id)
        assert outcome is Outcome.SUCCESS
        assert collaborators[0]["collaborator_email"] == "yasmine@example.com"
        assert collaborators[0]["display_name"] == "Yasmine"

    def test_remove_unknown_collaborator(self, service, account):
        training = service.create_training(account, "Course")
        assert service.remove_collaborator(account, training.id, "ghost@example.com") is Outcome.NOT_FOUND
