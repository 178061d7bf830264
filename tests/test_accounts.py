"""
Tests for account registration, login and lookups.
"""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from meetingapp.domain.accounts.service import AccountService
from meetingapp.exceptions import AccountExistsError, ValidationError


@pytest.mark.unit
class TestRegistration:
    """Test AccountService.register."""

    def test_register_stores_lowercase_email_and_hash(self, db_session):
        service = AccountService(db_session)
        account = service.register("Jane.Doe@Example.com", "s3cret-pass", "Jane Doe")

        assert account.email == "jane.doe@example.com"
        assert account.username == "jane.doe"
        assert account.password_hash != "s3cret-pass"

    def test_register_rejects_taken_email(self, db_session, account):
        with pytest.raises(AccountExistsError):
            AccountService(db_session).register("XAVIER@example.com", "pw", "Another")

    def test_register_rejects_taken_username(self, db_session, account):
        with pytest.raises(AccountExistsError):
            AccountService(db_session).register("new@example.com", "pw", "New", username="xavier")

    def test_register_makes_derived_username_unique(self, db_session, account):
        created = AccountService(db_session).register("xavier@other.org", "pw", "Other Xavier")
        assert created.username == "xavier2"

    @pytest.mark.parametrize(
        "email,password,display_name,field",
        [
            ("", "pw", "Name", "email"),
            ("a@example.com", "  ", "Name", "password"),
            ("a@example.com", "pw", "", "display_name"),
        ],
    )
    def test_register_requires_fields(self, db_session, email, password, display_name, field):
        with pytest.raises(ValidationError) as exc_info:
            AccountService(db_session).register(email, password, display_name)
        assert exc_info.value.field == field

    def test_register_rejects_malformed_email(self, db_session):
        with pytest.raises(ValidationError):
            AccountService(db_session).register("not-an-email", "pw", "Name")


@pytest.mark.unit
class TestLoginAndLookup:
    """Test login and email lookups."""

    def test_login_with_correct_password(self, db_session, account):
        assert AccountService(db_session).login("Xavier@Example.com", "password123").id == account.id

    def test_login_with_wrong_password(self, db_session, account):
        assert AccountService(db_session).login("xavier@example.com", "nope") is None

    def test_login_unknown_email(self, db_session):
        assert AccountService(db_session).login("ghost@example.com", "password123") is None

    def test_password_with_surrounding_spaces_round_trips(self, db_session):
        service = AccountService(db_session)
        created = service.register("z@example.com", " s3cret ", "Zed")

        assert service.login("z@example.com", " s3cret ").id == created.id
        assert service.login("z@example.com", "s3cret") is None

    def test_check_email_exists(self, db_session, account):
        service = AccountService(db_session)
        assert service.check_email_exists(" XAVIER@example.com ") is True
        assert service.check_email_exists("ghost@example.com") is False
        assert service.check_email_exists("") is False

    def test_existing_emails_returns_registered_subset(self, db_session, account, other_account):
        found = AccountService(db_session).existing_emails(
            ["xavier@example.com", "ghost@example.com", "yasmine@example.com"]
        )
        assert found == {"xavier@example.com", "yasmine@example.com"}

    def test_storage_failure_reads_as_missing(self, db_session):
        service = AccountService(db_session)
        with patch.object(service.repo, "get_by_email", side_effect=OperationalError("SELECT", {}, Exception())):
            assert service.check_email_exists("xavier@example.com") is False

    def test_storage_failure_rolls_back_the_session(self, db_session):
        service = AccountService(db_session)
        failure = OperationalError("SELECT", {}, Exception())
        with patch.object(service.repo, "get_by_email", side_effect=failure), patch.object(
            db_session, "rollback", wraps=db_session.rollback
        ) as rollback:
            assert service.get_by_email("xavier@example.com") is None
            assert service.check_email_exists("xavier@example.com") is False
        assert rollback.call_count == 2

        with patch.object(service.repo, "existing_emails", side_effect=failure), patch.object(
            db_session, "rollback", wraps=db_session.rollback
        ) as rollback:
            assert service.existing_emails(["xavier@example.com"]) == set()
        rollback.assert_called_once()
