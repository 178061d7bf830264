"""
Tests for meeting lifecycle, password gating and ownership.
"""
from datetime import timedelta

import pytest

from meetingapp.domain.meetings.service import MeetingService
from meetingapp.domain.notes.service import NoteService
from meetingapp.domain.participants.service import ParticipantService
from meetingapp.exceptions import ValidationError
from meetingapp.models import MeetingNote, Participant
from meetingapp.shared.results import Outcome


@pytest.fixture
def meeting_service(db_session):
    return MeetingService(db_session)


@pytest.fixture
def standup(meeting_service, account):
    return meeting_service.create_meeting(account, "Standup", "abc123", "Daily sync")


@pytest.mark.unit
class TestCreateMeeting:
    """Test MeetingService.create_meeting."""

    def test_new_meeting_is_active_and_password_is_hashed(self, standup, account):
        assert standup.status == "active"
        assert standup.user_id == account.id
        assert standup.end_time is None
        assert standup.password_hash and standup.password_hash != "abc123"

    def test_empty_name_is_rejected(self, meeting_service, account):
        with pytest.raises(ValidationError) as exc_info:
            meeting_service.create_meeting(account, "   ", "abc123")
        assert exc_info.value.field == "name"

    def test_empty_password_is_rejected(self, meeting_service, account):
        with pytest.raises(ValidationError):
            meeting_service.create_meeting(account, "Standup", "")


@pytest.mark.unit
class TestMeetingAccess:
    """Standup / abc123 scenario."""

    def test_owner_with_correct_password(self, meeting_service, standup, account):
        assert meeting_service.verify_meeting_access(account, standup.id, "abc123") is True

    def test_owner_with_wrong_password(self, meeting_service, standup, account):
        assert meeting_service.verify_meeting_access(account, standup.id, "wrong") is False

    def test_correct_password_from_another_account(self, meeting_service, standup, other_account):
        assert meeting_service.verify_meeting_access(other_account, standup.id, "abc123") is False

    def test_unknown_meeting(self, meeting_service, account):
        assert meeting_service.verify_meeting_access(account, "missing-id", "abc123") is False

    def test_password_is_hashed_as_typed(self, meeting_service, account):
        meeting = meeting_service.create_meeting(account, "Standup", " abc123 ")

        assert meeting_service.verify_meeting_access(account, meeting.id, " abc123 ") is True
        assert meeting_service.verify_meeting_access(account, meeting.id, "abc123") is False

    def test_get_meeting_with_password(self, meeting_service, standup, account):
        assert meeting_service.get_meeting(account, standup.id, "abc123")[0] is Outcome.SUCCESS
        assert meeting_service.get_meeting(account, standup.id, "nope")[0] is Outcome.FORBIDDEN


@pytest.mark.unit
class TestListAndSearch:
    """Test listing order and name search."""

    def test_list_is_newest_first_and_owner_scoped(self, meeting_service, db_session, account, other_account):
        first = meeting_service.create_meeting(account, "Retro", "pw")
        second = meeting_service.create_meeting(account, "Planning", "pw")
        meeting_service.create_meeting(other_account, "Private", "pw")
        first.start_time = second.start_time - timedelta(hours=1)
        db_session.commit()

        names = [m.name for m in meeting_service.list_meetings(account)]
        assert names == ["Planning", "Retro"]

    def test_search_is_case_insensitive_substring(self, meeting_service, account):
        meeting_service.create_meeting(account, "Weekly Standup", "pw")
        meeting_service.create_meeting(account, "Retro", "pw")

        assert [m.name for m in meeting_service.search_meetings_by_name(account, "STAND")] == ["Weekly Standup"]
        assert len(meeting_service.search_meetings_by_name(account, "  ")) == 2

    def test_search_treats_wildcards_literally(self, meeting_service, account):
        meeting_service.create_meeting(account, "Retro", "pw")
        assert meeting_service.search_meetings_by_name(account, "%") == []


@pytest.mark.unit
class TestLifecycle:
    """Test end, pause and resume transitions."""

    def test_end_sets_end_time_once(self, meeting_service, standup, account):
        assert meeting_service.end_meeting(account, standup.id) is Outcome.SUCCESS
        _, ended = meeting_service.get_meeting(account, standup.id)
        assert ended.status == "ended"
        assert ended.end_time is not None
        assert meeting_service.end_meeting(account, standup.id) is Outcome.CONFLICT

    def test_pause_and_resume(self, meeting_service, standup, account):
        assert meeting_service.resume_meeting(account, standup.id) is Outcome.CONFLICT
        assert meeting_service.pause_meeting(account, standup.id) is Outcome.SUCCESS
        assert meeting_service.pause_meeting(account, standup.id) is Outcome.CONFLICT
        assert meeting_service.resume_meeting(account, standup.id) is Outcome.SUCCESS

    def test_paused_meeting_can_be_ended(self, meeting_service, standup, account):
        meeting_service.pause_meeting(account, standup.id)
        assert meeting_service.end_meeting(account, standup.id) is Outcome.SUCCESS

    def test_missing_meeting(self, meeting_service, account):
        assert meeting_service.end_meeting(account, "missing-id") is Outcome.NOT_FOUND


@pytest.mark.unit
class TestOwnership:
    """No other account can read, mutate or delete a meeting or its children."""

    def test_other_account_is_refused_everywhere(self, db_session, meeting_service, standup, account, other_account):
        participants = ParticipantService(db_session)
        notes = NoteService(db_session)
        _, participant = participants.add_participant(account, standup.id, "Ana")
        _, note = notes.create_note(account, standup.id, "Ship it", "decision")

        assert meeting_service.get_meeting(other_account, standup.id)[0] is Outcome.FORBIDDEN
        assert meeting_service.end_meeting(other_account, standup.id) is Outcome.FORBIDDEN
        assert meeting_service.delete_meeting(other_account, standup.id) is Outcome.FORBIDDEN
        assert meeting_service.meeting_summary(other_account, standup.id)[0] is Outcome.FORBIDDEN
        assert participants.list_participants(other_account, standup.id) == (Outcome.FORBIDDEN, [])
        assert participants.award_speaking_point(other_account, participant.id)[0] is Outcome.FORBIDDEN
        assert participants.remove_participant(other_account, participant.id) is Outcome.FORBIDDEN
        assert notes.list_notes(other_account, standup.id) == (Outcome.FORBIDDEN, [])
        assert notes.update_note(other_account, note.id, content="hijack")[0] is Outcome.FORBIDDEN
        assert notes.delete_note(other_account, note.id) is Outcome.FORBIDDEN
        assert meeting_service.list_meetings(other_account) == []

        db_session.refresh(participant)
        assert participant.speaking_count == 0


@pytest.mark.unit
class TestDeleteMeeting:
    """Test cascading delete."""

    def test_delete_removes_participants_and_notes(self, db_session, meeting_service, standup, account):
        ParticipantService(db_session).add_participant(account, standup.id, "Ana")
        NoteService(db_session).create_note(account, standup.id, "Remember the demo")

        assert meeting_service.delete_meeting(account, standup.id) is Outcome.SUCCESS
        assert meeting_service.get_meeting(account, standup.id)[0] is Outcome.NOT_FOUND
        assert db_session.query(Participant).count() == 0
        assert db_session.query(MeetingNote).count() == 0


@pytest.mark.unit
class TestSummary:
    """Test dashboard metrics."""

    def test_summary_counts_speakers_and_points(self, db_session, meeting_service, standup, account):
        participants = ParticipantService(db_session)
        _, ana = participants.add_participant(account, standup.id, "Ana")
        participants.add_participant(account, standup.id, "Ben")
        participants.award_speaking_point(account, ana.id)
        participants.award_speaking_point(account, ana.id)

        outcome, summary = meeting_service.meeting_summary(account, standup.id)
        assert outcome is Outcome.SUCCESS
        assert summary["metrics"]["total_participants"] == 2
        assert summary["metrics"]["active_speakers"] == 1
        assert summary["metrics"]["total_speaking_points"] == 2
        assert summary["metrics"]["duration_minutes"] >= 0
