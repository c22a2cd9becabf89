"""
Test cases for the view and submit eligibility checks.
"""
from datetime import datetime, timedelta

import pytest

from eventquiz.auth.identity import CallerIdentity
from eventquiz.quiz.eligibility import check_access, check_window, ensure_can_submit
from eventquiz.quiz.errors import (
    AlreadySubmitted,
    AuthRequired,
    Ended,
    Inactive,
    NotFound,
    NotRegistered,
    NotStarted,
)
from eventquiz.quiz.models import Quiz

NOW = datetime(2026, 5, 1, 12, 0, 0)
PARTICIPANT = CallerIdentity(email='sam@example.com', name='Sam')
ADMIN = CallerIdentity(email='admin@example.com', name='Admin', is_admin=True)


class FakeRegistrations:
    def __init__(self, *pairs):
        self.pairs = set(pairs)

    def is_registered(self, event_id, email):
        return (event_id, email) in self.pairs


class FakeSubmissions:
    def __init__(self, *pairs):
        self.pairs = set(pairs)

    def has_submitted(self, quiz_id, email):
        return (quiz_id, email) in self.pairs


def make_quiz(**fields):
    values = {'id': 7, 'title': 'Quiz', 'is_active': True}
    values.update(fields)
    return Quiz(**values)


class TestWindow:

    def test_open_window(self):
        assert check_window(make_quiz(), NOW) is None

    def test_bounds_are_inclusive(self):
        quiz = make_quiz(available_from=NOW, available_until=NOW)
        assert check_window(quiz, NOW) is None

    def test_not_started_carries_start_time(self):
        start = NOW + timedelta(minutes=5)
        error = check_window(make_quiz(available_from=start), NOW)
        assert isinstance(error, NotStarted)
        assert error.to_payload()['available_from'] == start.isoformat() + 'Z'

    def test_ended(self):
        error = check_window(make_quiz(available_until=NOW - timedelta(seconds=1)), NOW)
        assert isinstance(error, Ended)


class TestCheckAccess:

    def test_anonymous_may_view_ungated_quiz(self):
        decision = check_access(make_quiz(), None, NOW, FakeRegistrations(), FakeSubmissions())
        assert decision.allowed
        assert decision.already_submitted is False

    def test_anonymous_needs_sign_in_for_event_quiz(self):
        decision = check_access(make_quiz(linked_event_id=2), None, NOW, FakeRegistrations(), FakeSubmissions())
        assert not decision.allowed
        assert isinstance(decision.error, AuthRequired)

    def test_unregistered_caller(self):
        decision = check_access(make_quiz(linked_event_id=2), PARTICIPANT, NOW,
                                FakeRegistrations((3, PARTICIPANT.email)), FakeSubmissions())
        assert decision.reason == 'not_registered'

    def test_registered_caller(self):
        decision = check_access(make_quiz(linked_event_id=2), PARTICIPANT, NOW,
                                FakeRegistrations((2, PARTICIPANT.email)), FakeSubmissions())
        assert decision.allowed

    def test_inactive_is_checked_first(self):
        quiz = make_quiz(is_active=False, linked_event_id=2, available_until=NOW - timedelta(days=1))
        decision = check_access(quiz, None, NOW, FakeRegistrations(), FakeSubmissions())
        assert isinstance(decision.error, Inactive)

    def test_window_is_checked_before_registration(self):
        quiz = make_quiz(linked_event_id=2, available_from=NOW + timedelta(hours=1))
        decision = check_access(quiz, PARTICIPANT, NOW, FakeRegistrations(), FakeSubmissions())
        assert isinstance(decision.error, NotStarted)

    def test_prior_submission_is_advisory(self):
        decision = check_access(make_quiz(), PARTICIPANT, NOW, FakeRegistrations(),
                                FakeSubmissions((7, PARTICIPANT.email)))
        assert decision.allowed
        assert decision.already_submitted is True

    def test_admin_bypasses_gates(self):
        quiz = make_quiz(is_active=False, linked_event_id=2, available_until=NOW - timedelta(days=1))
        decision = check_access(quiz, ADMIN, NOW, FakeRegistrations(), FakeSubmissions())
        assert decision.allowed


class TestEnsureCanSubmit:

    def test_missing_quiz(self):
        with pytest.raises(NotFound):
            ensure_can_submit(None, PARTICIPANT, NOW, FakeRegistrations(), FakeSubmissions())

    def test_inactive_quiz_is_not_found(self):
        with pytest.raises(NotFound):
            ensure_can_submit(make_quiz(is_active=False), PARTICIPANT, NOW,
                              FakeRegistrations(), FakeSubmissions())

    def test_ended(self):
        quiz = make_quiz(available_until=NOW - timedelta(seconds=1))
        with pytest.raises(Ended):
            ensure_can_submit(quiz, PARTICIPANT, NOW, FakeRegistrations(), FakeSubmissions())

    def test_not_registered(self):
        with pytest.raises(NotRegistered):
            ensure_can_submit(make_quiz(linked_event_id=4), PARTICIPANT, NOW,
                              FakeRegistrations(), FakeSubmissions())

    def test_registration_is_checked_before_prior_submission(self):
        with pytest.raises(NotRegistered):
            ensure_can_submit(make_quiz(linked_event_id=4), PARTICIPANT, NOW,
                              FakeRegistrations(), FakeSubmissions((7, PARTICIPANT.email)))

    def test_already_submitted(self):
        with pytest.raises(AlreadySubmitted):
            ensure_can_submit(make_quiz(), PARTICIPANT, NOW, FakeRegistrations(),
                              FakeSubmissions((7, PARTICIPANT.email)))

    def test_admin_has_no_bypass(self):
        with pytest.raises(NotFound):
            ensure_can_submit(make_quiz(is_active=False), ADMIN, NOW, FakeRegistrations(), FakeSubmissions())

    def test_allowed(self):
        quiz = make_quiz()
        assert ensure_can_submit(quiz, PARTICIPANT, NOW, FakeRegistrations(), FakeSubmissions()) is quiz
