"""
Eligibility checks for viewing and submitting a quiz.

Viewing and submitting differ: anonymous callers may view a
quiz that is not tied to an event, but every submission needs an identity,
and a prior submission is only advisory when viewing.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from eventquiz.auth.identity import CallerIdentity
from eventquiz.quiz.errors import (
    AlreadySubmitted,
    AuthRequired,
    Ended,
    Inactive,
    NotFound,
    NotRegistered,
    NotStarted,
    QuizError,
)
from eventquiz.quiz.models import Quiz


class RegistrationLookup(Protocol):
    def is_registered(self, event_id: int, email: str) -> bool: ...


class SubmissionLookup(Protocol):
    def has_submitted(self, quiz_id: int, email: str) -> bool: ...


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    error: Optional[QuizError] = None
    already_submitted: bool = False

    @property
    def reason(self) -> Optional[str]:
        return self.error.reason if self.error else None


def check_window(quiz: Quiz, now: datetime) -> Optional[QuizError]:
    """Both bounds are inclusive; a missing bound is open on that side."""
    if quiz.available_from is not None and now < quiz.available_from:
        return NotStarted(quiz.available_from)
    if quiz.available_until is not None and now > quiz.available_until:
        return Ended()
    return None


def check_registration(quiz: Quiz, caller: Optional[CallerIdentity],
                       registrations: RegistrationLookup) -> Optional[QuizError]:
    if quiz.linked_event_id is None:
        return None
    if caller is None:
        return AuthRequired("Please sign in to access this quiz")
    if not registrations.is_registered(quiz.linked_event_id, caller.email):
        return NotRegistered()
    return None


def check_access(quiz: Quiz, caller: Optional[CallerIdentity], now: datetime,
                 registrations: RegistrationLookup, submissions: SubmissionLookup) -> AccessDecision:
    """
    Decide whether ``caller`` may view ``quiz``.

    Administrators skip every check. Everyone else is checked for the active
    flag, then the time window, then event registration. The prior-submission
    flag is computed for any signed-in caller.
    """
    if caller is None or not caller.is_admin:
        if not quiz.is_active:
            return AccessDecision(False, Inactive())
        error = check_window(quiz, now) or check_registration(quiz, caller, registrations)
        if error is not None:
            return AccessDecision(False, error)

    already_submitted = caller is not None and submissions.has_submitted(quiz.id, caller.email)
    return AccessDecision(True, already_submitted=already_submitted)


def ensure_can_submit(quiz: Optional[Quiz], caller: CallerIdentity, now: datetime,
                      registrations: RegistrationLookup, submissions: SubmissionLookup) -> Quiz:
    """
    Submission gate, applied at the submission instant.

    Inactive quizzes are unreachable and report ``NotFound``. There is no
    administrator bypass here.
    """
    if quiz is None or not quiz.is_active:
        raise NotFound()
    error = check_window(quiz, now) or check_registration(quiz, caller, registrations)
    if error is not None:
        raise error
    if submissions.has_submitted(quiz.id, caller.email):
        raise AlreadySubmitted()
    return quiz
