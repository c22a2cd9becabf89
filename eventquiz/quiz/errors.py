"""
Error taxonomy for quiz access and submission.

Every error carries a stable ``reason`` code and an HTTP status. Payloads are
built here so that no route can leak the answer key or a score by accident.
"""
from datetime import datetime
from typing import Optional

from flask import jsonify

from eventquiz.quiz.serializers import utc_isoformat


class QuizError(Exception):
    reason = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_payload(self) -> dict:
        return {'success': False, 'error': self.message, 'reason': self.reason}


class AuthRequired(QuizError):
    reason = "auth_required"
    status_code = 401
    default_message = "Please sign in to continue"


class NotFound(QuizError):
    reason = "not_found"
    status_code = 404
    default_message = "Quiz not found"


class Inactive(QuizError):
    reason = "inactive"
    status_code = 403
    default_message = "This quiz is no longer available"


class NotStarted(QuizError):
    reason = "not_started"
    status_code = 403
    default_message = "This quiz is not available yet"

    def __init__(self, available_from: datetime, message: Optional[str] = None):
        super().__init__(message)
        self.available_from = available_from

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload['available_from'] = utc_isoformat(self.available_from)
        return payload


class Ended(QuizError):
    reason = "ended"
    status_code = 403
    default_message = "The time to attend this quiz is closed"


class NotRegistered(QuizError):
    reason = "not_registered"
    status_code = 403
    default_message = "You must be registered for this event to take the quiz"


class AlreadySubmitted(QuizError):
    reason = "already_submitted"
    status_code = 409
    default_message = "You have already submitted this quiz"


class InvalidInput(QuizError):
    reason = "invalid_input"
    status_code = 400
    default_message = "Invalid request"


class StorageFailure(QuizError):
    """Transient storage problem. The only error a caller may retry."""
    reason = "storage_failure"
    status_code = 500
    default_message = "Something went wrong, please try again"


def error_response(error: QuizError):
    return jsonify(error.to_payload()), error.status_code
