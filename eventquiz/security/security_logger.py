"""
Security logging module.

This module provides specialized logging for security events
such as failed logins, refused submissions and unauthorized access.
"""

from flask import request, current_app
from datetime import datetime


def _remote_addr() -> str:
    return request.remote_addr or 'unknown'


class SecurityLogger:
    """
    Security event logger.

    Logs security-related events for monitoring and auditing.
    """

    @staticmethod
    def log_failed_login(email: str, reason: str = "Invalid credentials"):
        """
        Log a failed login attempt.

        Args:
            email: Email address used in login attempt
            reason: Reason for failure
        """
        current_app.logger.warning(
            f"SECURITY: Failed login attempt - Email: {email}, "
            f"IP: {_remote_addr()}, Reason: {reason}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_successful_login(user_id: int, email: str):
        current_app.logger.info(
            f"SECURITY: Successful login - User ID: {user_id}, "
            f"Email: {email}, IP: {_remote_addr()}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_rate_limit_exceeded(identifier: str, endpoint: str):
        """
        Log rate limit exceeded.

        Args:
            identifier: User or IP identifier
            endpoint: Endpoint that was rate limited
        """
        current_app.logger.warning(
            f"SECURITY: Rate limit exceeded - Identifier: {identifier}, "
            f"Endpoint: {endpoint}, IP: {_remote_addr()}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_unauthorized_access(resource: str, user_id: int = None):
        """
        Log unauthorized access attempt.

        Args:
            resource: Resource that was accessed
            user_id: User ID if authenticated
        """
        user_info = f"User ID: {user_id}" if user_id else "Unauthenticated"
        current_app.logger.warning(
            f"SECURITY: Unauthorized access - {user_info}, "
            f"Resource: {resource}, IP: {_remote_addr()}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_refused_submission(quiz_id: int, email: str, reason: str):
        """
        Log a quiz submission refused by the eligibility checks.

        Args:
            quiz_id: Quiz the caller tried to submit
            email: Caller email
            reason: Stable reason code (``already_submitted``, ``ended``, ...)
        """
        current_app.logger.warning(
            f"SECURITY: Submission refused - Quiz: {quiz_id}, "
            f"Email: {email}, Reason: {reason}, IP: {_remote_addr()}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )
