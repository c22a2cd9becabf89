"""
Security headers module.

This module provides middleware to add security headers to all responses
to protect against various attacks.
"""

from flask import current_app


class SecurityHeaders:
    """
    Security headers middleware.

    Adds various security headers to HTTP responses to protect against
    common web vulnerabilities.
    """

    @staticmethod
    def init_app(app):
        """
        Initialize security headers for the Flask app.

        Args:
            app: Flask application instance
        """
        @app.after_request
        def add_security_headers(response):
            """Add security headers to all responses."""
            # The API only serves JSON and question images
            response.headers['Content-Security-Policy'] = "default-src 'none'; img-src 'self'; frame-ancestors 'none'"

            # X-Content-Type-Options: Prevent MIME type sniffing
            response.headers['X-Content-Type-Options'] = 'nosniff'

            # X-Frame-Options: Prevent clickjacking
            response.headers['X-Frame-Options'] = 'DENY'

            # Referrer-Policy: Control referrer information
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

            # Quiz payloads and submissions must never be cached by intermediaries
            if response.mimetype == 'application/json':
                response.cache_control.no_store = True

            # Strict-Transport-Security: Force HTTPS (only in production)
            if current_app.config.get('SESSION_COOKIE_SECURE', False):
                response.headers['Strict-Transport-Security'] = (
                    'max-age=31536000; includeSubDomains; preload'
                )

            return response
