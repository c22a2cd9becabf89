"""
Rate limiting module to prevent abuse and brute force attacks.

This module provides rate limiting functionality using in-memory storage
to track request counts per IP address or user, per endpoint.
"""

from functools import wraps
from flask import request, jsonify, current_app, make_response
from collections import defaultdict
import threading
import time

from .security_logger import SecurityLogger


class RateLimiter:
    """
    Rate limiter that tracks requests per IP address or user.

    Uses a sliding window algorithm to track requests within a time period.
    """

    def __init__(self):
        """Initialize the rate limiter with empty storage."""
        self._storage = defaultdict(list)
        self._lock = threading.Lock()
        self._cleanup_interval = 3600  # Clean up old entries every hour
        self._last_cleanup = time.time()

    def _cleanup_old_entries(self):
        """Remove old entries that are outside the time window."""
        current_time = time.time()
        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        with self._lock:
            cutoff = current_time - 3600
            keys_to_delete = []
            for key, timestamps in self._storage.items():
                self._storage[key] = [ts for ts in timestamps if ts > cutoff]
                if not self._storage[key]:
                    keys_to_delete.append(key)

            for key in keys_to_delete:
                del self._storage[key]

            self._last_cleanup = current_time

    def is_allowed(self, identifier: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
        """
        Check if a request is allowed based on rate limit.

        Args:
            identifier: Unique identifier (endpoint plus IP address or user ID)
            max_requests: Maximum number of requests allowed
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        self._cleanup_old_entries()

        current_time = time.time()
        cutoff = current_time - window_seconds

        with self._lock:
            timestamps = self._storage[identifier]
            timestamps[:] = [ts for ts in timestamps if ts > cutoff]

            # Check BEFORE adding current request
            if len(timestamps) >= max_requests:
                return False, 0

            timestamps.append(current_time)
            return True, max_requests - len(timestamps)

    def reset(self, identifier: str | None = None):
        """Reset rate limit for one identifier, or for everything."""
        with self._lock:
            if identifier is None:
                self._storage.clear()
            elif identifier in self._storage:
                del self._storage[identifier]


# Global rate limiter instance
_rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return _rate_limiter


def _resolve_identifier(per: str) -> str:
    if per == 'user':
        from flask_login import current_user
        if current_user.is_authenticated:
            return f"user:{current_user.id}"
    # Fallback to IP if user not authenticated
    ip = request.remote_addr or request.environ.get('REMOTE_ADDR', 'unknown')
    return f"ip:{ip}"


def rate_limit(max_requests: int = 10, window_seconds: int = 60, per: str = 'ip',
               config_prefix: str | None = None,
               error_message: str = "Rate limit exceeded. Please try again later."):
    """
    Decorator to rate limit a route.

    Args:
        max_requests: Maximum number of requests allowed
        window_seconds: Time window in seconds
        per: Rate limit per 'ip' or 'user'
        config_prefix: When set, ``<prefix>_LIMIT`` and ``<prefix>_WINDOW_SECONDS``
            from the app config override the two numbers above
        error_message: Error message to return when limit exceeded

    Example:
        @app.route('/api/login')
        @rate_limit(max_requests=5, window_seconds=60)  # 5 requests per 1 minute
        def login():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_app.config.get('RATELIMIT_ENABLED', True):
                return f(*args, **kwargs)

            limit, window = max_requests, window_seconds
            if config_prefix:
                limit = current_app.config.get(f"{config_prefix}_LIMIT", limit)
                window = current_app.config.get(f"{config_prefix}_WINDOW_SECONDS", window)

            identifier = _resolve_identifier(per)
            is_allowed, remaining = _rate_limiter.is_allowed(
                f"{request.endpoint}:{identifier}", limit, window
            )

            if not is_allowed:
                SecurityLogger.log_rate_limit_exceeded(identifier, request.path)
                response = make_response(jsonify({
                    'success': False,
                    'error': error_message,
                    'reason': 'rate_limited',
                    'retry_after': window
                }), 429)
                response.headers['X-RateLimit-Limit'] = str(limit)
                response.headers['X-RateLimit-Remaining'] = '0'
                response.headers['X-RateLimit-Reset'] = str(int(time.time()) + window)
                return response

            response = make_response(f(*args, **kwargs))
            response.headers['X-RateLimit-Limit'] = str(limit)
            response.headers['X-RateLimit-Remaining'] = str(remaining)
            response.headers['X-RateLimit-Reset'] = str(int(time.time()) + window)
            return response

        return decorated_function
    return decorator
