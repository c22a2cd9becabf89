import re

from flask import current_app
from passlib.hash import bcrypt


EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _truncate_password(plain_password: str) -> str:
    """Helper to consistently truncate password to its first 72 UTF-8 bytes."""
    # Encode to bytes, take the first 72 bytes, and decode back to a string,
    # ignoring any incomplete multi-byte characters at the truncation point.
    password_bytes = plain_password.encode('utf-8')[:72]
    return password_bytes.decode('utf-8', errors='ignore')


def hash_password(plain_password: str) -> str:
    """
    Hash password using bcrypt. It is truncated to the first 72 bytes
    of its UTF-8 encoding before hashing.
    """
    truncated = _truncate_password(plain_password)
    return bcrypt.hash(truncated)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a password against a hash, using the same truncation as hash_password."""
    truncated = _truncate_password(plain_password)
    return bcrypt.verify(truncated, password_hash)


def normalize_email(email) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email and EMAIL_REGEX.match(email))


def validate_password(password: str) -> tuple[bool, str | None]:
    """
    Basic server-side password validation.
    Returns (is_valid, error_message).
    """
    min_length = current_app.config.get("MIN_PASSWORD_LENGTH", 8)
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    return True, None
