"""
Caller identity as seen by the quiz engine.

The engine never touches Flask-Login directly; routes resolve the current
user into a ``CallerIdentity`` and pass it down.
"""
from dataclasses import dataclass
from typing import Optional

from flask_login import current_user

from eventquiz.auth.utils import normalize_email


@dataclass(frozen=True)
class CallerIdentity:
    email: str
    name: str
    is_admin: bool = False


def resolve_caller() -> Optional[CallerIdentity]:
    """Return the signed-in caller, or None for anonymous requests."""
    if not current_user.is_authenticated:
        return None
    email = normalize_email(current_user.email)
    name = (current_user.full_name or "").strip() or email
    return CallerIdentity(email=email, name=name, is_admin=current_user.is_admin())
