"""Registration lookups used by the quiz eligibility checks."""
from eventquiz import db
from eventquiz.auth.utils import normalize_email
from eventquiz.events.models import Event, EventRegistration


class RegistrationDirectory:
    """Answers "is this email registered for that event?" from the database."""

    def is_registered(self, event_id: int, email: str) -> bool:
        email = normalize_email(email)
        if not email:
            return False
        return db.session.query(EventRegistration.id).filter_by(
            event_id=event_id, email=email
        ).first() is not None

    def event_exists(self, event_id: int) -> bool:
        return db.session.get(Event, event_id) is not None
