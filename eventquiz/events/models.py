from datetime import datetime

from eventquiz import db


class Event(db.Model):
    """An event whose registration list can gate quizzes."""
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    registrations = db.relationship(
        "EventRegistration", backref="event", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Event {self.id}: {self.name}>"


class EventRegistration(db.Model):
    """One registered email for an event. Emails are stored lower-cased."""
    __tablename__ = "event_registrations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete='CASCADE'), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=True)
    registered_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('event_id', 'email', name='uq_event_registration_email'),
    )

    def __repr__(self) -> str:
        return f"<EventRegistration event={self.event_id} email={self.email}>"
