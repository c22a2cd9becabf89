"""Admin routes for events and their registration lists."""
from flask import jsonify, request, current_app
from flask_login import login_required
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from eventquiz import db
from eventquiz.admin import admin_bp
from eventquiz.auth.utils import is_valid_email, normalize_email
from eventquiz.common.decorators import admin_required
from eventquiz.events.models import Event, EventRegistration
from eventquiz.quiz.serializers import utc_isoformat

MAX_EVENT_NAME_LENGTH = 255


def _event_payload(event: Event, registration_count: int) -> dict:
    return {
        'id': event.id,
        'name': event.name,
        'created_at': utc_isoformat(event.created_at),
        'registration_count': registration_count,
    }


def _registration_payload(registration: EventRegistration) -> dict:
    return {
        'id': registration.id,
        'event_id': registration.event_id,
        'email': registration.email,
        'full_name': registration.full_name,
        'registered_at': utc_isoformat(registration.registered_at),
    }


def _event_not_found():
    return jsonify({'success': False, 'error': 'Event not found', 'reason': 'not_found'}), 404


@admin_bp.route('/api/events', methods=['GET'])
@login_required
@admin_required
def list_events():
    """List events with their registration counts."""
    try:
        reg_counts = db.session.query(
            EventRegistration.event_id,
            func.count(EventRegistration.id).label('reg_count')
        ).group_by(EventRegistration.event_id).subquery()

        rows = db.session.query(
            Event,
            func.coalesce(reg_counts.c.reg_count, 0)
        ).outerjoin(
            reg_counts, Event.id == reg_counts.c.event_id
        ).order_by(Event.created_at.desc(), Event.id.desc()).all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error listing events")
        return jsonify({'success': False, 'error': 'Could not load events', 'reason': 'storage_failure'}), 500

    return jsonify({'success': True, 'events': [_event_payload(event, count) for event, count in rows]}), 200


@admin_bp.route('/api/events', methods=['POST'])
@login_required
@admin_required
def create_event():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        return jsonify({'success': False, 'error': 'Event name is required', 'reason': 'invalid_input'}), 400
    name = name.strip()
    if len(name) > MAX_EVENT_NAME_LENGTH:
        return jsonify({
            'success': False,
            'error': f'Event name must be at most {MAX_EVENT_NAME_LENGTH} characters',
            'reason': 'invalid_input',
        }), 400

    event = Event(name=name)
    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error creating event")
        return jsonify({'success': False, 'error': 'Could not create event', 'reason': 'storage_failure'}), 500

    current_app.logger.info(f"Created event {event.id}")
    return jsonify({'success': True, 'event': _event_payload(event, 0)}), 201


@admin_bp.route('/api/events/<int:event_id>/registrations', methods=['GET'])
@login_required
@admin_required
def list_registrations(event_id):
    try:
        event = db.session.get(Event, event_id)
        if event is None:
            return _event_not_found()

        registrations = event.registrations.order_by(EventRegistration.registered_at.desc(),
                                                     EventRegistration.id.desc()).all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Error listing registrations for event {event_id}")
        return jsonify({
            'success': False,
            'error': 'Could not load registrations',
            'reason': 'storage_failure',
        }), 500

    return jsonify({
        'success': True,
        'event': _event_payload(event, len(registrations)),
        'registrations': [_registration_payload(r) for r in registrations],
    }), 200


@admin_bp.route('/api/events/<int:event_id>/registrations', methods=['POST'])
@login_required
@admin_required
def add_registration(event_id):
    """Register an email for an event. Emails are matched case-insensitively."""
    if db.session.get(Event, event_id) is None:
        return _event_not_found()

    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get('email'))
    full_name = data.get('full_name')
    if not email or not is_valid_email(email):
        return jsonify({'success': False, 'error': 'Please provide a valid email address',
                        'reason': 'invalid_input'}), 400
    if full_name is not None and not isinstance(full_name, str):
        return jsonify({'success': False, 'error': 'full_name must be a string', 'reason': 'invalid_input'}), 400

    registration = EventRegistration(
        event_id=event_id,
        email=email,
        full_name=(full_name or '').strip() or None,
    )
    try:
        db.session.add(registration)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'success': False, 'error': 'This email is already registered for the event',
                        'reason': 'already_registered'}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Error registering email for event {event_id}")
        return jsonify({'success': False, 'error': 'Could not save registration',
                        'reason': 'storage_failure'}), 500

    current_app.logger.info(f"Registered {email} for event {event_id}")
    return jsonify({'success': True, 'registration': _registration_payload(registration)}), 201
