"""
Pytest configuration and fixtures for testing.

Each test gets a fresh app bound to an in-memory SQLite database.
"""
import os
from datetime import datetime, timedelta

import pytest
from flask import g

# Set test environment variables BEFORE the package builds its config
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'sfndsfojoriwew09rjfjndsknfkj'
os.environ['AUTH_API_PREFIX'] = '/auth/api'
os.environ['QUIZ_URL_PREFIX'] = '/quiz'
os.environ['ADMIN_URL_PREFIX'] = '/admin'
os.environ['MIN_PASSWORD_LENGTH'] = '8'

from eventquiz import create_app, db  # noqa: E402
from eventquiz.auth.identity import CallerIdentity  # noqa: E402
from eventquiz.auth.utils import hash_password  # noqa: E402
from eventquiz.auth.models import User  # noqa: E402
from eventquiz.events.models import Event, EventRegistration  # noqa: E402
from eventquiz.quiz.models import Quiz, QuizQuestion, QuizQuestionOption  # noqa: E402
from eventquiz.security import get_rate_limiter  # noqa: E402

TEST_PASSWORD = 'correct-horse-battery'
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


def make_app(database_uri, upload_dir, **overrides):
    settings = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': database_uri,
        'RATELIMIT_ENABLED': False,
        'UPLOAD_DIR': str(upload_dir),
    }
    settings.update(overrides)
    return create_app(settings)


@pytest.fixture
def app(tmp_path):
    """Create application for testing."""
    app = make_app('sqlite://', tmp_path / 'uploads')
    get_rate_limiter().reset()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def create_user(email='taker@example.com', full_name='Test Taker', user_type='participant'):
    user = User(
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        full_name=full_name,
        user_type=user_type,
    )
    db.session.add(user)
    db.session.commit()
    return user


def login_as(client, user):
    """Sign ``user`` in on ``client`` by writing Flask-Login's session keys."""
    # Requests reuse the pushed test app context, so drop the user cached on g
    g.pop('_login_user', None)
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True


def question_payload(text='Question', correct_answer=0, time_limit_seconds=30, image_ref=None):
    return {
        'question_text': text,
        'options': ['Option A', 'Option B', 'Option C', 'Option D'],
        'correct_answer': correct_answer,
        'time_limit_seconds': time_limit_seconds,
        'image_ref': image_ref,
    }


def quiz_payload(title='Event Quiz', answer_key=(1, 0, 2), **fields):
    payload = {
        'title': title,
        'questions': [question_payload(f'Question {i + 1}', correct) for i, correct in enumerate(answer_key)],
    }
    payload.update(fields)
    return payload


def create_quiz(title='Event Quiz', answer_key=(1, 0, 2), is_active=True, linked_event=None,
                available_from=None, available_until=None, feedback_link=None, time_limit_seconds=30):
    """Insert a quiz directly, bypassing the admin API."""
    quiz = Quiz(
        title=title,
        is_active=is_active,
        linked_event_id=linked_event.id if linked_event is not None else None,
        available_from=available_from,
        available_until=available_until,
        feedback_link=feedback_link,
        questions=[
            QuizQuestion(
                order_index=index,
                question_text=f'Question {index + 1}',
                correct_answer=correct,
                time_limit_seconds=time_limit_seconds,
                options=[
                    QuizQuestionOption(order_index=o, option_text=f'Option {o}')
                    for o in range(4)
                ],
            )
            for index, correct in enumerate(answer_key)
        ],
    )
    db.session.add(quiz)
    db.session.commit()
    return quiz


def create_event(name='Tech Fest', registered_emails=()):
    event = Event(name=name)
    db.session.add(event)
    for email in registered_emails:
        db.session.add(EventRegistration(event=event, email=email))
    db.session.commit()
    return event


def caller_for(user):
    return CallerIdentity(email=user.email, name=user.full_name, is_admin=user.is_admin())


def hours(n):
    return timedelta(hours=n)


def utcnow():
    return datetime.utcnow()


@pytest.fixture
def taker(app):
    return create_user()


@pytest.fixture
def admin_user(app):
    return create_user(email='admin@example.com', full_name='Quiz Admin', user_type='admin')


@pytest.fixture
def admin_client(client, admin_user):
    login_as(client, admin_user)
    return client


@pytest.fixture
def taker_client(client, taker):
    login_as(client, taker)
    return client
