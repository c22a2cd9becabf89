"""
Test cases for admin functionality.
"""
import io

import pytest
from sqlalchemy.exc import OperationalError

from conftest import create_event, create_quiz, login_as, question_payload, quiz_payload
from eventquiz import db
from eventquiz.events.models import Event
from eventquiz.quiz.models import Quiz, QuizQuestion, QuizQuestionOption, QuizResponse

ANSWERS = {'answers': [{'question_index': 0, 'selected_option': 1, 'time_taken': 3}]}


class TestAdminAccess:
    """Every admin endpoint needs a signed-in administrator."""

    @pytest.mark.parametrize('method,path', [
        ('get', '/admin/api/quizzes'),
        ('post', '/admin/api/quizzes'),
        ('get', '/admin/api/quizzes/1'),
        ('put', '/admin/api/quizzes/1'),
        ('patch', '/admin/api/quizzes/1/active'),
        ('delete', '/admin/api/quizzes/1'),
        ('get', '/admin/api/responses'),
        ('delete', '/admin/api/responses/1'),
        ('post', '/admin/api/uploads/images'),
        ('get', '/admin/api/events'),
        ('post', '/admin/api/events'),
        ('get', '/admin/api/events/1/registrations'),
        ('post', '/admin/api/events/1/registrations'),
    ])
    def test_anonymous_is_rejected(self, client, app, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.get_json()['reason'] == 'auth_required'

    def test_participant_is_forbidden(self, taker_client, app):
        response = taker_client.get('/admin/api/quizzes')
        assert response.status_code == 403
        assert response.get_json()['success'] is False


class TestQuizAuthoring:

    def test_create_quiz(self, admin_client, app):
        response = admin_client.post('/admin/api/quizzes', json=quiz_payload(
            title='Opening Quiz', feedback_link='https://example.com/feedback',
        ))
        assert response.status_code == 201
        data = response.get_json()['quiz']
        assert data['title'] == 'Opening Quiz'
        assert data['is_active'] is True
        assert data['response_count'] == 0
        assert [q['correct_answer'] for q in data['questions']] == [1, 0, 2]

        quiz = db_quiz(data['id'])
        assert quiz.get_question_count() == 3
        assert quiz.questions[0].option_texts() == ['Option A', 'Option B', 'Option C', 'Option D']

    @pytest.mark.parametrize('correct_answer', [-1, 4])
    def test_create_rejects_bad_key(self, admin_client, app, correct_answer):
        payload = quiz_payload()
        payload['questions'][0]['correct_answer'] = correct_answer
        response = admin_client.post('/admin/api/quizzes', json=payload)
        assert response.status_code == 400
        assert response.get_json()['reason'] == 'invalid_input'
        assert Quiz.query.count() == 0

    def test_create_rejects_unknown_event(self, admin_client, app):
        response = admin_client.post('/admin/api/quizzes', json=quiz_payload(linked_event_id=42))
        assert response.status_code == 400
        assert 'event' in response.get_json()['error']

    def test_create_linked_to_event(self, admin_client, app):
        event = create_event()
        response = admin_client.post('/admin/api/quizzes', json=quiz_payload(linked_event_id=event.id))
        assert response.status_code == 201
        assert response.get_json()['quiz']['linked_event_id'] == event.id

    def test_update_replaces_questions(self, admin_client, app):
        quiz = create_quiz(answer_key=(1, 0, 2))
        payload = quiz_payload(title='Renamed', answer_key=(3,))
        payload['questions'][0] = question_payload('Only question', correct_answer=3, time_limit_seconds=45)

        response = admin_client.put(f'/admin/api/quizzes/{quiz.id}', json=payload)
        assert response.status_code == 200
        data = response.get_json()['quiz']
        assert data['title'] == 'Renamed'
        assert data['question_count'] == 1
        assert data['questions'][0]['time_limit_seconds'] == 45
        assert QuizQuestion.query.count() == 1
        assert QuizQuestionOption.query.count() == 4

    def test_update_validates_like_create(self, admin_client, app):
        quiz = create_quiz()
        response = admin_client.put(f'/admin/api/quizzes/{quiz.id}', json={'title': 'x', 'questions': []})
        assert response.status_code == 400
        assert db_quiz(quiz.id).get_question_count() == 3

    def test_update_unknown_quiz(self, admin_client, app):
        assert admin_client.put('/admin/api/quizzes/404', json=quiz_payload()).status_code == 404

    def test_toggle_active(self, admin_client, app):
        quiz = create_quiz()
        response = admin_client.patch(f'/admin/api/quizzes/{quiz.id}/active', json={'is_active': False})
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'id': quiz.id, 'is_active': False}
        assert admin_client.get(f'/quiz/api/quizzes/{quiz.id}').status_code == 200  # admins still see it

    def test_toggle_requires_boolean(self, admin_client, app):
        quiz = create_quiz()
        response = admin_client.patch(f'/admin/api/quizzes/{quiz.id}/active', json={'is_active': 'no'})
        assert response.status_code == 400

    def test_get_quiz_includes_key(self, admin_client, app):
        quiz = create_quiz(answer_key=(2, 3))
        data = admin_client.get(f'/admin/api/quizzes/{quiz.id}').get_json()['quiz']
        assert [q['correct_answer'] for q in data['questions']] == [2, 3]

    def test_list_includes_inactive_and_counts(self, admin_client, admin_user, app):
        live = create_quiz(title='Live')
        create_quiz(title='Hidden', is_active=False)
        assert admin_client.post(f'/quiz/api/quizzes/{live.id}/submit', json=ANSWERS).status_code == 200

        quizzes = admin_client.get('/admin/api/quizzes').get_json()['quizzes']
        counts = {q['title']: q['response_count'] for q in quizzes}
        assert counts == {'Live': 1, 'Hidden': 0}

    def test_delete_quiz_cascades(self, admin_client, app):
        quiz = create_quiz()
        admin_client.post(f'/quiz/api/quizzes/{quiz.id}/submit', json=ANSWERS)
        response = admin_client.delete(f'/admin/api/quizzes/{quiz.id}')
        assert response.status_code == 200
        assert response.get_json()['deleted_responses'] == 1
        assert Quiz.query.count() == 0
        assert QuizResponse.query.count() == 0


class TestResponses:

    def test_list_and_delete(self, client, app, taker, admin_user):
        quiz = create_quiz(answer_key=(1,))
        login_as(client, taker)
        assert client.post(f'/quiz/api/quizzes/{quiz.id}/submit', json=ANSWERS).status_code == 200

        login_as(client, admin_user)
        responses = client.get(f'/admin/api/responses?quiz_id={quiz.id}').get_json()['responses']
        assert len(responses) == 1
        assert responses[0]['score'] == 1
        assert responses[0]['user_email'] == taker.email
        assert responses[0]['answers'] == ANSWERS['answers']

        assert client.delete(f"/admin/api/responses/{responses[0]['id']}").status_code == 200
        assert client.delete(f"/admin/api/responses/{responses[0]['id']}").status_code == 404

        # the participant may submit again once their response is gone
        login_as(client, taker)
        assert client.post(f'/quiz/api/quizzes/{quiz.id}/submit', json=ANSWERS).status_code == 200


class TestImageUpload:

    def test_upload_and_serve(self, admin_client, app):
        data = {'image': (io.BytesIO(b'\x89PNG fake image bytes'), 'diagram.PNG')}
        response = admin_client.post('/admin/api/uploads/images', data=data,
                                     content_type='multipart/form-data')
        assert response.status_code == 201
        url = response.get_json()['url']
        assert url.startswith('/uploads/quiz-images/')
        assert url.endswith('.png')

        served = admin_client.get(url)
        assert served.status_code == 200
        assert served.data == b'\x89PNG fake image bytes'

    def test_rejects_other_types(self, admin_client, app):
        data = {'image': (io.BytesIO(b'#!/bin/sh'), 'script.sh')}
        response = admin_client.post('/admin/api/uploads/images', data=data,
                                     content_type='multipart/form-data')
        assert response.status_code == 400

    def test_rejects_large_images(self, admin_client, app):
        app.config['MAX_IMAGE_SIZE'] = 16
        data = {'image': (io.BytesIO(b'x' * 17), 'big.jpg')}
        response = admin_client.post('/admin/api/uploads/images', data=data,
                                     content_type='multipart/form-data')
        assert response.status_code == 400

    def test_missing_file(self, admin_client, app):
        response = admin_client.post('/admin/api/uploads/images', data={},
                                     content_type='multipart/form-data')
        assert response.status_code == 400


class TestEvents:

    def test_create_and_register(self, admin_client, app):
        response = admin_client.post('/admin/api/events', json={'name': 'Tech Fest'})
        assert response.status_code == 201
        event_id = response.get_json()['event']['id']

        response = admin_client.post(f'/admin/api/events/{event_id}/registrations',
                                     json={'email': 'Guest@Example.com', 'full_name': 'Guest'})
        assert response.status_code == 201
        assert response.get_json()['registration']['email'] == 'guest@example.com'

        duplicate = admin_client.post(f'/admin/api/events/{event_id}/registrations',
                                      json={'email': 'guest@example.com'})
        assert duplicate.status_code == 409

        listing = admin_client.get(f'/admin/api/events/{event_id}/registrations').get_json()
        assert [r['email'] for r in listing['registrations']] == ['guest@example.com']

        events = admin_client.get('/admin/api/events').get_json()['events']
        assert events[0]['registration_count'] == 1

    def test_event_name_required(self, admin_client, app):
        assert admin_client.post('/admin/api/events', json={'name': ' '}).status_code == 400

    def test_registration_for_unknown_event(self, admin_client, app):
        response = admin_client.post('/admin/api/events/99/registrations', json={'email': 'a@example.com'})
        assert response.status_code == 404

    def test_invalid_registration_email(self, admin_client, app):
        event = create_event()
        response = admin_client.post(f'/admin/api/events/{event.id}/registrations', json={'email': 'nope'})
        assert response.status_code == 400

    def test_registration_listing_storage_failure(self, admin_client, app, monkeypatch):
        event = create_event(registered_emails=['guest@example.com'])
        original_get = db.session.get

        def failing_get(model, ident, *args, **kwargs):
            if model is Event:
                raise OperationalError('SELECT', {}, Exception('database is locked'))
            return original_get(model, ident, *args, **kwargs)

        monkeypatch.setattr(db.session, 'get', failing_get)
        response = admin_client.get(f'/admin/api/events/{event.id}/registrations')
        assert response.status_code == 500
        assert response.is_json
        assert response.get_json()['reason'] == 'storage_failure'

    def test_event_times_are_utc(self, admin_client, app):
        create_event()
        event = admin_client.get('/admin/api/events').get_json()['events'][0]
        assert event['created_at'].endswith('Z')


def db_quiz(quiz_id):
    return db.session.get(Quiz, quiz_id)
