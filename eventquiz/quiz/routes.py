"""
Participant routes for quiz functionality.

Participants can:
- List active quizzes, optionally for one event
- Fetch a quiz without its answer key
- Submit their answers once
"""
from flask import jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from eventquiz import db
from eventquiz.auth.identity import resolve_caller
from eventquiz.quiz import quiz_bp, service
from eventquiz.quiz.errors import QuizError, StorageFailure, error_response
from eventquiz.quiz.serializers import serialize_quiz_safe, serialize_quiz_summary
from eventquiz.security import SecurityLogger, rate_limit


def _storage_failure(action: str):
    db.session.rollback()
    current_app.logger.exception(f"Error {action}")
    return error_response(StorageFailure())


@quiz_bp.route('/api/quizzes', methods=['GET'])
def list_quizzes():
    """List active quizzes as summaries. Questions are served per quiz, behind the gate."""
    event_id = request.args.get('event_id', type=int)
    try:
        quizzes = service.list_available_quizzes(event_id)
    except SQLAlchemyError:
        return _storage_failure("listing quizzes")

    return jsonify({
        'success': True,
        'quizzes': [serialize_quiz_summary(quiz) for quiz in quizzes],
    }), 200


@quiz_bp.route('/api/quizzes/<int:quiz_id>', methods=['GET'])
def get_quiz(quiz_id):
    """
    Fetch one quiz for taking.

    The answer key is never part of this view, administrators included.
    ``already_submitted`` is advisory; the submit endpoint enforces it.
    """
    caller = resolve_caller()
    try:
        quiz, already_submitted = service.view_quiz(quiz_id, caller)
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"loading quiz {quiz_id}")

    return jsonify({
        'success': True,
        'quiz': serialize_quiz_safe(quiz, current_app.config['QUIZ_TRANSITION_DELAY_MS']),
        'already_submitted': already_submitted,
    }), 200


@quiz_bp.route('/api/quizzes/<int:quiz_id>/submit', methods=['POST'])
@rate_limit(per='user', config_prefix='SUBMIT_RATE',
            error_message='Too many submissions. Please try again later.')
def submit_quiz(quiz_id):
    """Score and store a submission. The response never carries the score."""
    caller = resolve_caller()
    payload = request.get_json(silent=True)
    try:
        result = service.submit_quiz(quiz_id, caller, payload)
    except QuizError as e:
        if caller is not None:
            SecurityLogger.log_refused_submission(quiz_id, caller.email, e.reason)
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"submitting quiz {quiz_id}")

    return jsonify({'success': True, 'feedback_link': result.feedback_link}), 200
