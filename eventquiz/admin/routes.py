"""Admin routes for authoring quizzes and reviewing responses."""
from flask import jsonify, request, current_app
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from eventquiz import db
from eventquiz.admin import admin_bp
from eventquiz.common.decorators import admin_required
from eventquiz.common.file_utils import ImageUploadError, save_question_image
from eventquiz.quiz import service
from eventquiz.quiz.errors import QuizError, StorageFailure, error_response
from eventquiz.quiz.serializers import serialize_quiz_admin, serialize_response


def _storage_failure(action: str):
    db.session.rollback()
    current_app.logger.exception(f"Error {action}")
    return error_response(StorageFailure())


@admin_bp.route('/api/quizzes', methods=['GET'])
@login_required
@admin_required
def list_quizzes():
    """All quizzes, active or not, with response counts and answer keys."""
    event_id = request.args.get('event_id', type=int)
    try:
        rows = service.list_quizzes_for_admin(event_id)
    except SQLAlchemyError:
        return _storage_failure("listing quizzes for admin")

    return jsonify({
        'success': True,
        'quizzes': [serialize_quiz_admin(quiz, count) for quiz, count in rows],
    }), 200


@admin_bp.route('/api/quizzes', methods=['POST'])
@login_required
@admin_required
def create_quiz():
    try:
        quiz = service.create_quiz(request.get_json(silent=True))
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure("creating quiz")

    return jsonify({'success': True, 'quiz': serialize_quiz_admin(quiz, 0)}), 201


@admin_bp.route('/api/quizzes/<int:quiz_id>', methods=['GET'])
@login_required
@admin_required
def get_quiz(quiz_id):
    try:
        quiz, count = service.get_quiz_for_admin(quiz_id)
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"loading quiz {quiz_id} for admin")

    return jsonify({'success': True, 'quiz': serialize_quiz_admin(quiz, count)}), 200


@admin_bp.route('/api/quizzes/<int:quiz_id>', methods=['PUT'])
@login_required
@admin_required
def update_quiz(quiz_id):
    """Replace a quiz's content. Questions are replaced wholesale; responses are kept."""
    try:
        quiz = service.update_quiz(quiz_id, request.get_json(silent=True))
        count = service.ledger.count_for_quiz(quiz.id)
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"updating quiz {quiz_id}")

    return jsonify({'success': True, 'quiz': serialize_quiz_admin(quiz, count)}), 200


@admin_bp.route('/api/quizzes/<int:quiz_id>/active', methods=['PATCH'])
@login_required
@admin_required
def toggle_quiz_active(quiz_id):
    data = request.get_json(silent=True) or {}
    try:
        quiz = service.set_quiz_active(quiz_id, data.get('is_active'))
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"toggling quiz {quiz_id}")

    return jsonify({'success': True, 'id': quiz.id, 'is_active': quiz.is_active}), 200


@admin_bp.route('/api/quizzes/<int:quiz_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_quiz(quiz_id):
    """Delete a quiz together with every response to it."""
    try:
        removed = service.delete_quiz(quiz_id)
    except QuizError as e:
        return error_response(e)
    except SQLAlchemyError:
        return _storage_failure(f"deleting quiz {quiz_id}")

    return jsonify({'success': True, 'deleted_responses': removed}), 200


@admin_bp.route('/api/responses', methods=['GET'])
@login_required
@admin_required
def list_responses():
    quiz_id = request.args.get('quiz_id', type=int)
    try:
        responses = service.list_responses(quiz_id)
    except SQLAlchemyError:
        return _storage_failure("listing responses")

    return jsonify({
        'success': True,
        'responses': [serialize_response(response) for response in responses],
    }), 200


@admin_bp.route('/api/responses/<int:response_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_response(response_id):
    try:
        service.delete_response(response_id)
    except QuizError as e:
        return error_response(e)

    return jsonify({'success': True}), 200


@admin_bp.route('/api/uploads/images', methods=['POST'])
@login_required
@admin_required
def upload_image():
    """Store a question image and return the URL to put in ``image_ref``."""
    try:
        saved = save_question_image(request.files.get('image'))
    except ImageUploadError as e:
        return jsonify({'success': False, 'error': str(e), 'reason': 'invalid_input'}), 400
    except OSError:
        current_app.logger.exception("Error saving question image")
        return error_response(StorageFailure("Could not store the image, please try again"))

    return jsonify({'success': True, **saved}), 201
